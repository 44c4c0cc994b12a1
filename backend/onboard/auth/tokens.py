"""Token lifecycle: refresh-token rotation and single-use opaque tokens.

Refresh tokens are rotated, never reused: each successful refresh deletes
the presented row and persists a brand-new token in the same transaction.
The delete has to hit exactly one row, so when two requests race on the
same token the loser finds nothing and fails with 401 instead of minting
a second lineage.

Password-reset and email-verification tokens are random hex strings. At
most one of each kind is alive per client: issuing deletes the previous
ones, consuming deletes them all.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from onboard.auth.jwt import (
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    refresh_token_expiry,
)
from onboard.database import utcnow
from onboard.middleware.exceptions import BadRequestError, UnauthorizedError
from onboard.models.client import Client
from onboard.models.tokens import (
    EmailVerificationToken,
    PasswordResetToken,
    RefreshToken,
)

logger = logging.getLogger(__name__)

SingleUseTokenModel = type[PasswordResetToken] | type[EmailVerificationToken]


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str


# ── Refresh tokens ──────────────────────────────────────────

async def issue_token_pair(db: AsyncSession, client: Client) -> TokenPair:
    """Sign an access + refresh token and persist the refresh token.

    The client's expired refresh rows are dropped on the way, so repeated
    logins do not pile up dead sessions.
    """
    await db.execute(
        delete(RefreshToken).where(
            RefreshToken.client_id == client.id,
            RefreshToken.expires_at < utcnow(),
        )
    )
    pair = TokenPair(
        access_token=create_access_token(client.id, client.email),
        refresh_token=create_refresh_token(client.id, client.email),
    )
    db.add(RefreshToken(
        token=pair.refresh_token,
        client_id=client.id,
        expires_at=refresh_token_expiry(),
    ))
    await db.flush()
    return pair


async def rotate_refresh_token(db: AsyncSession, raw_token: str) -> TokenPair:
    """Exchange a refresh token for a new pair, consuming the old one."""
    decode_token(raw_token, REFRESH)

    stored = (
        await db.execute(select(RefreshToken).where(RefreshToken.token == raw_token))
    ).scalar_one_or_none()
    if not stored:
        raise UnauthorizedError("Invalid refresh token")

    if stored.is_expired():
        await db.execute(delete(RefreshToken).where(RefreshToken.id == stored.id))
        # Persist the cleanup even though the request fails
        await db.commit()
        raise UnauthorizedError("Refresh token expired")

    result = await db.execute(
        delete(RefreshToken).where(RefreshToken.id == stored.id)
    )
    if result.rowcount != 1:
        # Consumed by a concurrent refresh
        raise UnauthorizedError("Invalid refresh token")

    client = await db.get(Client, stored.client_id)
    if not client:
        raise UnauthorizedError("Invalid refresh token")

    return await issue_token_pair(db, client)


async def revoke_refresh_tokens(
    db: AsyncSession,
    *,
    token: str | None = None,
    client_id: str | None = None,
) -> int:
    """Delete a single refresh token and/or every token of a client."""
    removed = 0
    if token:
        result = await db.execute(delete(RefreshToken).where(RefreshToken.token == token))
        removed += result.rowcount or 0
    if client_id:
        result = await db.execute(
            delete(RefreshToken).where(RefreshToken.client_id == client_id)
        )
        removed += result.rowcount or 0
    return removed


async def purge_expired_tokens(db: AsyncSession) -> dict[str, int]:
    """Delete every expired refresh, reset and verification row."""
    now = utcnow()
    purged = {}
    for model in (RefreshToken, PasswordResetToken, EmailVerificationToken):
        result = await db.execute(delete(model).where(model.expires_at < now))
        purged[model.__tablename__] = result.rowcount or 0
    logger.info("Purged expired tokens: %s", purged)
    return purged


# ── Single-use opaque tokens ────────────────────────────────

def generate_opaque_token() -> str:
    return secrets.token_hex(32)


async def issue_single_use_token(
    db: AsyncSession,
    model: SingleUseTokenModel,
    client_id: str,
    ttl: timedelta,
) -> str:
    """Replace any outstanding token of this kind with a fresh one."""
    await db.execute(delete(model).where(model.client_id == client_id))
    token = generate_opaque_token()
    db.add(model(token=token, client_id=client_id, expires_at=utcnow() + ttl))
    await db.flush()
    return token


async def consume_single_use_token(
    db: AsyncSession,
    model: SingleUseTokenModel,
    raw_token: str,
    *,
    label: str,
) -> str:
    """Validate and consume a token; returns the owning client id.

    `label` names the token in error messages ("reset", "verification").
    """
    stored = (
        await db.execute(select(model).where(model.token == raw_token))
    ).scalar_one_or_none()
    if not stored:
        raise BadRequestError(f"Invalid or expired {label} token")

    if stored.is_expired():
        await db.execute(delete(model).where(model.id == stored.id))
        await db.commit()
        raise BadRequestError(f"{label.capitalize()} token has expired")

    client_id = stored.client_id
    await db.execute(delete(model).where(model.client_id == client_id))
    logger.debug("Consumed %s token for client %s", label, client_id)
    return client_id
