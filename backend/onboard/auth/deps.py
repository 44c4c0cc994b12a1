"""FastAPI dependencies for authentication and authorization.

Dependencies:
  get_current_client   → decode the Bearer access token, load the Client
  get_optional_client  → same, but None instead of 401 (logout)
  require_admin        → restrict to role ADMIN
"""

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from onboard.auth.jwt import ACCESS, decode_token
from onboard.database import get_db
from onboard.middleware.exceptions import ForbiddenError, UnauthorizedError
from onboard.models.client import Client, Role

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


async def _resolve_client(token: str | None, db: AsyncSession) -> Client:
    if not token:
        raise UnauthorizedError("No token provided")

    # Expired, malformed and wrong-type tokens all look the same to callers
    try:
        payload = decode_token(token, ACCESS)
    except UnauthorizedError:
        raise UnauthorizedError("Invalid or expired token")

    client = await db.get(Client, payload["sub"])
    if not client:
        raise UnauthorizedError("Invalid or expired token")
    return client


async def get_current_client(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Client:
    """Return the authenticated client or raise 401."""
    return await _resolve_client(token, db)


async def get_optional_client(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Client | None:
    """Return the authenticated client, or None when the token is missing or bad."""
    if not token:
        return None
    try:
        return await _resolve_client(token, db)
    except UnauthorizedError:
        return None


async def require_admin(
    client: Client = Depends(get_current_client),
) -> Client:
    """Restrict endpoint to admins only."""
    if client.role != Role.ADMIN:
        raise ForbiddenError("Admin access required")
    return client
