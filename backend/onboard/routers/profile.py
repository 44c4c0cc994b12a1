"""The authenticated client's own profile.

Endpoints:
  GET    /                  → profile + onboarding summary
  PUT    /                  → replace the editable fields
  PATCH  /                  → update only the fields sent
  POST   /change-password   → requires the current password
  DELETE /account           → remove the client and everything it owns
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from onboard.auth.deps import get_current_client
from onboard.auth.password import hash_password, verify_password
from onboard.database import get_db
from onboard.middleware.exceptions import BadRequestError, UnauthorizedError
from onboard.models.client import Client
from onboard.models.document import Document
from onboard.schemas.common import ApiResponse, MessageResponse
from onboard.schemas.profile import (
    ChangePasswordRequest,
    ProfileOut,
    ProfileUpdate,
)
from onboard.services.storage import delete_files, extract_file_key_from_url

logger = logging.getLogger(__name__)

router = APIRouter()


async def _profile_out(db: AsyncSession, client: Client) -> ProfileOut:
    await db.refresh(client, attribute_names=["onboarding_progress"])
    return ProfileOut.model_validate(client)


async def _apply_update(
    db: AsyncSession, client: Client, body: ProfileUpdate, *, partial: bool
) -> ProfileOut:
    changes = body.changes(partial=partial)
    if not changes:
        raise BadRequestError("No valid fields to update")
    for field, value in changes.items():
        setattr(client, field, value)
    await db.flush()
    await db.refresh(client)
    return await _profile_out(db, client)


@router.get("", response_model=ApiResponse[ProfileOut])
async def get_profile(
    db: AsyncSession = Depends(get_db),
    client: Client = Depends(get_current_client),
):
    return {"data": await _profile_out(db, client)}


@router.put("", response_model=ApiResponse[ProfileOut])
async def update_profile(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    client: Client = Depends(get_current_client),
):
    return {
        "data": await _apply_update(db, client, body, partial=False),
        "message": "Profile updated successfully",
    }


@router.patch("", response_model=ApiResponse[ProfileOut])
async def patch_profile(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    client: Client = Depends(get_current_client),
):
    return {
        "data": await _apply_update(db, client, body, partial=True),
        "message": "Profile updated successfully",
    }


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    client: Client = Depends(get_current_client),
):
    if not verify_password(body.current_password, client.password_hash):
        raise UnauthorizedError("Current password is incorrect")

    client.password_hash = hash_password(body.new_password)
    logger.info("Client %s changed password", client.id)
    return {"message": "Password changed successfully"}


@router.delete("/account", response_model=MessageResponse)
async def delete_account(
    db: AsyncSession = Depends(get_db),
    client: Client = Depends(get_current_client),
):
    """Delete the client; tokens, progress and documents go with it (ON DELETE CASCADE).

    Stored files are removed first, best effort: a storage failure never
    blocks the account deletion.
    """
    file_keys = list(
        (
            await db.execute(select(Document.file_key).where(Document.client_id == client.id))
        ).scalars().all()
    )
    avatar_key = extract_file_key_from_url(client.avatar_url)
    if avatar_key:
        file_keys.append(avatar_key)

    result = await delete_files(file_keys)
    if not result.success:
        logger.warning("Storage cleanup failed for client %s: %s", client.id, result.errors)

    await db.execute(delete(Client).where(Client.id == client.id))
    logger.info("Client %s deleted their account", client.id)
    return {"message": "Account deleted successfully"}
