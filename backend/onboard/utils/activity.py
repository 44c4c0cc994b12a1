"""Helper for recording admin audit entries.

Usage:
    await log_admin_activity(
        db, admin, action="APPROVE_DOCUMENT", target_type="DOCUMENT",
        target_id=document.id, details={"file_name": document.file_name},
    )

The row is added to the current session and committed with the
enclosing transaction, together with the change it describes.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from onboard.models.activity_log import AdminActivityLog
from onboard.models.client import Client

logger = logging.getLogger(__name__)


async def log_admin_activity(
    db: AsyncSession,
    admin: Client,
    *,
    action: str,
    target_type: str,
    target_id: str,
    details: dict | None = None,
) -> AdminActivityLog:
    """Append an audit entry to the current DB session."""
    entry = AdminActivityLog(
        admin_id=admin.id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        details=details,
    )
    db.add(entry)
    logger.info("Admin %s: %s %s %s", admin.email, action, target_type, target_id)
    return entry
