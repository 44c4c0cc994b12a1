"""Admin review of client documents, with an audit entry for every action.

Status moves PENDING -> APPROVED | REJECTED. Setting a status is not
guarded by the current one: re-approving an approved document is allowed
and is audited again. Bulk operations only touch PENDING documents.
"""

import logging

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from onboard.database import utcnow
from onboard.middleware.exceptions import BadRequestError, ResourceNotFoundError
from onboard.models.client import Client, Role
from onboard.models.document import Document, VerificationStatus
from onboard.models.onboarding import OnboardingProgress, OnboardingStatus
from onboard.schemas.admin import AdminStats
from onboard.utils.activity import log_admin_activity

logger = logging.getLogger(__name__)


async def set_document_status(
    db: AsyncSession,
    admin: Client,
    document_id: str,
    status: VerificationStatus,
    rejection_reason: str | None = None,
) -> Document:
    document = (
        await db.execute(
            select(Document)
            .where(Document.id == document_id)
            .options(selectinload(Document.client))
        )
    ).scalar_one_or_none()
    if not document:
        raise ResourceNotFoundError("Document")

    rejected = status == VerificationStatus.REJECTED
    document.verification_status = status
    document.rejection_reason = rejection_reason if rejected else None
    document.verified_at = utcnow()

    details = {
        "file_name": document.file_name,
        "client_email": document.client.email,
    }
    if rejected:
        details["rejection_reason"] = rejection_reason

    await log_admin_activity(
        db,
        admin,
        action="REJECT_DOCUMENT" if rejected else "APPROVE_DOCUMENT",
        target_type="DOCUMENT",
        target_id=document.id,
        details=details,
    )
    await db.flush()
    return document


async def bulk_approve(db: AsyncSession, admin: Client, document_ids: list[str]) -> int:
    """Approve the PENDING documents among `document_ids`; returns how many."""
    pending_ids = list(
        (
            await db.execute(
                select(Document.id).where(
                    Document.id.in_(document_ids),
                    Document.verification_status == VerificationStatus.PENDING,
                )
            )
        ).scalars().all()
    )
    if not pending_ids:
        raise BadRequestError("No pending documents found to approve")

    await db.execute(
        update(Document)
        .where(Document.id.in_(pending_ids))
        .values(verification_status=VerificationStatus.APPROVED, verified_at=utcnow())
    )
    await log_admin_activity(
        db,
        admin,
        action="BULK_APPROVE",
        target_type="DOCUMENT",
        target_id="bulk",
        details={"count": len(pending_ids), "document_ids": pending_ids},
    )
    await db.flush()
    return len(pending_ids)


async def approve_all_for_client(
    db: AsyncSession, admin: Client, client_id: str
) -> tuple[Client, int]:
    client = await db.get(Client, client_id)
    if not client:
        raise ResourceNotFoundError("Client")

    pending = (
        await db.execute(
            select(func.count(Document.id)).where(
                Document.client_id == client_id,
                Document.verification_status == VerificationStatus.PENDING,
            )
        )
    ).scalar_one()
    if not pending:
        raise BadRequestError("No pending documents found for this client")

    result = await db.execute(
        update(Document)
        .where(
            Document.client_id == client_id,
            Document.verification_status == VerificationStatus.PENDING,
        )
        .values(verification_status=VerificationStatus.APPROVED, verified_at=utcnow())
    )
    count = result.rowcount or pending

    await log_admin_activity(
        db,
        admin,
        action="APPROVE_ALL_FOR_CLIENT",
        target_type="CLIENT",
        target_id=client_id,
        details={"client_email": client.email, "count": count},
    )
    await db.flush()
    return client, count


async def get_stats(db: AsyncSession) -> AdminStats:
    total_clients = (
        await db.execute(select(func.count(Client.id)).where(Client.role == Role.USER))
    ).scalar_one()

    rows = (
        await db.execute(
            select(Document.verification_status, func.count(Document.id))
            .group_by(Document.verification_status)
        )
    ).all()
    by_status = {status: count for status, count in rows}

    completed = (
        await db.execute(
            select(func.count(OnboardingProgress.id)).where(
                OnboardingProgress.status == OnboardingStatus.COMPLETED
            )
        )
    ).scalar_one()

    return AdminStats(
        total_clients=total_clients,
        pending_documents=by_status.get(VerificationStatus.PENDING, 0),
        approved_documents=by_status.get(VerificationStatus.APPROVED, 0),
        rejected_documents=by_status.get(VerificationStatus.REJECTED, 0),
        completed_onboarding=completed,
    )
