"""Admin console: document review, client overview, audit log.

Every route requires role ADMIN. Review actions live in
`onboard.services.review`; this module only reads and paginates.

Endpoints:
  GET   /stats
  GET   /activity                     (paginated, newest first)
  GET   /clients                      (paginated, ?search=)
  GET   /clients/{id}
  POST  /clients/{id}/approve-all
  GET   /documents                    (paginated, ?status=&search=)
  PATCH /documents/{id}
  POST  /documents/bulk-approve
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from onboard.auth.deps import require_admin
from onboard.database import get_db
from onboard.middleware.exceptions import ResourceNotFoundError
from onboard.models.activity_log import AdminActivityLog
from onboard.models.client import Client, Role
from onboard.models.document import Document, VerificationStatus
from onboard.schemas.admin import (
    ActivityOut,
    ActivityPage,
    AdminClientDetail,
    AdminClientOut,
    AdminDocumentOut,
    AdminDocumentPage,
    AdminStats,
    ApprovedCount,
    BulkApproveRequest,
    ClientPage,
    DocumentStatusUpdate,
    ProgressSummary,
)
from onboard.schemas.common import ApiResponse, Pagination
from onboard.schemas.document import DocumentOut
from onboard.services import review

router = APIRouter()

DEFAULT_PAGE_SIZE = 20
MAX_DOCUMENT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 50


# ── Helpers ──────────────────────────────────────────────────

def _page_window(page: int, limit: int, max_limit: int) -> tuple[int, int, int]:
    """Clamp paging input; returns (page, limit, offset)."""
    page = max(1, page)
    limit = min(max_limit, max(1, limit))
    return page, limit, (page - 1) * limit


def _client_search(term: str | None):
    if not term or not term.strip():
        return None
    pattern = f"%{term.strip()}%"
    return or_(
        Client.first_name.ilike(pattern),
        Client.last_name.ilike(pattern),
        Client.email.ilike(pattern),
    )


# ── Stats / activity ─────────────────────────────────────────

@router.get("/stats", response_model=ApiResponse[AdminStats])
async def get_stats(
    db: AsyncSession = Depends(get_db),
    _admin: Client = Depends(require_admin),
):
    return {"data": await review.get_stats(db)}


@router.get("/activity", response_model=ApiResponse[ActivityPage])
async def get_activity(
    page: int = Query(default=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    _admin: Client = Depends(require_admin),
):
    page, limit, offset = _page_window(page, limit, MAX_PAGE_SIZE)

    total = (await db.execute(select(func.count(AdminActivityLog.id)))).scalar_one()
    logs = (
        await db.execute(
            select(AdminActivityLog)
            .options(selectinload(AdminActivityLog.admin))
            .order_by(AdminActivityLog.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
    ).scalars().all()

    return {
        "data": ActivityPage(
            logs=[ActivityOut.model_validate(log) for log in logs],
            pagination=Pagination.build(page, limit, total),
        ),
    }


# ── Clients ──────────────────────────────────────────────────

@router.get("/clients", response_model=ApiResponse[ClientPage])
async def list_clients(
    page: int = Query(default=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE),
    search: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _admin: Client = Depends(require_admin),
):
    page, limit, offset = _page_window(page, limit, MAX_PAGE_SIZE)

    filters = [Client.role == Role.USER]
    match = _client_search(search)
    if match is not None:
        filters.append(match)

    total = (
        await db.execute(select(func.count(Client.id)).where(*filters))
    ).scalar_one()
    clients = (
        await db.execute(
            select(Client)
            .where(*filters)
            .options(selectinload(Client.onboarding_progress))
            .order_by(Client.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
    ).scalars().all()

    counts: dict[str, int] = {}
    if clients:
        rows = await db.execute(
            select(Document.client_id, func.count(Document.id))
            .where(Document.client_id.in_([c.id for c in clients]))
            .group_by(Document.client_id)
        )
        counts = {client_id: n for client_id, n in rows.all()}

    items = [
        AdminClientOut(
            id=c.id,
            email=c.email,
            first_name=c.first_name,
            last_name=c.last_name,
            company_name=c.company_name,
            email_verified=c.email_verified,
            created_at=c.created_at,
            onboarding_progress=(
                ProgressSummary.model_validate(c.onboarding_progress)
                if c.onboarding_progress else None
            ),
            document_count=counts.get(c.id, 0),
        )
        for c in clients
    ]
    return {
        "data": ClientPage(clients=items, pagination=Pagination.build(page, limit, total)),
    }


@router.get("/clients/{client_id}", response_model=ApiResponse[AdminClientDetail])
async def get_client(
    client_id: str,
    db: AsyncSession = Depends(get_db),
    _admin: Client = Depends(require_admin),
):
    client = (
        await db.execute(
            select(Client)
            .where(Client.id == client_id)
            .options(
                selectinload(Client.onboarding_progress),
                selectinload(Client.documents),
            )
        )
    ).scalar_one_or_none()
    if not client:
        raise ResourceNotFoundError("Client")

    detail = AdminClientDetail.model_validate(client)
    detail.documents.sort(key=lambda d: d.uploaded_at, reverse=True)
    return {"data": detail}


@router.post("/clients/{client_id}/approve-all", response_model=ApiResponse[ApprovedCount])
async def approve_all_for_client(
    client_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Client = Depends(require_admin),
):
    client, count = await review.approve_all_for_client(db, admin, client_id)
    return {
        "data": ApprovedCount(approved_count=count),
        "message": f"{count} document(s) approved for {client.full_name}",
    }


# ── Documents ────────────────────────────────────────────────

@router.get("/documents", response_model=ApiResponse[AdminDocumentPage])
async def list_documents(
    status: VerificationStatus | None = Query(default=None),
    search: str | None = Query(default=None),
    page: int = Query(default=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    _admin: Client = Depends(require_admin),
):
    page, limit, offset = _page_window(page, limit, MAX_DOCUMENT_PAGE_SIZE)

    stmt = select(Document).join(Document.client)
    if status is not None:
        stmt = stmt.where(Document.verification_status == status)
    match = _client_search(search)
    if match is not None:
        stmt = stmt.where(match)

    total = (
        await db.execute(select(func.count()).select_from(stmt.subquery()))
    ).scalar_one()
    documents = (
        await db.execute(
            stmt.options(selectinload(Document.client))
            .order_by(Document.uploaded_at.desc())
            .offset(offset)
            .limit(limit)
        )
    ).scalars().all()

    return {
        "data": AdminDocumentPage(
            documents=[AdminDocumentOut.model_validate(d) for d in documents],
            pagination=Pagination.build(page, limit, total),
        ),
    }


@router.patch("/documents/{document_id}", response_model=ApiResponse[DocumentOut])
async def update_document_status(
    document_id: str,
    body: DocumentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: Client = Depends(require_admin),
):
    document = await review.set_document_status(
        db,
        admin,
        document_id,
        VerificationStatus(body.status),
        body.rejection_reason,
    )
    return {
        "data": DocumentOut.model_validate(document),
        "message": f"Document {body.status.lower()}",
    }


@router.post("/documents/bulk-approve", response_model=ApiResponse[ApprovedCount])
async def bulk_approve(
    body: BulkApproveRequest,
    db: AsyncSession = Depends(get_db),
    admin: Client = Depends(require_admin),
):
    count = await review.bulk_approve(db, admin, body.document_ids)
    return {
        "data": ApprovedCount(approved_count=count),
        "message": f"{count} document(s) approved",
    }
