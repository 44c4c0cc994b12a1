"""Pydantic schemas for the admin review console."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from onboard.models.onboarding import OnboardingStatus
from onboard.schemas.common import Pagination
from onboard.schemas.document import DocumentOut


# ── Review actions ───────────────────────────────────────────

class DocumentStatusUpdate(BaseModel):
    status: Literal["APPROVED", "REJECTED"]
    rejection_reason: str | None = Field(default=None, max_length=1000)


class BulkApproveRequest(BaseModel):
    document_ids: list[str] = Field(min_length=1)


class ApprovedCount(BaseModel):
    approved_count: int


class AdminStats(BaseModel):
    total_clients: int
    pending_documents: int
    approved_documents: int
    rejected_documents: int
    completed_onboarding: int


# ── Listings ─────────────────────────────────────────────────

class ClientRef(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str

    model_config = {"from_attributes": True}


class AdminDocumentOut(DocumentOut):
    client: ClientRef


class AdminDocumentPage(BaseModel):
    documents: list[AdminDocumentOut]
    pagination: Pagination


class ActivityOut(BaseModel):
    id: str
    action: str
    target_type: str
    target_id: str
    details: dict | None = None
    created_at: datetime
    admin: ClientRef

    model_config = {"from_attributes": True}


class ActivityPage(BaseModel):
    logs: list[ActivityOut]
    pagination: Pagination


class ProgressSummary(BaseModel):
    current_step: int
    status: OnboardingStatus
    completed_at: datetime | None = None

    model_config = {"from_attributes": True}


class AdminClientOut(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    company_name: str | None = None
    email_verified: bool
    created_at: datetime
    onboarding_progress: ProgressSummary | None = None
    document_count: int = 0


class ClientPage(BaseModel):
    clients: list[AdminClientOut]
    pagination: Pagination


class AdminClientDetail(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    company_name: str | None = None
    phone: str | None = None
    avatar_url: str | None = None
    email_verified: bool
    created_at: datetime
    onboarding_progress: ProgressSummary | None = None
    documents: list[DocumentOut] = []

    model_config = {"from_attributes": True}
