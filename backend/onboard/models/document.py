"""Metadata for files held by the external object store (never the bytes)."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from onboard.database import Base, utcnow


class DocumentCategory(str, enum.Enum):
    ID_DOCUMENT = "ID_DOCUMENT"
    BUSINESS_LICENSE = "BUSINESS_LICENSE"
    TAX_DOCUMENT = "TAX_DOCUMENT"
    PROOF_OF_ADDRESS = "PROOF_OF_ADDRESS"
    OTHER = "OTHER"


class VerificationStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Document(Base):
    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    client_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ── File (as reported by the uploader) ─────────────────────
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    file_key: Mapped[str] = mapped_column(String(255), nullable=False)
    file_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[DocumentCategory] = mapped_column(
        SAEnum(DocumentCategory), nullable=False
    )
    custom_doc_type: Mapped[str | None] = mapped_column(String(100))

    # ── Review ─────────────────────────────────────────────────
    # PENDING -> APPROVED | REJECTED, never back to PENDING
    verification_status: Mapped[VerificationStatus] = mapped_column(
        SAEnum(VerificationStatus),
        default=VerificationStatus.PENDING,
        nullable=False,
        index=True,
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime)

    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False, index=True
    )

    client = relationship("Client", back_populates="documents")
