"""AdminActivityLog: append-only audit trail of admin review actions.

Rows are inserted by `log_admin_activity()` and never updated or deleted
(except by cascade when the acting admin account is removed).
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from onboard.database import Base, utcnow


class AdminActivityLog(Base):
    __tablename__ = "admin_activity_logs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # ── Who ────────────────────────────────────────────────────
    admin_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ── What ───────────────────────────────────────────────────
    # APPROVE_DOCUMENT | REJECT_DOCUMENT | BULK_APPROVE | APPROVE_ALL_FOR_CLIENT
    action: Mapped[str] = mapped_column(String(50), nullable=False)

    # ── Target ─────────────────────────────────────────────────
    # DOCUMENT | CLIENT
    target_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_id: Mapped[str] = mapped_column(String(36), nullable=False)

    # ── Context ────────────────────────────────────────────────
    details: Mapped[dict | None] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False, index=True
    )

    admin = relationship("Client")
