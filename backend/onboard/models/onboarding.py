"""Onboarding catalog and per-client progress.

`OnboardingStep` is global reference data (seeded once). Each client owns
one `OnboardingProgress` row; `StepProgress` rows are created lazily the
first time the client touches a step.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from onboard.database import Base, utcnow


class OnboardingStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class StepStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    SKIPPED = "SKIPPED"


class OnboardingStep(Base):
    __tablename__ = "onboarding_steps"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    step_number: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_required: Mapped[bool] = mapped_column(Boolean, default=True)


class OnboardingProgress(Base):
    __tablename__ = "onboarding_progress"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    client_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("clients.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    current_step: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    status: Mapped[OnboardingStatus] = mapped_column(
        SAEnum(OnboardingStatus), default=OnboardingStatus.PENDING, nullable=False
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    client = relationship("Client", back_populates="onboarding_progress")
    step_progress = relationship(
        "StepProgress", back_populates="progress", passive_deletes=True
    )


class StepProgress(Base):
    __tablename__ = "step_progress"
    __table_args__ = (
        UniqueConstraint(
            "onboarding_progress_id",
            "onboarding_step_id",
            name="uq_step_progress_progress_step",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    onboarding_progress_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("onboarding_progress.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    onboarding_step_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("onboarding_steps.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[StepStatus] = mapped_column(
        SAEnum(StepStatus), default=StepStatus.PENDING, nullable=False
    )
    # Submitted step payload, validated per step before it lands here
    data: Mapped[dict | None] = mapped_column(JSON, default=None)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)

    progress = relationship("OnboardingProgress", back_populates="step_progress")
    step = relationship("OnboardingStep")
