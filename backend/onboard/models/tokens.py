"""Persisted credentials: refresh, password-reset and email-verification tokens.

All three share the same shape (opaque token string, owning client,
expiry) and are single-use: a row is deleted once it is consumed.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from onboard.database import Base, utcnow


class _ClientTokenMixin:
    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    @declared_attr
    def client_id(cls) -> Mapped[str]:
        return mapped_column(
            String(36),
            ForeignKey("clients.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at < (now or utcnow())


class RefreshToken(_ClientTokenMixin, Base):
    __tablename__ = "refresh_tokens"

    # Signed JWTs are longer than the opaque tokens below
    token: Mapped[str] = mapped_column(Text, unique=True, nullable=False)


class PasswordResetToken(_ClientTokenMixin, Base):
    __tablename__ = "password_reset_tokens"

    token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)


class EmailVerificationToken(_ClientTokenMixin, Base):
    __tablename__ = "email_verification_tokens"

    token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
