"""Pydantic schemas for the authenticated client's own profile."""

from datetime import datetime

from pydantic import BaseModel, Field, HttpUrl, field_validator

from onboard.auth.password import check_password_strength
from onboard.models.client import Role
from onboard.models.onboarding import OnboardingStatus
from onboard.schemas.validators import PHONE_PATTERN, check_url_length, strip_text


class OnboardingSummary(BaseModel):
    current_step: int
    status: OnboardingStatus
    completed_at: datetime | None = None

    model_config = {"from_attributes": True}


class ProfileOut(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    company_name: str | None = None
    phone: str | None = None
    avatar_url: str | None = None
    email_verified: bool
    role: Role
    created_at: datetime
    updated_at: datetime
    onboarding_progress: OnboardingSummary | None = None

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    """PUT and PATCH body. PATCH only applies the fields that were sent."""
    first_name: str | None = Field(default=None, min_length=1, max_length=50)
    last_name: str | None = Field(default=None, min_length=1, max_length=50)
    company_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=20, pattern=PHONE_PATTERN)
    avatar_url: HttpUrl | None = None

    @field_validator("first_name", "last_name", "company_name", mode="before")
    @classmethod
    def _strip(cls, v):
        return strip_text(v)

    @field_validator("avatar_url")
    @classmethod
    def _url_fits_column(cls, v):
        return check_url_length(v)

    def changes(self, *, partial: bool) -> dict:
        data = self.model_dump(exclude_unset=partial)
        # Names are NOT NULL; an explicit null leaves them untouched
        for key in ("first_name", "last_name"):
            if key in data and data[key] is None:
                del data[key]
        if data.get("avatar_url") is not None:
            data["avatar_url"] = str(data["avatar_url"])
        return data


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def _strong_password(cls, v: str) -> str:
        return check_password_strength(v)
