from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from onboard.auth.password import check_password_strength
from onboard.models.client import Role


# ── Signup ───────────────────────────────────────────────────

class SignupRequest(BaseModel):
    email: EmailStr = Field(max_length=255)
    password: str
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def _strong_password(cls, v: str) -> str:
        return check_password_strength(v)


# ── Login / tokens ───────────────────────────────────────────

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class LogoutRequest(BaseModel):
    refresh_token: str | None = None


class Tokens(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class ClientSummary(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    company_name: str | None = None
    avatar_url: str | None = None
    email_verified: bool = False
    role: Role
    created_at: datetime

    model_config = {"from_attributes": True}


class AuthResult(BaseModel):
    client: ClientSummary
    tokens: Tokens


class RefreshResult(BaseModel):
    tokens: Tokens


# ── Password reset / email verification ─────────────────────

class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    password: str

    @field_validator("password")
    @classmethod
    def _strong_password(cls, v: str) -> str:
        return check_password_strength(v)


class VerifyEmailRequest(BaseModel):
    token: str = Field(min_length=1)
