"""Pydantic schemas for the onboarding wizard.

Every step schema uses Optional fields so a draft save accepts partial
input. The `...Complete` variants are used for final validation when
marking a step as completed. Unknown keys are kept: the payload is stored
as submitted.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from onboard.models.onboarding import OnboardingStatus, StepStatus
from onboard.schemas.validators import PHONE_PATTERN, strip_text


class _StepPayload(BaseModel):
    model_config = ConfigDict(extra="allow")


# ── Step 1: Personal info ───────────────────────────────────

class PersonalInfoData(_StepPayload):
    first_name: str | None = Field(default=None, max_length=50)
    last_name: str | None = Field(default=None, max_length=50)
    company_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=20, pattern=PHONE_PATTERN)

    # Merged onto the client on completion, so the profile rules apply
    @field_validator("first_name", "last_name", "company_name", "phone", mode="before")
    @classmethod
    def _strip(cls, v):
        return strip_text(v)


class PersonalInfoComplete(PersonalInfoData):
    """first_name is required to mark step 1 complete."""
    first_name: str = Field(min_length=1, max_length=50)


# ── Step 2: Documents ───────────────────────────────────────

class DocumentsStepData(_StepPayload):
    document_ids: list[str] | None = None
    uploaded_categories: list[str] | None = None


# ── Step 3: Verification ────────────────────────────────────

class VerificationStepData(_StepPayload):
    acknowledged: bool | None = None


# ── Step 4: Final setup ─────────────────────────────────────

class Preferences(BaseModel):
    notifications: bool | None = None
    newsletter: bool | None = None
    timezone: str | None = None


class FinalSetupData(_StepPayload):
    preferences: Preferences | None = None
    terms_accepted: bool | None = None


class FinalSetupComplete(FinalSetupData):
    terms_accepted: bool

    @model_validator(mode="after")
    def _terms_accepted(self):
        if not self.terms_accepted:
            raise ValueError("You must accept the terms and conditions")
        return self


# step_number -> (draft schema, completion schema)
STEP_SCHEMAS: dict[int, tuple[type[BaseModel], type[BaseModel]]] = {
    1: (PersonalInfoData, PersonalInfoComplete),
    2: (DocumentsStepData, DocumentsStepData),
    3: (VerificationStepData, VerificationStepData),
    4: (FinalSetupData, FinalSetupComplete),
}


def validate_step_data(step_number: int, data: dict, *, complete: bool) -> dict:
    """Validate a step payload; raises pydantic.ValidationError on bad input.

    Steps without a registered schema accept any JSON object.
    """
    schemas = STEP_SCHEMAS.get(step_number)
    if schemas is None:
        return data
    schema = schemas[1] if complete else schemas[0]
    return schema.model_validate(data).model_dump(mode="json", exclude_unset=True)


# ── Requests ─────────────────────────────────────────────────

class StepDataRequest(BaseModel):
    data: dict[str, Any] | None = None


# ── Responses ────────────────────────────────────────────────

class StepOut(BaseModel):
    id: str
    step_number: int
    name: str
    title: str
    description: str
    is_required: bool

    model_config = {"from_attributes": True}


class StepStatusOut(StepOut):
    status: StepStatus = StepStatus.PENDING
    data: dict | None = None
    completed_at: datetime | None = None


class OnboardingStatusOut(BaseModel):
    current_step: int
    total_steps: int
    status: OnboardingStatus
    completed_at: datetime | None = None
    steps: list[StepStatusOut]


class StepProgressOut(BaseModel):
    step_number: int
    status: StepStatus
    data: dict | None = None
    completed_at: datetime | None = None


class StepCompletionOut(BaseModel):
    step_progress: StepProgressOut
    current_step: int
    status: OnboardingStatus
    completed_at: datetime | None = None
    is_complete: bool
