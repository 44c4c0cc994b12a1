from datetime import datetime

from pydantic import BaseModel, Field, HttpUrl, field_validator

from onboard.models.document import DocumentCategory, VerificationStatus
from onboard.schemas.validators import MAX_FILE_SIZE, check_url_length


class DocumentCreate(BaseModel):
    """Metadata reported after the file landed in object storage."""
    file_name: str = Field(min_length=1, max_length=255)
    file_url: HttpUrl
    file_key: str = Field(min_length=1, max_length=255)
    file_type: str = Field(min_length=1, max_length=100)
    file_size: int = Field(gt=0, le=MAX_FILE_SIZE)
    category: DocumentCategory
    custom_doc_type: str | None = Field(default=None, max_length=100)

    @field_validator("file_url")
    @classmethod
    def _url_fits_column(cls, v):
        return check_url_length(v)


class DocumentOut(BaseModel):
    id: str
    client_id: str
    file_name: str
    file_url: str
    file_key: str
    file_type: str
    file_size: int
    category: DocumentCategory
    custom_doc_type: str | None = None
    verification_status: VerificationStatus
    rejection_reason: str | None = None
    verified_at: datetime | None = None
    uploaded_at: datetime

    model_config = {"from_attributes": True}
