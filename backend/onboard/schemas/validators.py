"""Reusable field checks shared by the profile, onboarding and document schemas.

Bounds mirror the column widths in `onboard.models`, so input that passes
validation always fits the row it is written to.
"""

from typing import Any

MAX_URL_LENGTH = 1024  # documents.file_url, clients.avatar_url
MAX_FILE_SIZE = 2_147_483_647  # documents.file_size is a 32-bit INTEGER

PHONE_PATTERN = r"^[\d\s\-+()]*$"


def strip_text(value: Any) -> Any:
    """Trim surrounding whitespace; non-strings pass through untouched."""
    return value.strip() if isinstance(value, str) else value


def check_url_length(value: Any) -> Any:
    if value is not None and len(str(value)) > MAX_URL_LENGTH:
        raise ValueError(f"URL must be at most {MAX_URL_LENGTH} characters")
    return value
