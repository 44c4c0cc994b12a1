"""Best-effort deletion of objects held by the external file store (UploadThing).

The API only keeps file metadata; the bytes live with UploadThing. When
`uploadthing_secret` is empty the deletions are logged and skipped.
Nothing here raises: callers delete their rows regardless of the outcome.
"""

import logging
from dataclasses import dataclass, field
from urllib.parse import urlparse

import httpx

from onboard.config import settings

logger = logging.getLogger(__name__)

UPLOADTHING_DELETE_URL = "https://api.uploadthing.com/v6/deleteFiles"


@dataclass
class DeleteResult:
    success: bool
    deleted_count: int = 0
    errors: list[str] = field(default_factory=list)


async def delete_files(keys: list[str]) -> DeleteResult:
    keys = [k for k in keys if k]
    if not keys:
        return DeleteResult(success=True)

    if not settings.uploadthing_secret:
        logger.info("Storage not configured, skipping deletion of %d file(s)", len(keys))
        return DeleteResult(success=True)

    try:
        async with httpx.AsyncClient(timeout=10) as client:
            response = await client.post(
                UPLOADTHING_DELETE_URL,
                json={"fileKeys": keys},
                headers={"X-Uploadthing-Api-Key": settings.uploadthing_secret},
            )
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error("Error deleting files from storage: %s", e)
        return DeleteResult(success=False, errors=[str(e)])

    logger.info("Deleted %d file(s) from storage", len(keys))
    return DeleteResult(success=True, deleted_count=len(keys))


def extract_file_key_from_url(url: str | None) -> str | None:
    """Return the key of a `https://utfs.io/f/{key}` style URL, or None."""
    if not url:
        return None
    try:
        path = urlparse(url).path
    except ValueError:
        return None
    if "/f/" not in path:
        return None
    key = path.split("/f/", 1)[1]
    return key or None
