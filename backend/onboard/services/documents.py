"""Document registry: metadata of files the client uploaded to object storage."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from onboard.middleware.exceptions import ResourceNotFoundError
from onboard.models.document import Document, DocumentCategory, VerificationStatus
from onboard.schemas.document import DocumentCreate

logger = logging.getLogger(__name__)


async def add_document(
    db: AsyncSession, client_id: str, payload: DocumentCreate
) -> Document:
    document = Document(
        client_id=client_id,
        file_name=payload.file_name,
        file_url=str(payload.file_url),
        file_key=payload.file_key,
        file_type=payload.file_type,
        file_size=payload.file_size,
        category=payload.category,
        custom_doc_type=payload.custom_doc_type,
        verification_status=VerificationStatus.PENDING,
    )
    db.add(document)
    await db.flush()
    await db.refresh(document)
    logger.info("Client %s added document %s (%s)", client_id, document.id, document.category.value)
    return document


async def list_documents(
    db: AsyncSession,
    client_id: str,
    category: DocumentCategory | None = None,
) -> list[Document]:
    """Newest first."""
    stmt = select(Document).where(Document.client_id == client_id)
    if category is not None:
        stmt = stmt.where(Document.category == category)
    stmt = stmt.order_by(Document.uploaded_at.desc())
    return list((await db.execute(stmt)).scalars().all())


async def delete_document(db: AsyncSession, client_id: str, document_id: str) -> Document:
    """Delete one of the client's documents and return the removed row.

    Another client's document is reported as not found.
    """
    document = (
        await db.execute(
            select(Document).where(
                Document.id == document_id,
                Document.client_id == client_id,
            )
        )
    ).scalar_one_or_none()
    if not document:
        raise ResourceNotFoundError("Document")

    await db.execute(delete(Document).where(Document.id == document.id))
    logger.info("Client %s deleted document %s", client_id, document_id)
    return document
