"""Client document registry.

Files are uploaded straight to object storage by the frontend; these
endpoints record, list and remove the metadata. Removing a document also
asks storage to delete the object (best effort).
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from onboard.auth.deps import get_current_client
from onboard.database import get_db
from onboard.models.client import Client
from onboard.models.document import DocumentCategory
from onboard.schemas.common import ApiResponse, MessageResponse
from onboard.schemas.document import DocumentCreate, DocumentOut
from onboard.services import documents as registry
from onboard.services.storage import delete_files

router = APIRouter()


@router.get("", response_model=ApiResponse[list[DocumentOut]])
async def list_documents(
    category: DocumentCategory | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    client: Client = Depends(get_current_client),
):
    docs = await registry.list_documents(db, client.id, category)
    return {"data": [DocumentOut.model_validate(d) for d in docs]}


@router.post(
    "",
    response_model=ApiResponse[DocumentOut],
    status_code=status.HTTP_201_CREATED,
)
async def add_document(
    body: DocumentCreate,
    db: AsyncSession = Depends(get_db),
    client: Client = Depends(get_current_client),
):
    document = await registry.add_document(db, client.id, body)
    return {"data": DocumentOut.model_validate(document)}


@router.delete("/{document_id}", response_model=MessageResponse)
async def delete_document(
    document_id: str,
    db: AsyncSession = Depends(get_db),
    client: Client = Depends(get_current_client),
):
    document = await registry.delete_document(db, client.id, document_id)
    await delete_files([document.file_key])
    return {"message": "Document deleted successfully"}
