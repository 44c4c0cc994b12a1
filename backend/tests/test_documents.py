"""Document registry endpoint tests."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import bearer, create_client
from onboard.models import Client, Document
from onboard.services.storage import DeleteResult, extract_file_key_from_url


def document_payload(**overrides) -> dict:
    payload = {
        "file_name": "passport.pdf",
        "file_url": "https://utfs.io/f/abc123-passport.pdf",
        "file_key": "abc123-passport.pdf",
        "file_type": "application/pdf",
        "file_size": 20480,
        "category": "ID_DOCUMENT",
    }
    payload.update(overrides)
    return payload


@pytest.mark.api
@pytest.mark.asyncio
class TestDocuments:

    async def test_add_document(self, client: AsyncClient, auth_headers, test_user: Client):
        response = await client.post(
            "/api/v1/documents", headers=auth_headers, json=document_payload()
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["client_id"] == test_user.id
        assert data["verification_status"] == "PENDING"
        assert data["category"] == "ID_DOCUMENT"
        assert data["rejection_reason"] is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"file_size": 0},
            {"category": "SELFIE"},
            {"file_url": "not a url"},
            {"file_name": ""},
            {"file_url": "https://utfs.io/f/" + "x" * 1100},
            {"file_size": 3_000_000_000},
        ],
    )
    async def test_add_document_validation(self, client: AsyncClient, auth_headers, overrides):
        response = await client.post(
            "/api/v1/documents", headers=auth_headers, json=document_payload(**overrides)
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_list_filters_by_category(self, client: AsyncClient, auth_headers):
        await client.post("/api/v1/documents", headers=auth_headers, json=document_payload())
        await client.post(
            "/api/v1/documents",
            headers=auth_headers,
            json=document_payload(file_name="bill.pdf", file_key="bill", category="PROOF_OF_ADDRESS"),
        )

        everything = await client.get("/api/v1/documents", headers=auth_headers)
        proofs = await client.get(
            "/api/v1/documents", headers=auth_headers, params={"category": "PROOF_OF_ADDRESS"}
        )

        assert len(everything.json()["data"]) == 2
        assert [d["file_name"] for d in proofs.json()["data"]] == ["bill.pdf"]

    async def test_list_only_own_documents(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        other = await create_client(db_session, "other@example.com")
        await client.post("/api/v1/documents", headers=bearer(other), json=document_payload())

        response = await client.get("/api/v1/documents", headers=auth_headers)

        assert response.json()["data"] == []

    async def test_delete_document_removes_stored_file(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        created = await client.post(
            "/api/v1/documents", headers=auth_headers, json=document_payload()
        )
        doc_id = created.json()["data"]["id"]

        with patch(
            "onboard.routers.documents.delete_files",
            new=AsyncMock(return_value=DeleteResult(success=True, deleted_count=1)),
        ) as delete_files:
            response = await client.delete(f"/api/v1/documents/{doc_id}", headers=auth_headers)

        assert response.status_code == 200
        delete_files.assert_awaited_once_with(["abc123-passport.pdf"])
        remaining = (
            await db_session.execute(select(func.count(Document.id)))
        ).scalar_one()
        assert remaining == 0

    async def test_cannot_delete_someone_elses_document(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        other = await create_client(db_session, "other@example.com")
        created = await client.post(
            "/api/v1/documents", headers=bearer(other), json=document_payload()
        )
        doc_id = created.json()["data"]["id"]

        response = await client.delete(f"/api/v1/documents/{doc_id}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Document not found"


@pytest.mark.unit
class TestFileKeys:

    @pytest.mark.parametrize(
        "url, key",
        [
            ("https://utfs.io/f/abc123.png", "abc123.png"),
            ("https://app1.ufs.sh/f/xyz", "xyz"),
            ("https://example.com/avatar.png", None),
            ("https://utfs.io/f/", None),
            ("", None),
            (None, None),
        ],
    )
    def test_extract_file_key_from_url(self, url, key):
        assert extract_file_key_from_url(url) == key
