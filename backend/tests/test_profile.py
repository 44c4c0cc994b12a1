"""Profile endpoint tests."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import TEST_PASSWORD
from onboard.models import (
    Client,
    Document,
    OnboardingProgress,
    RefreshToken,
    StepProgress,
)
from onboard.services.storage import DeleteResult


@pytest.mark.api
@pytest.mark.asyncio
class TestProfile:

    async def test_get_profile(self, client: AsyncClient, auth_headers, test_user: Client):
        response = await client.get("/api/v1/profile", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == test_user.email
        assert data["role"] == "USER"
        assert data["onboarding_progress"]["current_step"] == 1
        assert "password_hash" not in data

    async def test_patch_only_touches_sent_fields(self, client: AsyncClient, auth_headers):
        await client.patch(
            "/api/v1/profile", headers=auth_headers, json={"company_name": "Acme"}
        )

        response = await client.patch(
            "/api/v1/profile", headers=auth_headers, json={"phone": "+1 (555) 010-2030"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["phone"] == "+1 (555) 010-2030"
        assert data["company_name"] == "Acme"
        assert data["first_name"] == "Test"

    async def test_put_replaces_optional_fields(self, client: AsyncClient, auth_headers):
        await client.patch(
            "/api/v1/profile", headers=auth_headers, json={"company_name": "Acme"}
        )

        response = await client.put(
            "/api/v1/profile",
            headers=auth_headers,
            json={"first_name": "  Grace  ", "avatar_url": "https://utfs.io/f/me.png"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["first_name"] == "Grace"
        assert data["last_name"] == "User"
        assert data["company_name"] is None
        assert data["avatar_url"] == "https://utfs.io/f/me.png"
        assert response.json()["message"] == "Profile updated successfully"

    async def test_empty_patch_is_rejected(self, client: AsyncClient, auth_headers):
        response = await client.patch("/api/v1/profile", headers=auth_headers, json={})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "No valid fields to update"

    @pytest.mark.parametrize(
        "body",
        [
            {"phone": "call me maybe"},
            {"first_name": ""},
            {"avatar_url": "not-a-url"},
            {"avatar_url": "https://example.com/" + "a" * 1100},
        ],
    )
    async def test_invalid_update(self, client: AsyncClient, auth_headers, body):
        response = await client.patch("/api/v1/profile", headers=auth_headers, json=body)
        assert response.status_code == 422


@pytest.mark.auth
@pytest.mark.asyncio
class TestChangePassword:

    async def test_change_password(self, client: AsyncClient, auth_headers, test_user: Client):
        response = await client.post(
            "/api/v1/profile/change-password",
            headers=auth_headers,
            json={"current_password": TEST_PASSWORD, "new_password": "Changed456"},
        )
        assert response.status_code == 200

        old = await client.post(
            "/api/v1/auth/login",
            json={"email": test_user.email, "password": TEST_PASSWORD},
        )
        new = await client.post(
            "/api/v1/auth/login",
            json={"email": test_user.email, "password": "Changed456"},
        )
        assert old.status_code == 401
        assert new.status_code == 200

    async def test_wrong_current_password(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/v1/profile/change-password",
            headers=auth_headers,
            json={"current_password": "Nope12345", "new_password": "Changed456"},
        )

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Current password is incorrect"

    async def test_weak_new_password(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/v1/profile/change-password",
            headers=auth_headers,
            json={"current_password": TEST_PASSWORD, "new_password": "alllowercase1"},
        )
        assert response.status_code == 422


@pytest.mark.api
@pytest.mark.asyncio
class TestDeleteAccount:

    async def test_delete_account_removes_everything(
        self, client: AsyncClient, db_session: AsyncSession, test_user: Client, auth_headers
    ):
        await client.post(
            "/api/v1/auth/login",
            json={"email": test_user.email, "password": TEST_PASSWORD},
        )
        await client.put(
            "/api/v1/onboarding/steps/1/data",
            headers=auth_headers,
            json={"data": {"company_name": "Acme"}},
        )
        await client.patch(
            "/api/v1/profile",
            headers=auth_headers,
            json={"avatar_url": "https://utfs.io/f/avatar-key"},
        )
        await client.post(
            "/api/v1/documents",
            headers=auth_headers,
            json={
                "file_name": "id.pdf",
                "file_url": "https://utfs.io/f/doc-key",
                "file_key": "doc-key",
                "file_type": "application/pdf",
                "file_size": 100,
                "category": "ID_DOCUMENT",
            },
        )

        with patch(
            "onboard.routers.profile.delete_files",
            new=AsyncMock(return_value=DeleteResult(success=True, deleted_count=2)),
        ) as delete_files:
            response = await client.delete("/api/v1/profile/account", headers=auth_headers)

        assert response.status_code == 200
        delete_files.assert_awaited_once_with(["doc-key", "avatar-key"])

        for model, column in (
            (Client, Client.id),
            (RefreshToken, RefreshToken.client_id),
            (OnboardingProgress, OnboardingProgress.client_id),
            (Document, Document.client_id),
        ):
            count = (
                await db_session.execute(
                    select(func.count()).select_from(model).where(column == test_user.id)
                )
            ).scalar_one()
            assert count == 0, model.__name__

        orphans = (
            await db_session.execute(select(func.count(StepProgress.id)))
        ).scalar_one()
        assert orphans == 0

    async def test_storage_failure_does_not_block_deletion(
        self, client: AsyncClient, db_session: AsyncSession, test_user: Client, auth_headers
    ):
        with patch(
            "onboard.routers.profile.delete_files",
            new=AsyncMock(return_value=DeleteResult(success=False, errors=["boom"])),
        ):
            response = await client.delete("/api/v1/profile/account", headers=auth_headers)

        assert response.status_code == 200
        remaining = (
            await db_session.execute(
                select(func.count(Client.id)).where(Client.id == test_user.id)
            )
        ).scalar_one()
        assert remaining == 0

    async def test_token_of_deleted_account_is_rejected(
        self, client: AsyncClient, auth_headers
    ):
        with patch(
            "onboard.routers.profile.delete_files",
            new=AsyncMock(return_value=DeleteResult(success=True)),
        ):
            await client.delete("/api/v1/profile/account", headers=auth_headers)

        response = await client.get("/api/v1/profile", headers=auth_headers)
        assert response.status_code == 401
