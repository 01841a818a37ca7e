"""
Integration tests for saved views.
"""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.integration


async def save_view(client: AsyncClient, headers, name, view_type="REPORT", **extra):
    return await client.post(
        "/api/saved-views",
        json={"name": name, "viewType": view_type, "filters": extra.pop("filters", {}), **extra},
        headers=headers,
    )


class TestSavedViews:
    @pytest.mark.asyncio
    async def test_legacy_filters_are_stored_canonically(
        self, async_client: AsyncClient, user_headers
    ):
        response = await save_view(
            async_client,
            user_headers,
            "Leaks",
            filters={"searchTerm": "leak", "statusFilter": ["UNCONFIRMED"]},
        )

        assert response.status_code == 201
        assert response.json()["data"]["filters"] == {
            "search": "leak",
            "status": ["UNCONFIRMED"],
        }

    @pytest.mark.asyncio
    async def test_one_default_per_type(self, async_client: AsyncClient, user_headers):
        first = await save_view(async_client, user_headers, "First", isDefault=True)
        second = await save_view(async_client, user_headers, "Second", isDefault=True)
        ticket_view = await save_view(
            async_client, user_headers, "Tickets", view_type="TICKET", isDefault=True
        )
        assert first.status_code == second.status_code == ticket_view.status_code == 201

        views = await async_client.get(
            "/api/saved-views", params={"viewType": "REPORT"}, headers=user_headers
        )
        defaults = [v["name"] for v in views.json()["data"] if v["isDefault"]]
        assert defaults == ["Second"]

        swapped = await async_client.post(
            f"/api/saved-views/{first.json()['data']['id']}/set-default", headers=user_headers
        )
        assert swapped.status_code == 200

        views = await async_client.get("/api/saved-views", headers=user_headers)
        defaults = sorted(v["name"] for v in views.json()["data"] if v["isDefault"])
        assert defaults == ["First", "Tickets"]

    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts(self, async_client: AsyncClient, user_headers):
        await save_view(async_client, user_headers, "Mine")

        response = await save_view(async_client, user_headers, "Mine")

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_views_are_private(
        self, async_client: AsyncClient, user_headers, admin_headers
    ):
        created = await save_view(async_client, user_headers, "Private")
        view_id = created.json()["data"]["id"]

        response = await async_client.get(f"/api/saved-views/{view_id}", headers=admin_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_missing_filters(self, async_client: AsyncClient, user_headers):
        response = await async_client.post(
            "/api/saved-views",
            json={"name": "No filters", "viewType": "REPORT"},
            headers=user_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "REQUIRED_FIELD"
