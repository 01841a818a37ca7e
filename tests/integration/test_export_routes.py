"""
Integration tests for the xlsx exports and the anonymous report feed.
"""

from io import BytesIO

import pytest
from httpx import AsyncClient
from openpyxl import load_workbook

from src.services.spreadsheet import XLSX_MEDIA_TYPE

pytestmark = pytest.mark.integration


class TestExports:
    @pytest.mark.asyncio
    async def test_report_export(self, async_client: AsyncClient, admin_headers):
        await async_client.post("/api/reports", json={"title": "Leaking pipe"}, headers=admin_headers)
        await async_client.post("/api/reports", json={"title": "Broken light"}, headers=admin_headers)

        response = await async_client.post(
            "/api/reports/export", json={"search": "pipe"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == XLSX_MEDIA_TYPE
        assert "reports.xlsx" in response.headers["content-disposition"]
        rows = list(load_workbook(BytesIO(response.content)).active.iter_rows(values_only=True))
        assert [row[1] for row in rows[1:]] == ["Leaking pipe"]

    @pytest.mark.asyncio
    async def test_ticket_export(self, async_client: AsyncClient, admin_headers):
        await async_client.post(
            "/api/tickets",
            json={"title": "Replace filter", "description": "Air handler 2"},
            headers=admin_headers,
        )

        response = await async_client.post("/api/tickets/export", json={}, headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"] == XLSX_MEDIA_TYPE
        rows = list(load_workbook(BytesIO(response.content)).active.iter_rows(values_only=True))
        assert rows[0][0] == "ID"
        assert rows[1][1] == "Replace filter"

    @pytest.mark.asyncio
    async def test_export_requires_permission(self, async_client: AsyncClient, user_headers):
        tickets = await async_client.post("/api/tickets/export", json={}, headers=user_headers)
        reports = await async_client.post("/api/reports/export", json={}, headers=user_headers)

        assert tickets.status_code == 403
        assert reports.status_code == 403


class TestPublicFeed:
    @pytest.mark.asyncio
    async def test_anonymous_feed_lists_public_categories_only(
        self, async_client: AsyncClient, admin_headers
    ):
        public = await async_client.post(
            "/api/categories", json={"name": "Lost and found"}, headers=admin_headers
        )
        wallets = await async_client.post(
            "/api/categories",
            json={"name": "Wallets", "parentId": public.json()["data"]["id"]},
            headers=admin_headers,
        )
        private = await async_client.post(
            "/api/categories", json={"name": "Plumbing"}, headers=admin_headers
        )
        for title, category in (
            ("Black umbrella", public),
            ("Brown wallet", wallets),
            ("Leaking pipe", private),
        ):
            await async_client.post(
                "/api/reports",
                json={"title": title, "categoryId": category.json()["data"]["id"]},
                headers=admin_headers,
            )

        response = await async_client.get("/api/public/reports", params={"sortField": "id"})

        assert response.status_code == 200
        body = response.json()
        assert body["meta"]["total"] == 2
        assert sorted(r["title"] for r in body["data"]) == ["Black umbrella", "Brown wallet"]
        assert "creator" not in body["data"][0]
        assert body["data"][0]["attachments"] == []

    @pytest.mark.asyncio
    async def test_feed_is_empty_without_public_category(self, async_client: AsyncClient):
        response = await async_client.get("/api/public/reports")

        assert response.status_code == 200
        assert response.json()["data"] == []
