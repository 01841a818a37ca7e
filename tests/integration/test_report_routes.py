"""
Integration tests for report routes.
"""

import re

import pytest
from httpx import AsyncClient

from src.core.config import settings

pytestmark = pytest.mark.integration

REPORT_ID = re.compile(r"^R\d{6}\d{5}$")


class TestReportLifecycle:
    @pytest.mark.asyncio
    async def test_create_assigns_sequential_id_and_notifies_assignee(
        self, async_client: AsyncClient, user_headers, make_db_user, headers_for
    ):
        worker = await make_db_user("worker@example.com", "STAFF", name="Worker")

        first = await async_client.post(
            "/api/reports",
            json={"title": "Leaking pipe", "assigneeId": str(worker.id), "priority": "HIGH"},
            headers=user_headers,
        )
        second = await async_client.post(
            "/api/reports", json={"title": "Broken light"}, headers=user_headers
        )

        assert first.status_code == 201
        report = first.json()["data"]
        assert REPORT_ID.match(report["id"])
        assert report["status"] == "UNCONFIRMED"
        assert int(second.json()["data"]["id"][-5:]) == int(report["id"][-5:]) + 1

        inbox = await async_client.get("/api/notifications", headers=headers_for(worker))
        data = inbox.json()["data"]
        assert data["unreadCount"] == 1
        assert data["items"][0]["relatedId"] == report["id"]
        assert data["items"][0]["relatedType"] == "REPORT"

    @pytest.mark.asyncio
    async def test_missing_title(self, async_client: AsyncClient, user_headers):
        response = await async_client.post("/api/reports", json={}, headers=user_headers)

        assert response.status_code == 400
        assert response.json()["code"] == "REQUIRED_FIELD"

    @pytest.mark.asyncio
    async def test_status_change_notifies_creator(
        self, async_client: AsyncClient, user_headers, admin_headers
    ):
        created = await async_client.post(
            "/api/reports", json={"title": "Noisy fan"}, headers=user_headers
        )
        report_id = created.json()["data"]["id"]

        updated = await async_client.put(
            f"/api/reports/{report_id}", json={"status": "PROCESSING"}, headers=admin_headers
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["status"] == "PROCESSING"
        history = [entry["content"] for entry in updated.json()["data"]["activityLogs"]]
        assert "Status changed from UNCONFIRMED to PROCESSING" in history

        inbox = await async_client.get("/api/notifications", headers=user_headers)
        assert inbox.json()["data"]["unreadCount"] == 1

    @pytest.mark.asyncio
    async def test_listing_requires_view_permission(
        self, async_client: AsyncClient, user_headers, admin_headers
    ):
        await async_client.post("/api/reports", json={"title": "Door"}, headers=user_headers)

        denied = await async_client.get("/api/reports", headers=user_headers)
        listed = await async_client.get(
            "/api/reports", params={"page": 1, "pageSize": 10}, headers=admin_headers
        )

        assert denied.status_code == 403
        assert listed.status_code == 200
        body = listed.json()
        assert body["meta"]["total"] == 1
        assert body["meta"]["pageSize"] == 10

    @pytest.mark.asyncio
    async def test_unknown_report(self, async_client: AsyncClient, admin_headers):
        response = await async_client.get("/api/reports/R26101899999", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_page_size_over_limit(self, async_client: AsyncClient, admin_headers):
        response = await async_client.get(
            "/api/reports",
            params={"pageSize": settings.max_page_size + 1},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
