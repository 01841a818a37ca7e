"""
Integration tests for ticket dispatch, visibility and claiming.
"""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.integration


async def role_id(client: AsyncClient, headers, name: str) -> str:
    response = await client.get(f"/api/roles/{name}", headers=headers)
    return response.json()["data"]["id"]


class TestDispatchAndClaim:
    @pytest.mark.asyncio
    async def test_dispatch_visibility_and_claim(
        self, async_client: AsyncClient, admin_headers, make_db_user, headers_for
    ):
        first = await make_db_user("first@example.com", "STAFF", name="First")
        second = await make_db_user("second@example.com", "STAFF", name="Second")
        outsider = await make_db_user("outsider@example.com", "MAINTENANCE_WORKER")

        created = await async_client.post(
            "/api/tickets",
            json={
                "title": "Replace filter",
                "description": "Air handler 2",
                "roleId": await role_id(async_client, admin_headers, "STAFF"),
            },
            headers=admin_headers,
        )
        assert created.status_code == 201
        ticket = created.json()["data"]
        assert ticket["id"].startswith("W")
        assert ticket["status"] == "PENDING"

        for member in (first, second):
            inbox = await async_client.get("/api/notifications", headers=headers_for(member))
            assert inbox.json()["data"]["unreadCount"] == 1

        visible = await async_client.get("/api/tickets", headers=headers_for(second))
        hidden = await async_client.get("/api/tickets", headers=headers_for(outsider))
        assert [t["id"] for t in visible.json()["data"]] == [ticket["id"]]
        assert hidden.json()["data"] == []

        claimed = await async_client.post(
            f"/api/tickets/{ticket['id']}/claim", headers=headers_for(first)
        )
        assert claimed.status_code == 200
        assert claimed.json()["data"]["status"] == "IN_PROGRESS"
        assert claimed.json()["data"]["assignee"]["id"] == str(first.id)

        again = await async_client.post(
            f"/api/tickets/{ticket['id']}/claim", headers=headers_for(first)
        )
        assert again.status_code == 409

        # no longer pending, so the rest of the team stops seeing it
        gone = await async_client.get(f"/api/tickets/{ticket['id']}", headers=headers_for(second))
        assert gone.status_code == 404

    @pytest.mark.asyncio
    async def test_review_closes_ticket(
        self, async_client: AsyncClient, admin_headers, make_db_user, headers_for
    ):
        worker = await make_db_user("worker@example.com", "STAFF", name="Worker")
        created = await async_client.post(
            "/api/tickets",
            json={"title": "Fix door", "description": "Lobby", "assigneeId": str(worker.id)},
            headers=admin_headers,
        )
        ticket_id = created.json()["data"]["id"]
        assert created.json()["data"]["status"] == "IN_PROGRESS"

        bad = await async_client.post(
            f"/api/tickets/{ticket_id}/reviews",
            json={"content": "Done", "finalStatus": "PENDING"},
            headers=headers_for(worker),
        )
        assert bad.status_code == 400

        review = await async_client.post(
            f"/api/tickets/{ticket_id}/reviews",
            json={"content": "Hinge replaced", "finalStatus": "COMPLETED"},
            headers=headers_for(worker),
        )
        assert review.status_code == 201

        detail = await async_client.get(f"/api/tickets/{ticket_id}", headers=admin_headers)
        data = detail.json()["data"]
        assert data["status"] == "COMPLETED"
        assert [r["content"] for r in data["reviews"]] == ["Hinge replaced"]

    @pytest.mark.asyncio
    async def test_create_requires_permission(self, async_client: AsyncClient, user_headers):
        response = await async_client.post(
            "/api/tickets", json={"title": "x", "description": "y"}, headers=user_headers
        )

        assert response.status_code == 403
        assert response.json()["details"]["required"] == ["create_tickets"]
