"""
Unit tests for IdService.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from src.services.id_service import IdService


@pytest.fixture
def mock_session():
    session = AsyncMock()
    result = MagicMock()
    result.scalar_one.return_value = 7
    session.execute.return_value = result
    return session


NOW = datetime(2026, 10, 18, 9, 30, tzinfo=UTC)


class TestGenerateId:
    @pytest.mark.asyncio
    async def test_report_id_format(self, mock_session):
        new_id = await IdService(mock_session).generate_id("R", now=NOW)

        assert new_id == "R26101800007"

    @pytest.mark.asyncio
    async def test_ticket_prefix(self, mock_session):
        new_id = await IdService(mock_session).generate_id("W", now=NOW)

        assert new_id.startswith("W261018")
        assert len(new_id) == 12

    @pytest.mark.asyncio
    async def test_unknown_prefix(self, mock_session):
        with pytest.raises(ValueError):
            await IdService(mock_session).generate_id("X", now=NOW)

        mock_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_upserts_day_counter(self, mock_session):
        """One atomic upsert keyed by model and day, returning the new value."""
        await IdService(mock_session).generate_id("R", now=NOW)

        stmt = mock_session.execute.call_args.args[0]
        sql = str(stmt.compile(dialect=postgresql.dialect()))
        params = stmt.compile(dialect=postgresql.dialect()).params

        assert "ON CONFLICT (id) DO UPDATE" in sql
        assert "RETURNING" in sql
        assert params["id"] == "Report-261018"
        assert params["date"] == "261018"
