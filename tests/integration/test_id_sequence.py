"""
Integration tests for sequential id generation under concurrency.
"""

import asyncio
from datetime import UTC, datetime

import pytest

from src.services.id_service import IdService

pytestmark = pytest.mark.integration

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


class TestConcurrentIds:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("prefix", ["R", "W"])
    async def test_concurrent_callers_get_contiguous_numbers(self, session_factory, prefix):
        callers = 12

        async def issue() -> str:
            async with session_factory() as session:
                new_id = await IdService(session).generate_id(prefix, now=NOW)
                await session.commit()
                return new_id

        ids = await asyncio.gather(*(issue() for _ in range(callers)))

        assert len(set(ids)) == callers
        assert all(new_id.startswith(f"{prefix}261019") for new_id in ids)
        assert sorted(int(new_id[-5:]) for new_id in ids) == list(range(1, callers + 1))

    @pytest.mark.asyncio
    async def test_rolled_back_number_is_reissued(self, session_factory):
        async with session_factory() as session:
            await IdService(session).generate_id("R", now=NOW)
            await session.rollback()

        async with session_factory() as session:
            new_id = await IdService(session).generate_id("R", now=NOW)
            await session.commit()

        assert new_id == "R26101900001"
