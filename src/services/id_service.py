"""
Sequential, human-readable ids for reports and tickets.

Ids look like ``R26101800001``: a one-letter prefix, the date as yymmdd and
a five-digit counter that restarts every day.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.id_sequence import IdSequence

logger = logging.getLogger(__name__)

PREFIX_MODELS = {
    "R": "Report",
    "W": "Ticket",
}


class IdService:
    """
    Issues the next id of the day for a prefix.

    The counter row is bumped with ``INSERT ... ON CONFLICT DO UPDATE ...
    RETURNING``, which takes a row lock: concurrent callers on the same day
    queue on that row and each receives a distinct number. The bump belongs
    to the caller's transaction, so a rolled-back creation also gives its
    number back.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def generate_id(self, prefix: str, now: datetime | None = None) -> str:
        """
        Generate the next id for ``prefix``.

        Raises:
            ValueError: If the prefix is not R or W

        Example:
            report_id = await id_service.generate_id("R")  # "R26101800001"
        """
        model_name = PREFIX_MODELS.get(prefix)
        if model_name is None:
            raise ValueError(f"Unknown id prefix: {prefix!r}")

        day = (now or datetime.now(UTC)).strftime("%y%m%d")
        sequence_id = f"{model_name}-{day}"

        stmt = (
            insert(IdSequence)
            .values(id=sequence_id, model_name=model_name, date=day, sequence=1)
            .on_conflict_do_update(
                index_elements=[IdSequence.id],
                set_={"sequence": IdSequence.sequence + 1},
            )
            .returning(IdSequence.sequence)
        )
        sequence = (await self.session.execute(stmt)).scalar_one()

        new_id = f"{prefix}{day}{sequence:05d}"
        logger.debug(f"Issued id {new_id}")
        return new_id
