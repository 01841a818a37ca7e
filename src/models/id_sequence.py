"""
IdSequence model: per-day counters behind human-readable report/ticket ids.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base


class IdSequence(Base):
    """
    Counter row for one (model, day) pair.

    Attributes:
        id: "<model_name>-<yymmdd>", e.g. "Report-261018"
        model_name: "Report" or "Ticket"
        date: yymmdd
        sequence: Last issued number for that day
    """

    __tablename__ = "id_sequences"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    model_name: Mapped[str] = mapped_column(String(20), nullable=False)
    date: Mapped[str] = mapped_column(String(6), nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
