"""Participant ORM model."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from drawroom.models.base import Base


class ParticipantStatus(str, Enum):
    ELIGIBLE = "eligible"
    WON = "won"


class Participant(Base):
    """A registered participant, keyed by the draw number printed on their ticket."""

    __tablename__ = "participants"

    draw_number: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    group: Mapped[str] = mapped_column("group_name", String(100), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=ParticipantStatus.ELIGIBLE.value,
        server_default=ParticipantStatus.ELIGIBLE.value,
        index=True,
    )
