"""Winner ledger model.

Rows are appended by the draw controller only and never updated. A
participant can appear at most once, and cannot be deleted while a row
references them.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from drawroom.models.base import Base


class WinnerRecord(Base):
    __tablename__ = "winners"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    draw_number: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("participants.draw_number", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    group: Mapped[str] = mapped_column("group_name", String(100), nullable=False)
    prize: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    draw_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    drawn_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
