"""Repository layer for the winner ledger."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from drawroom.models.winner import WinnerRecord


class WinnerRepository:
    """Append-only access to the winners table."""

    def append(self, session: Session, records: Iterable[WinnerRecord]) -> list[WinnerRecord]:
        rows = list(records)
        session.add_all(rows)
        session.flush()  # assign ids
        return rows

    def list_all(self, session: Session, *, prize: str | None = None) -> Sequence[WinnerRecord]:
        stmt = select(WinnerRecord)
        if prize:
            stmt = stmt.where(WinnerRecord.prize == prize)
        stmt = stmt.order_by(WinnerRecord.id.asc())
        return list(session.scalars(stmt).all())

    def numbers_with_records(self, session: Session, draw_numbers: Iterable[int]) -> set[int]:
        """Subset of ``draw_numbers`` that already appear in the ledger."""

        numbers = sorted({int(n) for n in draw_numbers})
        if not numbers:
            return set()
        stmt = select(WinnerRecord.draw_number).where(WinnerRecord.draw_number.in_(numbers))
        return {int(n) for n in session.scalars(stmt).all()}
