"""Repository layer for participant persistence."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from drawroom.models.participant import Participant, ParticipantStatus


@dataclass(frozen=True)
class ParticipantRecord:
    """Detached, immutable view of a participant row."""

    draw_number: int
    name: str
    group: str
    status: str = ParticipantStatus.ELIGIBLE.value

    @classmethod
    def from_model(cls, participant: Participant) -> "ParticipantRecord":
        return cls(
            draw_number=int(participant.draw_number),
            name=str(participant.name),
            group=str(participant.group),
            status=str(participant.status),
        )


class ParticipantRepository:
    """Reads and conditional writes against the participants table."""

    def list_eligible(self, session: Session) -> list[ParticipantRecord]:
        """Snapshot of the eligible pool, ordered by draw number."""

        stmt = (
            select(Participant)
            .where(Participant.status == ParticipantStatus.ELIGIBLE.value)
            .order_by(Participant.draw_number.asc())
        )
        return [ParticipantRecord.from_model(p) for p in session.scalars(stmt).all()]

    def list_filtered(
        self,
        session: Session,
        *,
        group: str | None = None,
        name: str | None = None,
        status: str | None = None,
    ) -> Sequence[Participant]:
        stmt = select(Participant)
        if group:
            stmt = stmt.where(Participant.group == group)
        if name:
            stmt = stmt.where(Participant.name.ilike(f"%{name}%"))
        if status:
            stmt = stmt.where(Participant.status == status)
        stmt = stmt.order_by(Participant.draw_number.asc())
        return list(session.scalars(stmt).all())

    def get_by_number(self, session: Session, draw_number: int) -> Participant | None:
        return session.get(Participant, draw_number)

    def create(self, session: Session, *, draw_number: int, name: str, group: str) -> Participant:
        participant = Participant(draw_number=draw_number, name=name, group=group)
        session.add(participant)
        session.flush()
        return participant

    def mark_won(self, session: Session, draw_numbers: Iterable[int]) -> int:
        """Flip eligible participants to ``won``; returns the number of rows changed.

        Rows that are missing or already ``won`` are not touched, so callers
        compare the result with the number of winners they expected.
        """

        numbers = sorted({int(n) for n in draw_numbers})
        if not numbers:
            return 0
        stmt = (
            update(Participant)
            .where(
                Participant.draw_number.in_(numbers),
                Participant.status == ParticipantStatus.ELIGIBLE.value,
            )
            .values(status=ParticipantStatus.WON.value)
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        return int(result.rowcount or 0)

    def delete_many(self, session: Session, draw_numbers: Iterable[int]) -> int:
        numbers = sorted({int(n) for n in draw_numbers})
        if not numbers:
            return 0
        stmt = (
            delete(Participant)
            .where(Participant.draw_number.in_(numbers))
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        return int(result.rowcount or 0)
