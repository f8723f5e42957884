"""Service layer for participant administration."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from drawroom.errors import ConflictError, NotFoundError
from drawroom.models.participant import Participant, ParticipantStatus
from drawroom.repositories.participant_repository import ParticipantRepository
from drawroom.repositories.winner_repository import WinnerRepository

logger = logging.getLogger(__name__)

_STATUSES = {s.value for s in ParticipantStatus}


@dataclass(frozen=True)
class ImportSummary:
    added: int
    failed: int


def parse_participant_line(line: str) -> tuple[int, str, str] | None:
    """Parse ``"12, Jane Doe, Unit 3"``; ``None`` when malformed."""

    parts = [part.strip() for part in line.split(",")]
    if len(parts) != 3:
        return None
    raw_number, name, group = parts
    try:
        draw_number = int(raw_number)
    except ValueError:
        return None
    if draw_number < 1 or not name or not group:
        return None
    return draw_number, name, group


class ParticipantService:
    """Participant use-cases. Draw status is never edited here."""

    def __init__(
        self,
        repository: ParticipantRepository | None = None,
        winners: WinnerRepository | None = None,
    ) -> None:
        self._repo = repository or ParticipantRepository()
        self._winners = winners or WinnerRepository()

    def list_participants(
        self,
        session: Session,
        *,
        group: str | None = None,
        name: str | None = None,
        status: str | None = None,
    ) -> Sequence[Participant]:
        # Unknown statuses are ignored rather than matching nothing.
        if status not in _STATUSES:
            status = None
        return self._repo.list_filtered(session, group=group, name=name, status=status)

    def get_participant(self, session: Session, draw_number: int) -> Participant:
        participant = self._repo.get_by_number(session, draw_number)
        if participant is None:
            raise NotFoundError(message=f"Participant {draw_number} not found")
        return participant

    def create_participant(self, session: Session, *, draw_number: int, name: str, group: str) -> Participant:
        if self._repo.get_by_number(session, draw_number) is not None:
            raise ConflictError(message=f"Draw number {draw_number} is already registered")
        return self._repo.create(session, draw_number=draw_number, name=name.strip(), group=group.strip())

    def import_lines(self, session: Session, lines: Iterable[str]) -> ImportSummary:
        """Insert one participant per ``number,name,group`` line.

        Blank lines are skipped. Each row gets its own savepoint so a bad or
        duplicate line only fails itself.
        """

        added = 0
        failed = 0
        seen: set[int] = set()
        for line in lines:
            if not line.strip():
                continue
            parsed = parse_participant_line(line)
            if parsed is None:
                failed += 1
                continue
            draw_number, name, group = parsed
            if draw_number in seen:
                failed += 1
                continue
            seen.add(draw_number)
            try:
                with session.begin_nested():
                    self._repo.create(session, draw_number=draw_number, name=name, group=group)
            except IntegrityError:
                logger.info("Skipping duplicate draw number %s", draw_number)
                failed += 1
                continue
            added += 1

        logger.info("Imported participants: added=%s failed=%s", added, failed)
        return ImportSummary(added=added, failed=failed)

    def update_participant(
        self,
        session: Session,
        draw_number: int,
        *,
        name: str | None = None,
        group: str | None = None,
    ) -> Participant:
        participant = self.get_participant(session, draw_number)
        if name is not None:
            participant.name = name.strip()
        if group is not None:
            participant.group = group.strip()
        session.flush()
        return participant

    def delete_participant(self, session: Session, draw_number: int) -> None:
        self.get_participant(session, draw_number)
        self._ensure_not_winners(session, [draw_number])
        self._repo.delete_many(session, [draw_number])

    def delete_participants(self, session: Session, draw_numbers: Iterable[int]) -> int:
        numbers = list(draw_numbers)
        self._ensure_not_winners(session, numbers)
        deleted = self._repo.delete_many(session, numbers)
        logger.info("Deleted %s participants", deleted)
        return deleted

    def _ensure_not_winners(self, session: Session, draw_numbers: Iterable[int]) -> None:
        referenced = self._winners.numbers_with_records(session, draw_numbers)
        if referenced:
            raise ConflictError(
                message="Participants with recorded wins cannot be deleted",
                details={"drawNumbers": sorted(referenced)},
            )
