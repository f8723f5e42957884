"""Draw session controller.

Runs one draw at a time from request to broadcast::

    IDLE -> VALIDATING -> ANNOUNCING -> SELECTING -> COMMITTING -> IDLE

Validation captures the eligible pool once; selection works on that
snapshot only. Status flips and ledger rows are written in a single
transaction. A ``startDraw`` arriving while a session is in flight is
rejected with :class:`DrawInProgressError`, never queued or interleaved.
"""

from __future__ import annotations

import logging
import math
import random
import time
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import Lock
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from drawroom.errors import (
    DrawInProgressError,
    InsufficientPoolError,
    InvalidCountError,
    NoActiveDrawError,
    PersistenceFailureError,
    ValidationError,
)
from drawroom.models.winner import WinnerRecord
from drawroom.repositories.participant_repository import ParticipantRecord, ParticipantRepository
from drawroom.repositories.winner_repository import WinnerRepository
from drawroom.services.selector import select_winners

logger = logging.getLogger(__name__)

# Server -> client event names.
PARTICIPANTS = "participants"
DRAW_STARTED = "drawStarted"
DRAW_REJECTED = "drawRejected"
DRAW_COMPLETED = "drawCompleted"
DRAW_CANCELLED = "drawCancelled"
DRAW_FAILED = "drawFailed"


class DrawState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    ANNOUNCING = "announcing"
    SELECTING = "selecting"
    COMMITTING = "committing"


class DrawOutcomeStatus(str, Enum):
    ANNOUNCED = "announced"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class DrawRequest:
    """One operator request: who gets which prize, and how long to keep them waiting."""

    prize_name: str
    winner_count: int
    reveal_delay: float = 0.0  # seconds

    def __post_init__(self) -> None:
        if not isinstance(self.prize_name, str) or not self.prize_name.strip():
            raise ValidationError(message="Prize name is required", details={"prizeName": ["Must not be blank"]})
        if isinstance(self.winner_count, bool) or not isinstance(self.winner_count, int) or self.winner_count <= 0:
            raise InvalidCountError(details={"winnerCount": ["Must be a positive integer"]})
        if self.reveal_delay < 0:
            raise ValidationError(message="Invalid reveal delay", details={"revealDelayMs": ["Must be >= 0"]})

    @classmethod
    def from_millis(cls, prize_name: str, winner_count: int, reveal_delay_ms: int) -> "DrawRequest":
        return cls(prize_name=prize_name, winner_count=winner_count, reveal_delay=reveal_delay_ms / 1000.0)

    @property
    def reveal_delay_ms(self) -> int:
        return int(round(self.reveal_delay * 1000))


@dataclass(frozen=True)
class DrawOutcome:
    draw_id: str
    status: DrawOutcomeStatus
    prize_name: str
    winners: tuple[ParticipantRecord, ...] = field(default_factory=tuple)
    message: str | None = None

    def winners_payload(self) -> list[dict[str, Any]]:
        return [
            {"drawNumber": w.draw_number, "name": w.name, "group": w.group, "prize": self.prize_name}
            for w in self.winners
        ]


class DrawEventPublisher(Protocol):
    """Fan-out to every connected observer."""

    def publish(self, event: str, payload: Any) -> None: ...


def _run_inline(fn: Callable[..., Any], *args: Any) -> Any:
    return fn(*args)


def pool_payload(pool: Sequence[ParticipantRecord]) -> list[dict[str, Any]]:
    return [
        {"drawNumber": p.draw_number, "name": p.name, "group": p.group, "status": p.status}
        for p in pool
    ]


class DrawController:
    """Single-writer owner of the draw pipeline.

    Args:
        session_factory: Factory for short-lived sessions; reads and the
            commit each get their own.
        publisher: Broadcast target for draw events.
        sleep: Suspension used for the reveal delay. The app passes
            ``socketio.sleep`` so other clients keep being served.
        spawn: Runs a claimed session for :meth:`submit`. The app passes
            ``socketio.start_background_task``.
        rng: Random source for the selector.
        cancel_poll: Longest single ``sleep`` call during the reveal delay,
            so a cancelled draw frees the room without waiting it out.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        publisher: DrawEventPublisher,
        *,
        participants: ParticipantRepository | None = None,
        winners: WinnerRepository | None = None,
        sleep: Callable[[float], Any] = time.sleep,
        spawn: Callable[..., Any] = _run_inline,
        rng: random.Random | None = None,
        cancel_poll: float = 0.25,
    ) -> None:
        self._session_factory = session_factory
        self._publisher = publisher
        self._participants = participants or ParticipantRepository()
        self._winners = winners or WinnerRepository()
        self._sleep = sleep
        self._spawn = spawn
        self._rng = rng
        self._cancel_poll = cancel_poll

        self._lock = Lock()
        self._state = DrawState.IDLE
        self._draw_id: str | None = None
        self._request: DrawRequest | None = None
        self._cancel_requested = False

    @property
    def state(self) -> DrawState:
        return self._state

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            request = self._request
            return {
                "state": self._state.value,
                "drawId": self._draw_id,
                "prizeName": request.prize_name if request else None,
                "winnerCount": request.winner_count if request else None,
            }

    def start_draw(self, request: DrawRequest) -> DrawOutcome:
        """Claim the room and run the whole session on the calling thread."""

        draw_id = self._claim(request)
        return self._run(draw_id, request)

    def submit(self, request: DrawRequest) -> str:
        """Claim the room now and run the session through ``spawn``.

        Conflicts surface here, synchronously, so the caller can answer the
        requester. Returns the new draw id.
        """

        draw_id = self._claim(request)
        try:
            self._spawn(self._run, draw_id, request)
        except Exception:
            self._release()
            raise
        return draw_id

    def cancel(self) -> str:
        """Abort a draw that is still in its reveal delay. Returns its draw id."""

        with self._lock:
            if self._state is not DrawState.ANNOUNCING or self._draw_id is None:
                raise NoActiveDrawError()
            self._cancel_requested = True
            draw_id = self._draw_id
        logger.info("Draw %s cancel requested", draw_id)
        return draw_id

    def _claim(self, request: DrawRequest) -> str:
        with self._lock:
            if self._state is not DrawState.IDLE:
                current = self._request
                raise DrawInProgressError(
                    details={
                        "drawId": self._draw_id,
                        "prizeName": current.prize_name if current else None,
                        "state": self._state.value,
                    }
                )
            draw_id = uuid.uuid4().hex
            self._state = DrawState.VALIDATING
            self._draw_id = draw_id
            self._request = request
            self._cancel_requested = False

        logger.info(
            "Draw %s claimed: prize=%r winners=%s delay_ms=%s",
            draw_id,
            request.prize_name,
            request.winner_count,
            request.reveal_delay_ms,
        )
        return draw_id

    def _transition(self, state: DrawState) -> None:
        with self._lock:
            self._state = state
            draw_id = self._draw_id
        logger.info("Draw %s -> %s", draw_id, state.value)

    def _release(self) -> None:
        with self._lock:
            self._state = DrawState.IDLE
            self._draw_id = None
            self._request = None
            self._cancel_requested = False

    def _publish(self, event: str, payload: Any) -> None:
        # Delivery is best-effort; the ledger is the source of truth.
        try:
            self._publisher.publish(event, payload)
        except Exception:
            logger.exception("Failed to broadcast %s", event)

    def _run(self, draw_id: str, request: DrawRequest) -> DrawOutcome:
        try:
            return self._execute(draw_id, request)
        except Exception:
            logger.exception("Draw %s aborted by unexpected error", draw_id)
            self._publish(
                DRAW_FAILED,
                {
                    "drawId": draw_id,
                    "prizeName": request.prize_name,
                    "code": "internal_error",
                    "message": "Draw aborted by an internal error",
                },
            )
            raise
        finally:
            self._release()

    def _execute(self, draw_id: str, request: DrawRequest) -> DrawOutcome:
        try:
            with self._session_factory() as session:
                pool = self._participants.list_eligible(session)
        except SQLAlchemyError as exc:
            return self._fail(draw_id, request, PersistenceFailureError(message="Failed to load eligible participants"), exc)

        if len(pool) < request.winner_count:
            error = InsufficientPoolError(available=len(pool), requested=request.winner_count)
            logger.warning("Draw %s rejected: %s", draw_id, error.message)
            self._publish(DRAW_REJECTED, {"drawId": draw_id, "prizeName": request.prize_name, **error.to_payload()})
            return DrawOutcome(draw_id, DrawOutcomeStatus.REJECTED, request.prize_name, message=error.message)

        self._transition(DrawState.ANNOUNCING)
        self._publish(
            DRAW_STARTED,
            {
                "drawId": draw_id,
                "prizeName": request.prize_name,
                "winnerCount": request.winner_count,
                "revealDelayMs": request.reveal_delay_ms,
            },
        )
        if request.reveal_delay > 0:
            self._wait_for_reveal(request.reveal_delay)

        with self._lock:
            cancelled = self._cancel_requested
            if not cancelled:
                self._state = DrawState.SELECTING
        if cancelled:
            logger.info("Draw %s cancelled before reveal", draw_id)
            self._publish(DRAW_CANCELLED, {"drawId": draw_id, "prizeName": request.prize_name})
            return DrawOutcome(draw_id, DrawOutcomeStatus.CANCELLED, request.prize_name)

        winners = select_winners(pool, request.winner_count, self._rng)

        self._transition(DrawState.COMMITTING)
        try:
            self._commit(draw_id, request, winners)
        except PersistenceFailureError as exc:
            return self._fail(draw_id, request, exc, exc)
        except SQLAlchemyError as exc:
            return self._fail(draw_id, request, PersistenceFailureError(), exc)

        outcome = DrawOutcome(
            draw_id,
            DrawOutcomeStatus.ANNOUNCED,
            request.prize_name,
            winners=tuple(sorted(winners, key=lambda w: w.draw_number)),
        )
        logger.info(
            "Draw %s committed: prize=%r winners=%s",
            draw_id,
            request.prize_name,
            [w.draw_number for w in outcome.winners],
        )
        self._publish(
            DRAW_COMPLETED,
            {"drawId": draw_id, "prizeName": request.prize_name, "winners": outcome.winners_payload()},
        )
        self._publish_pool()
        return outcome

    def _wait_for_reveal(self, delay: float) -> None:
        """Sleep ``delay`` seconds in slices, stopping early once cancelled."""

        slices = max(1, math.ceil(delay / self._cancel_poll))
        step = delay / slices
        for _ in range(slices):
            with self._lock:
                if self._cancel_requested:
                    return
            self._sleep(step)

    def _commit(self, draw_id: str, request: DrawRequest, winners: Sequence[ParticipantRecord]) -> None:
        drawn_at = datetime.now(timezone.utc)
        with self._session_factory.begin() as session:
            updated = self._participants.mark_won(session, [w.draw_number for w in winners])
            if updated != len(winners):
                # A winner was deleted or already marked since the snapshot.
                raise PersistenceFailureError(
                    message="Participant pool changed during the draw; nothing was saved",
                    details={"expected": len(winners), "updated": updated},
                )
            self._winners.append(
                session,
                [
                    WinnerRecord(
                        draw_number=w.draw_number,
                        name=w.name,
                        group=w.group,
                        prize=request.prize_name,
                        draw_id=draw_id,
                        drawn_at=drawn_at,
                    )
                    for w in winners
                ],
            )

    def _fail(
        self,
        draw_id: str,
        request: DrawRequest,
        error: PersistenceFailureError,
        cause: BaseException,
    ) -> DrawOutcome:
        logger.error("Draw %s failed: %s", draw_id, error.message, exc_info=cause)
        self._publish(DRAW_FAILED, {"drawId": draw_id, "prizeName": request.prize_name, **error.to_payload()})
        return DrawOutcome(draw_id, DrawOutcomeStatus.FAILED, request.prize_name, message=error.message)

    def _publish_pool(self) -> None:
        try:
            with self._session_factory() as session:
                pool = self._participants.list_eligible(session)
        except SQLAlchemyError:
            logger.exception("Failed to reload eligible participants after draw")
            return
        self._publish(PARTICIPANTS, pool_payload(pool))
