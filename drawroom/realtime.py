"""Socket.IO broadcast channel for the draw room.

Every connected client is an observer; any of them may act as operator by
sending ``startDraw``. Server events go to all clients except replies to a
single command (rejections, ``requestState``), which go to the sender only.
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask, request
from flask_socketio import SocketIO, emit
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from drawroom.errors import AppError
from drawroom.repositories.participant_repository import ParticipantRepository
from drawroom.repositories.winner_repository import WinnerRepository
from drawroom.schemas.draw import parse_draw_request
from drawroom.schemas.participant import WinnerSchema
from drawroom.services.draw_controller import (
    DRAW_REJECTED,
    PARTICIPANTS,
    DrawController,
    pool_payload,
)

logger = logging.getLogger(__name__)

WINNERS = "winners"
DRAW_STATE = "drawState"

_winners_schema = WinnerSchema(many=True)


class SocketIOPublisher:
    """Broadcast draw events to every connected client."""

    def __init__(self, socketio: SocketIO) -> None:
        self.socketio = socketio

    def publish(self, event: str, payload: Any) -> None:
        self.socketio.emit(event, payload)


class DrawChannel:
    """Translate Socket.IO traffic into draw controller calls."""

    def __init__(
        self,
        socketio: SocketIO,
        controller: DrawController,
        session_factory: sessionmaker[Session],
        *,
        default_delay_ms: int = 0,
        max_delay_ms: int = 60_000,
        participants: ParticipantRepository | None = None,
        winners: WinnerRepository | None = None,
    ) -> None:
        self.socketio = socketio
        self.controller = controller
        self._session_factory = session_factory
        self._default_delay_ms = default_delay_ms
        self._max_delay_ms = max_delay_ms
        self._participants = participants or ParticipantRepository()
        self._winners = winners or WinnerRepository()

        self._register_handlers()

    def _register_handlers(self) -> None:
        @self.socketio.on("connect")
        def handle_connect(auth=None):  # type: ignore[no-untyped-def]
            logger.info("Observer connected (sid=%s)", request.sid)
            self._emit_pool()

        @self.socketio.on("disconnect")
        def handle_disconnect(*args):  # type: ignore[no-untyped-def]
            logger.info("Observer disconnected (sid=%s)", request.sid)

        @self.socketio.on("startDraw")
        def handle_start_draw(data=None):  # type: ignore[no-untyped-def]
            try:
                draw_request = parse_draw_request(
                    data,
                    default_delay_ms=self._default_delay_ms,
                    max_delay_ms=self._max_delay_ms,
                )
                draw_id = self.controller.submit(draw_request)
            except AppError as exc:
                logger.warning("startDraw from %s rejected: %s", request.sid, exc.message)
                emit(DRAW_REJECTED, exc.to_payload())
                return {"ok": False, **exc.to_payload()}
            logger.info("startDraw from %s accepted as draw %s", request.sid, draw_id)
            return {"ok": True, "drawId": draw_id}

        @self.socketio.on("cancelDraw")
        def handle_cancel_draw(data=None):  # type: ignore[no-untyped-def]
            try:
                draw_id = self.controller.cancel()
            except AppError as exc:
                emit(DRAW_REJECTED, exc.to_payload())
                return {"ok": False, **exc.to_payload()}
            return {"ok": True, "drawId": draw_id}

        @self.socketio.on("requestState")
        def handle_request_state(data=None):  # type: ignore[no-untyped-def]
            self._emit_pool()
            try:
                with self._session_factory() as session:
                    rows = self._winners.list_all(session)
                    emit(WINNERS, _winners_schema.dump(rows))
            except SQLAlchemyError:
                logger.exception("Failed to load winners for %s", request.sid)
            emit(DRAW_STATE, self.controller.snapshot())

    def _emit_pool(self) -> None:
        try:
            with self._session_factory() as session:
                pool = self._participants.list_eligible(session)
        except SQLAlchemyError:
            logger.exception("Failed to load eligible participants for %s", request.sid)
            return
        emit(PARTICIPANTS, pool_payload(pool))


def init_realtime(app: Flask, session_factory: sessionmaker[Session]) -> SocketIO:
    """Create the Socket.IO server for ``app`` and wire the draw controller to it."""

    socketio = SocketIO(
        app,
        async_mode=app.config.get("SOCKETIO_ASYNC_MODE"),
        cors_allowed_origins=app.config.get("SOCKETIO_CORS_ORIGINS"),
    )

    controller = DrawController(
        session_factory,
        SocketIOPublisher(socketio),
        sleep=socketio.sleep,
        spawn=socketio.start_background_task,
    )
    DrawChannel(
        socketio,
        controller,
        session_factory,
        default_delay_ms=int(app.config.get("DEFAULT_REVEAL_DELAY_MS", 0)),
        max_delay_ms=int(app.config.get("MAX_REVEAL_DELAY_MS", 60_000)),
    )

    app.extensions["draw_controller"] = controller
    app.extensions["socketio"] = socketio
    return socketio
