"""Pytest configuration and fixtures."""

from __future__ import annotations

import random
import time
from pathlib import Path

import pytest
from sqlalchemy import select

from drawroom import create_app
from drawroom.db import create_app_engine, create_session_factory
from drawroom.models import Participant, WinnerRecord
from drawroom.models.base import Base
from drawroom.services.draw_controller import DrawController, DrawState


class RecordingPublisher:
    """Collects broadcast events in order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def publish(self, event: str, payload: object) -> None:
        self.events.append((event, payload))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def last(self, event: str) -> object:
        for name, payload in reversed(self.events):
            if name == event:
                return payload
        raise AssertionError(f"{event} was never published")


def add_participants(session_factory, count: int, *, start: int = 1, group: str = "RT 01") -> list[int]:
    numbers = list(range(start, start + count))
    with session_factory.begin() as session:
        session.add_all(
            [Participant(draw_number=n, name=f"Participant {n}", group=group) for n in numbers]
        )
    return numbers


def statuses(session_factory) -> dict[int, str]:
    with session_factory() as session:
        rows = session.scalars(select(Participant)).all()
        return {p.draw_number: p.status for p in rows}


def ledger(session_factory) -> list[WinnerRecord]:
    with session_factory() as session:
        return list(session.scalars(select(WinnerRecord).order_by(WinnerRecord.id)).all())


def wait_for_idle(controller: DrawController, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while controller.state is not DrawState.IDLE:
        if time.monotonic() > deadline:
            raise AssertionError(f"draw still {controller.state.value} after {timeout}s")
        time.sleep(0.01)


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'drawroom-test.db'}"


@pytest.fixture
def session_factory(database_url: str):
    engine = create_app_engine(database_url)
    Base.metadata.create_all(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def controller(session_factory, publisher) -> DrawController:
    return DrawController(
        session_factory,
        publisher,
        sleep=lambda seconds: None,
        rng=random.Random(1234),
    )


@pytest.fixture
def app(database_url: str):
    app = create_app(
        {
            "TESTING": True,
            "DATABASE_URL": database_url,
            "DEFAULT_REVEAL_DELAY_MS": 0,
            "SOCKETIO_ASYNC_MODE": "threading",
        }
    )
    yield app
    app.extensions["engine"].dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_session_factory(app):
    return app.extensions["session_factory"]
