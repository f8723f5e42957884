"""SQLAlchemy engine + session management.

HTTP routes use a session-per-request pattern. Socket handlers and the draw
controller open their own short-lived sessions from the shared factory.
"""

from __future__ import annotations

from flask import Flask, g
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from drawroom import models  # noqa: F401  (registers tables on Base.metadata)
from drawroom.models.base import Base


def _configure_sqlite(engine: Engine) -> None:
    """Enforce foreign keys and let SQLAlchemy own BEGIN so savepoints work."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:  # type: ignore[no-untyped-def]
        conn.exec_driver_sql("BEGIN")


def create_app_engine(database_url: str) -> Engine:
    url = make_url(database_url)

    if url.get_backend_name() != "sqlite":
        return create_engine(database_url, pool_pre_ping=True, future=True)

    # The draw runs in a background task, so sqlite connections cross threads.
    kwargs: dict[str, object] = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, future=True, **kwargs)
    _configure_sqlite(engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(app: Flask) -> sessionmaker[Session]:
    """Initialize database engine and per-request sessions."""

    engine = create_app_engine(str(app.config["DATABASE_URL"]))
    session_factory = create_session_factory(engine)

    # Production deployments run scripts/create_tables.py; this keeps dev/test simple.
    Base.metadata.create_all(bind=engine)

    app.extensions["engine"] = engine
    app.extensions["session_factory"] = session_factory

    @app.before_request
    def _open_session() -> None:
        g.db = session_factory()  # type: ignore[attr-defined]

    @app.teardown_request
    def _close_session(exc: BaseException | None) -> None:
        session: Session | None = g.pop("db", None)
        if session is None:
            return

        try:
            if exc is None:
                session.commit()
            else:
                session.rollback()
        finally:
            session.close()

    return session_factory


def get_session() -> Session:
    """Get the current request's SQLAlchemy session."""

    session: Session | None = getattr(g, "db", None)
    if session is None:
        raise RuntimeError("Database session not initialized")
    return session
