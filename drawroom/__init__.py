"""Live prize-draw service: Flask API plus a Socket.IO draw room."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dotenv import load_dotenv
from flask import Flask


def create_app(overrides: Mapping[str, Any] | None = None) -> Flask:
    """Application factory.

    Args:
        overrides: Config values applied on top of the environment config
            (tests pass their own ``DATABASE_URL`` here).

    Returns:
        Configured Flask application. The Socket.IO server is available as
        ``app.extensions["socketio"]``.
    """
    load_dotenv()

    from drawroom.config import get_config
    from drawroom.db import init_db
    from drawroom.error_handlers import register_error_handlers
    from drawroom.logging_config import configure_logging
    from drawroom.realtime import init_realtime
    from drawroom.routes.draw import draw_bp
    from drawroom.routes.health import health_bp
    from drawroom.routes.participants import participants_bp
    from drawroom.routes.winners import winners_bp

    app = Flask(__name__)
    app.config.from_object(get_config())
    if overrides:
        app.config.update(overrides)

    configure_logging(app)
    session_factory = init_db(app)
    register_error_handlers(app)
    init_realtime(app, session_factory)

    app.register_blueprint(health_bp)
    app.register_blueprint(participants_bp, url_prefix="/api")
    app.register_blueprint(winners_bp, url_prefix="/api")
    app.register_blueprint(draw_bp, url_prefix="/api")

    return app
