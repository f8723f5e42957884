"""Logging configuration."""

from __future__ import annotations

import logging
from flask import Flask


def configure_logging(app: Flask) -> None:
    """Configure root logging from LOG_LEVEL."""

    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    # Socket.IO logs every packet at INFO.
    for noisy in ("sqlalchemy.engine", "socketio", "engineio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
