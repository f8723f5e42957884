"""Health check routes."""

from __future__ import annotations

from flask import Blueprint, current_app

from drawroom.utils.responses import ok

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health_check():
    """Liveness plus the current draw state."""

    controller = current_app.extensions["draw_controller"]
    return ok({"status": "ok", "draw": controller.state.value})
