"""Draw routes: HTTP twin of the Socket.IO ``startDraw``/``cancelDraw`` commands."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from drawroom.schemas.draw import parse_draw_request
from drawroom.services.draw_controller import DrawController
from drawroom.utils.responses import ok


draw_bp = Blueprint("draw", __name__)


def _controller() -> DrawController:
    return current_app.extensions["draw_controller"]


@draw_bp.get("/draw")
def draw_state():
    return ok(_controller().snapshot())


@draw_bp.post("/draw")
def start_draw():
    payload = request.get_json(silent=True)
    draw_request = parse_draw_request(
        payload if payload is not None else {},
        default_delay_ms=int(current_app.config["DEFAULT_REVEAL_DELAY_MS"]),
        max_delay_ms=int(current_app.config["MAX_REVEAL_DELAY_MS"]),
    )

    # The outcome is broadcast over Socket.IO; this only acknowledges the claim.
    draw_id = _controller().submit(draw_request)
    return ok({"drawId": draw_id}, status_code=202)


@draw_bp.post("/draw/cancel")
def cancel_draw():
    draw_id = _controller().cancel()
    return ok({"drawId": draw_id})
