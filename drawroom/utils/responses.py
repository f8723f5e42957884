"""Helpers for the JSON envelope shared by every HTTP response."""

from __future__ import annotations

from typing import Any

from flask import Response, jsonify


def _envelope(data: Any, error: dict[str, Any] | None) -> Response:
    return jsonify({"success": error is None, "data": data, "error": error})


def ok(data: Any, status_code: int = 200) -> tuple[Response, int]:
    """Success response."""

    return _envelope(data, None), status_code


def fail(code: str, message: str, status_code: int, details: Any | None = None) -> tuple[Response, int]:
    """Error response."""

    return _envelope(None, {"code": code, "message": message, "details": details}), status_code
