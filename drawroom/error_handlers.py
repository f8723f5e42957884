"""Centralized error handlers."""

from __future__ import annotations

import logging

from flask import Flask, g
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from drawroom.errors import AppError, ConflictError, ValidationError
from drawroom.utils.responses import fail

logger = logging.getLogger(__name__)


def _rollback_request_session() -> None:
    # Handled errors reach teardown with exc=None, which would commit.
    session = getattr(g, "db", None)
    if session is not None:
        session.rollback()


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        _rollback_request_session()
        if exc.status_code >= 500:
            logger.error("%s: %s", exc.code, exc.message)
        return fail(exc.code, exc.message, exc.status_code, exc.details)

    @app.errorhandler(MarshmallowValidationError)
    def _handle_schema_error(exc: MarshmallowValidationError):
        _rollback_request_session()
        wrapped = ValidationError(details=exc.messages)
        return fail(wrapped.code, wrapped.message, wrapped.status_code, wrapped.details)

    @app.errorhandler(IntegrityError)
    def _handle_integrity_error(exc: IntegrityError):
        _rollback_request_session()
        logger.info("Integrity error", exc_info=exc)
        wrapped = ConflictError(details=str(exc.orig) if exc.orig else str(exc))
        return fail(wrapped.code, wrapped.message, wrapped.status_code, wrapped.details)

    @app.errorhandler(HTTPException)
    def _handle_http_exception(exc: HTTPException):
        _rollback_request_session()
        status = int(getattr(exc, "code", 500) or 500)
        if status == 404:
            return fail("not_found", "Not found", 404)

        return fail(
            "http_error",
            getattr(exc, "description", "HTTP error"),
            status,
            details={"name": getattr(exc, "name", "HTTPException")},
        )

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        _rollback_request_session()
        logger.exception("Unhandled exception")
        return fail("internal_error", "Internal server error", 500)
