"""Schemas for draw commands (Socket.IO ``startDraw`` and ``POST /api/draw``)."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, pre_load, validate
from marshmallow import ValidationError as MarshmallowValidationError

from drawroom.errors import InvalidCountError, ValidationError
from drawroom.services.draw_controller import DrawRequest

_WHOLE_NUMBER_FIELDS = ("winnerCount", "revealDelayMs")


class StartDrawSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    prize_name = fields.Str(
        required=True,
        data_key="prizeName",
        validate=[validate.Length(min=1, max=200), validate.Regexp(r"\s*\S", error="Must not be blank")],
    )
    winner_count = fields.Integer(
        required=True,
        data_key="winnerCount",
        validate=validate.Range(min=1, error="Must be a positive integer"),
    )
    reveal_delay_ms = fields.Integer(
        required=False,
        load_default=None,
        data_key="revealDelayMs",
        validate=validate.Range(min=0),
    )

    @pre_load
    def reject_fractions(self, data: Any, **kwargs: Any) -> Any:
        # Integer fields truncate floats on load; 2.9 winners is an error, not 2.
        if not isinstance(data, dict):
            return data
        errors = {
            key: ["Must be a whole number"]
            for key in _WHOLE_NUMBER_FIELDS
            if isinstance(data.get(key), float) and not data[key].is_integer()
        }
        if errors:
            raise MarshmallowValidationError(errors)
        return data


_start_schema = StartDrawSchema()


def parse_draw_request(payload: Any, *, default_delay_ms: int, max_delay_ms: int) -> DrawRequest:
    """Turn a raw ``startDraw`` payload into a :class:`DrawRequest`.

    Raises:
        InvalidCountError: ``winnerCount`` missing, non-numeric or < 1.
        ValidationError: any other field problem.
    """

    if not isinstance(payload, dict):
        raise ValidationError(message="Draw command must be an object")

    try:
        data = _start_schema.load(payload)
    except MarshmallowValidationError as exc:
        messages = exc.messages if isinstance(exc.messages, dict) else {"_schema": exc.messages}
        if "winnerCount" in messages:
            raise InvalidCountError(details=messages) from exc
        raise ValidationError(message="Invalid draw command", details=messages) from exc

    delay_ms = data.get("reveal_delay_ms")
    if delay_ms is None:
        delay_ms = default_delay_ms
    if delay_ms > max_delay_ms:
        raise ValidationError(
            message="Invalid draw command",
            details={"revealDelayMs": [f"Must be <= {max_delay_ms}"]},
        )

    return DrawRequest.from_millis(
        prize_name=str(data["prize_name"]).strip(),
        winner_count=int(data["winner_count"]),
        reveal_delay_ms=int(delay_ms),
    )
