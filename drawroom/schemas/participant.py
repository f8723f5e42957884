"""Marshmallow schemas for participants and the winner ledger."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

_NON_BLANK = validate.Regexp(r"\s*\S", error="Must not be blank")


class ParticipantSchema(Schema):
    """Serialize Participant."""

    draw_number = fields.Int(required=True, data_key="drawNumber")
    name = fields.Str(required=True)
    group = fields.Str(required=True)
    status = fields.Str(required=True)


class ParticipantCreateSchema(Schema):
    """Validate create Participant payload."""

    draw_number = fields.Int(required=True, data_key="drawNumber", validate=validate.Range(min=1))
    name = fields.Str(required=True, validate=[validate.Length(max=200), _NON_BLANK])
    group = fields.Str(required=True, validate=[validate.Length(max=100), _NON_BLANK])


class ParticipantUpdateSchema(Schema):
    """Name and group are editable; status only changes through a draw."""

    name = fields.Str(required=False, validate=[validate.Length(max=200), _NON_BLANK])
    group = fields.Str(required=False, validate=[validate.Length(max=100), _NON_BLANK])


class ParticipantFilterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    group = fields.Str(required=False, load_default=None)
    name = fields.Str(required=False, load_default=None)
    status = fields.Str(required=False, load_default=None)


class BulkImportSchema(Schema):
    """Plain text, one ``drawNumber,name,group`` per line."""

    data = fields.Str(required=True)


class BulkDeleteSchema(Schema):
    draw_numbers = fields.List(
        fields.Int(),
        required=True,
        data_key="drawNumbers",
        validate=validate.Length(min=1),
    )


class WinnerSchema(Schema):
    """Serialize WinnerRecord."""

    id = fields.Int(required=True)
    draw_number = fields.Int(required=True, data_key="drawNumber")
    name = fields.Str(required=True)
    group = fields.Str(required=True)
    prize = fields.Str(required=True)
    draw_id = fields.Str(required=True, data_key="drawId")
    drawn_at = fields.DateTime(required=True, data_key="drawnAt")
