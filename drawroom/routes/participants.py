"""Participant admin routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, request

from drawroom.db import get_session
from drawroom.schemas.participant import (
    BulkDeleteSchema,
    BulkImportSchema,
    ParticipantCreateSchema,
    ParticipantFilterSchema,
    ParticipantSchema,
    ParticipantUpdateSchema,
)
from drawroom.services.participant_service import ParticipantService
from drawroom.utils.responses import ok

participants_bp = Blueprint("participants", __name__)

_participant_schema = ParticipantSchema()
_participants_schema = ParticipantSchema(many=True)
_create_schema = ParticipantCreateSchema()
_update_schema = ParticipantUpdateSchema()
_filter_schema = ParticipantFilterSchema()
_import_schema = BulkImportSchema()
_delete_schema = BulkDeleteSchema()
_service = ParticipantService()


@participants_bp.get("/participants")
def list_participants():
    """List participants, optionally filtered by group, name or status."""

    filters = _filter_schema.load(request.args.to_dict())
    participants = _service.list_participants(get_session(), **filters)
    return ok(_participants_schema.dump(participants))


@participants_bp.post("/participants")
def create_participant():
    payload = request.get_json(silent=True) or {}
    data = _create_schema.load(payload)

    participant = _service.create_participant(get_session(), **data)

    # Commit occurs in teardown if no exception.
    return ok(_participant_schema.dump(participant), status_code=201)


@participants_bp.post("/participants/bulk")
def import_participants():
    """Register many participants from ``number,name,group`` lines."""

    payload = request.get_json(silent=True) or {}
    data = _import_schema.load(payload)

    summary = _service.import_lines(get_session(), str(data["data"]).splitlines())
    return ok({"added": summary.added, "failed": summary.failed})


@participants_bp.patch("/participants/<int:draw_number>")
def update_participant(draw_number: int):
    payload = request.get_json(silent=True) or {}
    data = _update_schema.load(payload)

    participant = _service.update_participant(get_session(), draw_number, **data)
    return ok(_participant_schema.dump(participant))


@participants_bp.delete("/participants/<int:draw_number>")
def delete_participant(draw_number: int):
    _service.delete_participant(get_session(), draw_number)
    return ok({"deleted": 1})


@participants_bp.post("/participants/delete")
def delete_participants():
    payload = request.get_json(silent=True) or {}
    data = _delete_schema.load(payload)

    deleted = _service.delete_participants(get_session(), data["draw_numbers"])
    return ok({"deleted": deleted})
