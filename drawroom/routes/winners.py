"""Winner ledger API."""

from __future__ import annotations

from flask import Blueprint, request

from drawroom.db import get_session
from drawroom.repositories.winner_repository import WinnerRepository
from drawroom.schemas.participant import WinnerSchema
from drawroom.utils.responses import ok

winners_bp = Blueprint("winners", __name__)

_repo = WinnerRepository()
_schema = WinnerSchema(many=True)


@winners_bp.get("/winners")
def list_winners():
    prize = request.args.get("prize") or None
    return ok(_schema.dump(_repo.list_all(get_session(), prize=prize)))
