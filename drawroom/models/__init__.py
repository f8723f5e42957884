"""ORM models."""

from drawroom.models.participant import Participant, ParticipantStatus
from drawroom.models.winner import WinnerRecord

__all__ = ["Participant", "ParticipantStatus", "WinnerRecord"]
