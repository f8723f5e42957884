"""Uniform selection of winners without replacement."""

from __future__ import annotations

import random
from collections.abc import Sequence

from drawroom.errors import InsufficientPoolError, InvalidCountError
from drawroom.repositories.participant_repository import ParticipantRecord

_SYSTEM_RANDOM = random.SystemRandom()


def select_winners(
    pool: Sequence[ParticipantRecord],
    k: int,
    rng: random.Random | None = None,
) -> list[ParticipantRecord]:
    """Pick ``k`` participants, distinct by draw number, uniformly at random.

    ``random.sample`` does a partial Fisher-Yates shuffle, so every k-subset
    of the pool is equally likely and the cost is bounded by the pool size.
    Duplicate draw numbers in ``pool`` are collapsed (first one wins) before
    sampling.

    Raises:
        InvalidCountError: ``k`` is not a positive integer.
        InsufficientPoolError: ``k`` exceeds the number of distinct participants.
    """

    if isinstance(k, bool) or not isinstance(k, int) or k <= 0:
        raise InvalidCountError(details={"winner_count": k})

    unique: dict[int, ParticipantRecord] = {}
    for participant in pool:
        unique.setdefault(int(participant.draw_number), participant)
    candidates = list(unique.values())

    if k > len(candidates):
        raise InsufficientPoolError(available=len(candidates), requested=k)

    return (rng or _SYSTEM_RANDOM).sample(candidates, k)
