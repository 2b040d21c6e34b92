"""Single-elimination bracket generation."""

from __future__ import annotations

import math
import random
from typing import TYPE_CHECKING, Optional

from squadgo.core.constants import MIN_TOURNAMENT_PARTICIPANTS, SINGLE_ELIMINATION

if TYPE_CHECKING:
    import datetime

    from .models import Bracket, BracketMatch, Participant, Round


class BracketGenerator:
    """Builds a shuffled single-elimination bracket.

    Round 1 pairs the shuffled participants two by two; with an odd count the
    last one gets a bye and is already its winner. Every later round is an
    empty placeholder sized for the winners of the round before it.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        """Shuffle with ``rng`` (system randomness by default)."""
        self.rng = rng or random.Random()

    @staticmethod
    def round_count(participant_count: int) -> int:
        """ceil(log2(n)) rounds for n participants."""
        return (participant_count - 1).bit_length()

    def generate(
        self, participants: list[Participant], created_at: datetime.datetime
    ) -> Bracket:
        """Return the bracket for ``participants`` (at least two)."""
        if len(participants) < MIN_TOURNAMENT_PARTICIPANTS:
            raise ValueError("Need at least 2 participants to generate a bracket.")

        shuffled = list(participants)
        self.rng.shuffle(shuffled)

        first_round: list[BracketMatch] = []
        for i in range(0, len(shuffled), 2):
            pair = shuffled[i : i + 2]
            first_round.append(
                {"participants": pair, "winner": pair[0] if len(pair) == 1 else None}
            )

        rounds: list[Round] = [{"roundNumber": 1, "matches": first_round}]
        for number in range(2, self.round_count(len(shuffled)) + 1):
            slots = math.ceil(len(first_round) / 2 ** (number - 1))
            rounds.append(
                {
                    "roundNumber": number,
                    "matches": [
                        {"participants": [], "winner": None} for _ in range(slots)
                    ],
                }
            )

        return {
            "format": SINGLE_ELIMINATION,
            "rounds": rounds,
            "createdAt": created_at,
        }
