"""Data models for the tournament blueprint."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any, Optional, TypedDict

from squadgo.core.constants import (
    MAX_TOURNAMENT_PARTICIPANTS,
    MIN_TOURNAMENT_PARTICIPANTS,
    SINGLE_ELIMINATION,
)
from squadgo.core.types import StoreDocument
from squadgo.utils import as_utc


class Participant(TypedDict, total=False):
    """Snapshot of a registered player."""

    id: str
    username: str
    displayName: str
    avatar: Optional[str]
    joinedAt: Any


class Organizer(TypedDict, total=False):
    """Snapshot of the organizing user."""

    id: str
    username: str
    displayName: str


class BracketMatch(TypedDict):
    """One slot of a bracket round; a single participant means a bye."""

    participants: list[Participant]
    winner: Optional[Participant]


class Round(TypedDict):
    """An ordered list of bracket matches."""

    roundNumber: int
    matches: list[BracketMatch]


class Bracket(TypedDict, total=False):
    """Single-elimination bracket stored on the tournament."""

    format: str
    rounds: list[Round]
    createdAt: Any


class Tournament(StoreDocument, total=False):
    """A tournament document."""

    name: str
    description: str
    game: str
    format: str
    organizerUserId: str
    organizer: Organizer
    maxParticipants: int
    entryFee: float
    prizePool: float
    rules: list[str]
    registrationDeadline: Any
    startDate: Any
    participants: list[Participant]
    participantIds: list[str]
    status: str
    bracket: Optional[Bracket]


class MatchResult(TypedDict, total=False):
    """Reported outcome of a tournament match."""

    reportedBy: str
    winnerId: str
    score: str
    proof: Optional[str]
    reportedAt: Any
    verifiedBy: str
    verifiedAt: Any
    verificationStatus: str


class TournamentMatch(StoreDocument, total=False):
    """A playable round-1 match in the tournament's matches sub-collection."""

    tournamentId: str
    roundNumber: int
    matchNumber: int
    participants: list[Participant]
    participantIds: list[str]
    isBye: bool
    status: str
    result: Optional[MatchResult]


@dataclass
class TournamentSubmission:
    """Dataclass for a create-tournament request."""

    name: str
    game: str
    max_participants: int
    registration_deadline: datetime.datetime
    start_date: datetime.datetime
    format: str = SINGLE_ELIMINATION
    description: str = ""
    entry_fee: float = 0.0
    prize_pool: float = 0.0
    rules: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Store both dates as aware UTC datetimes."""
        if isinstance(self.registration_deadline, datetime.date):
            self.registration_deadline = as_utc(self.registration_deadline)
        if isinstance(self.start_date, datetime.date):
            self.start_date = as_utc(self.start_date)

    def validate(self) -> None:
        """Validate the submission for obvious errors."""
        if not self.name or not self.name.strip():
            raise ValueError("Tournament name is required.")
        if not self.game:
            raise ValueError("Game is required.")
        if self.format != SINGLE_ELIMINATION:
            raise ValueError(f"Unsupported tournament format: {self.format}.")
        if not (
            MIN_TOURNAMENT_PARTICIPANTS
            <= self.max_participants
            <= MAX_TOURNAMENT_PARTICIPANTS
        ):
            raise ValueError(
                f"maxParticipants must be between {MIN_TOURNAMENT_PARTICIPANTS} "
                f"and {MAX_TOURNAMENT_PARTICIPANTS}."
            )
        if self.registration_deadline > self.start_date:
            raise ValueError("Registration must close before the tournament starts.")
        if self.entry_fee < 0 or self.prize_pool < 0:
            raise ValueError("Entry fee and prize pool cannot be negative.")


@dataclass
class MatchReport:
    """A participant's claim about who won a tournament match."""

    winner_id: str
    score: str
    proof: Optional[str] = None
