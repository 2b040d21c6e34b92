"""Data models for the matchmaking blueprint."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, TypedDict

from squadgo.core.constants import (
    DEFAULT_MAX_WAIT_SECONDS,
    MAX_MAX_WAIT_SECONDS,
    MIN_MAX_WAIT_SECONDS,
    SKILL_TIERS,
)
from squadgo.core.types import StoreDocument, UserProfile


class MatchTicket(StoreDocument, total=False):
    """A matchmaking ticket document."""

    ownerUserId: str
    user: UserProfile
    game: str
    region: str
    gameMode: str
    skillTier: str
    preferredRoles: list[str]
    language: str
    micRequired: bool
    maxWaitTime: int
    status: str
    expiresAt: Any
    matchId: str
    matchedAt: Any
    cancelledAt: Any
    expiredAt: Any


class MatchParticipant(TypedDict):
    """One side of a created match."""

    userId: str
    user: UserProfile


class Match(StoreDocument, total=False):
    """A match created from two tickets."""

    user1Id: str
    user2Id: str
    participants: list[MatchParticipant]
    participantIds: list[str]
    ticketIds: list[str]
    game: str
    region: str
    gameMode: str
    skillTier: dict[str, str]
    language: str
    status: str


@dataclass
class TicketSubmission:
    """Dataclass for a matchmaking ticket request."""

    game: str
    region: str
    game_mode: str
    skill_tier: str
    preferred_roles: list[str] = field(default_factory=list)
    language: str = "en"
    mic_required: bool = False
    max_wait_time: Optional[int] = None

    def validate(self) -> None:
        """Validate the submission for obvious errors."""
        for name in ("game", "region", "game_mode"):
            if not getattr(self, name):
                raise ValueError(f"{name} is required.")
        if (
            not isinstance(self.skill_tier, str)
            or self.skill_tier.lower() not in SKILL_TIERS
        ):
            raise ValueError(f"Unknown skill tier: {self.skill_tier}.")
        if self.max_wait_time is not None and not (
            MIN_MAX_WAIT_SECONDS <= self.max_wait_time <= MAX_MAX_WAIT_SECONDS
        ):
            raise ValueError(
                f"max_wait_time must be between {MIN_MAX_WAIT_SECONDS} "
                f"and {MAX_MAX_WAIT_SECONDS} seconds."
            )

    @property
    def wait_seconds(self) -> int:
        """Ticket lifetime in seconds."""
        return self.max_wait_time or DEFAULT_MAX_WAIT_SECONDS

    def normalized_roles(self) -> list[str]:
        """Trimmed, lower-cased, de-duplicated roles in submission order."""
        roles: list[str] = []
        for role in self.preferred_roles:
            role = role.strip().lower()
            if role and role not in roles:
                roles.append(role)
        return roles

    def normalized_language(self) -> str:
        """Lower-cased language, defaulting to "en"."""
        return (self.language or "").strip().lower() or "en"
