"""Builders shared by the service and route tests."""

from __future__ import annotations

import datetime
import random
from typing import Any

from squadgo.core.constants import USERS_COLLECTION
from squadgo.core.memory_store import MemoryStore
from squadgo.matchmaking.jobs import PairingScheduler, TicketReaper
from squadgo.matchmaking.models import TicketSubmission
from squadgo.matchmaking.services import MatchmakingService
from squadgo.notifications import NotificationDispatcher
from squadgo.tournament.bracket import BracketGenerator
from squadgo.tournament.models import TournamentSubmission
from squadgo.tournament.services import TournamentService
from squadgo.user import UserProfileLookup

START = datetime.datetime(2026, 3, 1, 12, 0, tzinfo=datetime.timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime.datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += datetime.timedelta(seconds=seconds)


def seed_user(store: MemoryStore, user_id: str, **extra: Any) -> None:
    """Write a minimal user profile."""
    data = {
        "username": user_id,
        "displayName": extra.pop("displayName", user_id.title()),
        "avatar": f"https://cdn.example.com/{user_id}.png",
    }
    data.update(extra)
    store.add(USERS_COLLECTION, data, doc_id=user_id)


def ticket_request(**overrides: Any) -> TicketSubmission:
    """A valid ticket request for PUBG squads in Europe."""
    fields: dict[str, Any] = {
        "game": "pubg",
        "region": "eu",
        "game_mode": "squad",
        "skill_tier": "gold",
        "preferred_roles": [],
        "language": "en",
        "mic_required": False,
    }
    fields.update(overrides)
    return TicketSubmission(**fields)


def tournament_request(**overrides: Any) -> TournamentSubmission:
    """A valid 8-player tournament starting a week after START."""
    fields: dict[str, Any] = {
        "name": "Spring Cup",
        "game": "pubg",
        "max_participants": 8,
        "registration_deadline": START + datetime.timedelta(days=6),
        "start_date": START + datetime.timedelta(days=7),
    }
    fields.update(overrides)
    return TournamentSubmission(**fields)


class Harness:
    """Every service wired to one MemoryStore and one FakeClock."""

    def __init__(self, seed: int = 7) -> None:
        self.store = MemoryStore()
        self.clock = FakeClock()
        self.profiles = UserProfileLookup(self.store)
        self.notifier = NotificationDispatcher(self.store)
        self.matchmaking = MatchmakingService(
            self.store, self.profiles, self.notifier, clock=self.clock
        )
        self.reaper = TicketReaper(self.matchmaking.tickets, clock=self.clock)
        self.pairing = PairingScheduler(self.matchmaking, self.reaper)
        self.tournaments = TournamentService(
            self.store,
            self.profiles,
            self.notifier,
            bracket_generator=BracketGenerator(random.Random(seed)),
            clock=self.clock,
        )

    def ticket(self, ticket_id: str) -> dict[str, Any]:
        """Committed state of a ticket."""
        ticket = self.store.get("matchTickets", ticket_id)
        assert ticket is not None
        return ticket

    def notifications(self, recipient_id: str | None = None) -> list[dict[str, Any]]:
        """Queued notifications, optionally for one recipient."""
        docs = self.store.query("notifications")
        if recipient_id is None:
            return docs
        return [doc for doc in docs if doc["recipientId"] == recipient_id]
