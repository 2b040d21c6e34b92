"""Flask extensions for the application."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from flask import current_app

from .core.firestore_store import FirestoreStore
from .core.memory_store import MemoryStore
from .scheduler import JobScheduler

if TYPE_CHECKING:
    from flask import Flask

    from .core.store import DocumentStore
    from .matchmaking.jobs import PairingScheduler, TicketReaper
    from .matchmaking.services import MatchmakingService
    from .tournament.services import TournamentService

STORE_BACKENDS = ("firestore", "memory")


@dataclass
class Services:
    """The store and every service built on it, one set per app."""

    store: DocumentStore
    matchmaking: MatchmakingService
    reaper: TicketReaper
    pairing: PairingScheduler
    tournaments: TournamentService


def build_store(backend: str) -> DocumentStore:
    """Instantiate the configured document store."""
    if backend == "memory":
        return MemoryStore()
    if backend == "firestore":
        return FirestoreStore()
    raise ValueError(
        f"Unknown STORE_BACKEND {backend!r}, expected one of {STORE_BACKENDS}"
    )


def build_services(store: DocumentStore, config: dict) -> Services:
    """Wire the services on top of ``store`` using the app config."""
    from .matchmaking.jobs import PairingScheduler, TicketReaper
    from .matchmaking.repository import TicketRepository
    from .matchmaking.services import MatchmakingService
    from .notifications import NotificationDispatcher
    from .tournament.bracket import BracketGenerator
    from .tournament.services import TournamentService
    from .user import UserProfileLookup

    profiles = UserProfileLookup(store)
    notifier = NotificationDispatcher(store)
    tickets = TicketRepository(store)
    matchmaking = MatchmakingService(
        store,
        profiles,
        notifier,
        tickets=tickets,
        candidate_limit=config["IMMEDIATE_CANDIDATE_LIMIT"],
    )
    reaper = TicketReaper(tickets, batch_limit=config["EXPIRATION_BATCH_LIMIT"])
    pairing = PairingScheduler(
        matchmaking, reaper, batch_limit=config["PAIRING_BATCH_LIMIT"]
    )
    seed = config.get("BRACKET_SEED")
    tournaments = TournamentService(
        store,
        profiles,
        notifier,
        bracket_generator=BracketGenerator(
            random.Random(seed) if seed is not None else None
        ),
    )
    return Services(
        store=store,
        matchmaking=matchmaking,
        reaper=reaper,
        pairing=pairing,
        tournaments=tournaments,
    )


class Backend:
    """Holds the per-app store and services."""

    def __init__(self, app: Flask | None = None) -> None:
        """Optionally bind to ``app`` straight away."""
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Build the services from ``app.config``.

        A ready-made store can be passed as ``STORE`` (the tests do this).
        """
        store = app.config.get("STORE") or build_store(app.config["STORE_BACKEND"])
        app.extensions["squadgo"] = build_services(store, app.config)

    @property
    def services(self) -> Services:
        """Services of the current app."""
        return current_app.extensions["squadgo"]


backend = Backend()
scheduler = JobScheduler()
