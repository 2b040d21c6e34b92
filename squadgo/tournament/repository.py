"""Tournament repository, including the per-tournament matches sub-collection."""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, cast

from squadgo.core.constants import (
    DISPUTED,
    TMATCH_COMPLETED,
    TMATCH_DISPUTED,
    TMATCH_REPORTED,
    TOURNAMENT_ACTIVE,
    TOURNAMENT_MATCHES_SUBCOLLECTION,
    TOURNAMENTS_COLLECTION,
    VERIFIED,
)

from .models import Bracket, MatchResult, Participant, Tournament, TournamentMatch

if TYPE_CHECKING:
    from squadgo.core.store import DocumentStore, Transaction


class TournamentRepository:
    """Reads and transitions for tournaments and their matches."""

    collection = TOURNAMENTS_COLLECTION

    def __init__(self, store: DocumentStore) -> None:
        """Store tournaments in ``store``."""
        self.store = store

    def matches_collection(self, tournament_id: str) -> str:
        """Path of a tournament's matches sub-collection."""
        return f"{self.collection}/{tournament_id}/{TOURNAMENT_MATCHES_SUBCOLLECTION}"

    def get(self, tournament_id: str) -> Tournament | None:
        """Fetch a tournament by id."""
        return cast("Tournament | None", self.store.get(self.collection, tournament_id))

    def create(self, data: Tournament) -> str:
        """Write a new tournament and return its id."""
        return self.store.add(self.collection, dict(data))

    def read(self, transaction: Transaction, tournament_id: str) -> Tournament | None:
        """Read a tournament inside a transaction."""
        return cast(
            "Tournament | None", transaction.get(self.collection, tournament_id)
        )

    def save_participants(
        self,
        transaction: Transaction,
        tournament_id: str,
        participants: list[Participant],
        now: datetime.datetime,
    ) -> None:
        """Queue the new participant list and its flat id index."""
        transaction.update(
            self.collection,
            tournament_id,
            {
                "participants": participants,
                "participantIds": [p["id"] for p in participants],
                "updatedAt": now,
            },
        )

    def start(
        self,
        transaction: Transaction,
        tournament_id: str,
        bracket: Bracket,
        now: datetime.datetime,
    ) -> None:
        """Queue the registration -> active transition with its bracket."""
        transaction.update(
            self.collection,
            tournament_id,
            {"bracket": bracket, "status": TOURNAMENT_ACTIVE, "updatedAt": now},
        )

    def create_match(
        self, transaction: Transaction, tournament_id: str, data: TournamentMatch
    ) -> str:
        """Queue a new tournament match write and return its id."""
        collection = self.matches_collection(tournament_id)
        match_id = self.store.new_id(collection)
        transaction.set(collection, match_id, dict(data))
        return match_id

    def read_match(
        self, transaction: Transaction, tournament_id: str, match_id: str
    ) -> TournamentMatch | None:
        """Read a tournament match inside a transaction."""
        return cast(
            "TournamentMatch | None",
            transaction.get(self.matches_collection(tournament_id), match_id),
        )

    def get_match(self, tournament_id: str, match_id: str) -> TournamentMatch | None:
        """Fetch a tournament match by id."""
        return cast(
            "TournamentMatch | None",
            self.store.get(self.matches_collection(tournament_id), match_id),
        )

    def list_matches(self, tournament_id: str) -> list[TournamentMatch]:
        """All matches of a tournament in bracket order."""
        docs = self.store.query(
            self.matches_collection(tournament_id), order_by="matchNumber"
        )
        return cast("list[TournamentMatch]", docs)

    def record_report(
        self,
        transaction: Transaction,
        tournament_id: str,
        match_id: str,
        result: MatchResult,
        now: datetime.datetime,
    ) -> None:
        """Queue the active -> reported transition."""
        transaction.update(
            self.matches_collection(tournament_id),
            match_id,
            {"result": result, "status": TMATCH_REPORTED, "updatedAt": now},
        )

    def record_verification(  # noqa: PLR0913
        self,
        transaction: Transaction,
        tournament_id: str,
        match_id: str,
        verifier_id: str,
        approved: bool,
        now: datetime.datetime,
    ) -> None:
        """Queue the reported -> completed | disputed transition."""
        transaction.update(
            self.matches_collection(tournament_id),
            match_id,
            {
                "result.verifiedBy": verifier_id,
                "result.verifiedAt": now,
                "result.verificationStatus": VERIFIED if approved else DISPUTED,
                "status": TMATCH_COMPLETED if approved else TMATCH_DISPUTED,
                "updatedAt": now,
            },
        )
