"""Ticket and match repositories."""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any, cast

from squadgo.core.constants import (
    MATCHES_COLLECTION,
    TICKET_ACTIVE,
    TICKET_CANCELLED,
    TICKET_EXPIRED,
    TICKET_MATCHED,
    TICKETS_COLLECTION,
)

from .models import Match, MatchTicket

if TYPE_CHECKING:
    from squadgo.core.store import DocumentStore, Transaction


class TicketRepository:
    """Queries and transitions for matchmaking tickets."""

    collection = TICKETS_COLLECTION

    def __init__(self, store: DocumentStore) -> None:
        """Store tickets in ``store``."""
        self.store = store

    def get(self, ticket_id: str) -> MatchTicket | None:
        """Fetch a ticket by id."""
        return cast("MatchTicket | None", self.store.get(self.collection, ticket_id))

    def find_active_for_owner(
        self, user_id: str, transaction: Transaction | None = None
    ) -> MatchTicket | None:
        """Return the owner's active ticket, if any."""
        filters = [("ownerUserId", "==", user_id), ("status", "==", TICKET_ACTIVE)]
        source: Any = transaction if transaction is not None else self.store
        docs = source.query(self.collection, filters, limit=1)
        return cast("MatchTicket", docs[0]) if docs else None

    def find_candidates(self, ticket: MatchTicket, limit: int) -> list[MatchTicket]:
        """Oldest active tickets in the same group, excluding the owner's own."""
        filters = [
            ("status", "==", TICKET_ACTIVE),
            ("game", "==", ticket["game"]),
            ("region", "==", ticket["region"]),
            ("gameMode", "==", ticket["gameMode"]),
        ]
        # The owner holds at most one active ticket, so one extra row covers it.
        docs = self.store.query(
            self.collection, filters, order_by="createdAt", limit=limit + 1
        )
        candidates = [
            cast("MatchTicket", doc)
            for doc in docs
            if doc.get("ownerUserId") != ticket["ownerUserId"]
        ]
        return candidates[:limit]

    def oldest_active(self, limit: int) -> list[MatchTicket]:
        """Active tickets in creation order."""
        docs = self.store.query(
            self.collection,
            [("status", "==", TICKET_ACTIVE)],
            order_by="createdAt",
            limit=limit,
        )
        return cast("list[MatchTicket]", docs)

    def find_expired(self, now: datetime.datetime, limit: int) -> list[MatchTicket]:
        """Active tickets whose expiry time has passed."""
        docs = self.store.query(
            self.collection,
            [("status", "==", TICKET_ACTIVE), ("expiresAt", "<=", now)],
            limit=limit,
        )
        return cast("list[MatchTicket]", docs)

    def expire_active(
        self, transaction: Transaction, ticket_ids: list[str], now: datetime.datetime
    ) -> list[str]:
        """Queue the active -> expired transition for tickets still active.

        Tickets matched or cancelled since they were queried are left alone.
        """
        current = [self.read(transaction, ticket_id) for ticket_id in ticket_ids]
        expired = [
            ticket["id"]
            for ticket in current
            if ticket is not None and ticket.get("status") == TICKET_ACTIVE
        ]
        for ticket_id in expired:
            transaction.update(
                self.collection,
                ticket_id,
                {"status": TICKET_EXPIRED, "expiredAt": now},
            )
        return expired

    def create(self, transaction: Transaction, data: MatchTicket) -> str:
        """Queue a new ticket write and return its id."""
        ticket_id = self.store.new_id(self.collection)
        transaction.set(self.collection, ticket_id, dict(data))
        return ticket_id

    def read(self, transaction: Transaction, ticket_id: str) -> MatchTicket | None:
        """Read a ticket inside a transaction."""
        return cast("MatchTicket | None", transaction.get(self.collection, ticket_id))

    def mark_matched(
        self,
        transaction: Transaction,
        ticket_id: str,
        match_id: str,
        now: datetime.datetime,
    ) -> None:
        """Queue the active -> matched transition."""
        transaction.update(
            self.collection,
            ticket_id,
            {"status": TICKET_MATCHED, "matchId": match_id, "matchedAt": now},
        )

    def mark_cancelled(
        self, transaction: Transaction, ticket_id: str, now: datetime.datetime
    ) -> None:
        """Queue the active -> cancelled transition."""
        transaction.update(
            self.collection,
            ticket_id,
            {"status": TICKET_CANCELLED, "cancelledAt": now},
        )


class MatchRepository:
    """Storage for matches created from ticket pairs."""

    collection = MATCHES_COLLECTION

    def __init__(self, store: DocumentStore) -> None:
        """Store matches in ``store``."""
        self.store = store

    def get(self, match_id: str) -> Match | None:
        """Fetch a match by id."""
        return cast("Match | None", self.store.get(self.collection, match_id))

    def create(self, transaction: Transaction, data: Match) -> str:
        """Queue a new match write and return its id."""
        match_id = self.store.new_id(self.collection)
        transaction.set(self.collection, match_id, dict(data))
        return match_id
