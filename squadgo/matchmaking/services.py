"""Service layer for matchmaking tickets and match creation."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from squadgo.core.constants import (
    ANY,
    IMMEDIATE_CANDIDATE_LIMIT,
    MATCH_STATUS_MATCHED,
    NOTIFY_MATCH_FOUND,
    TICKET_ACTIVE,
    TICKET_CANCELLED,
    TICKET_MATCHED,
)
from squadgo.core.store import TransactionAborted
from squadgo.errors import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
    surface_errors,
)
from squadgo.user.utils import smart_display_name
from squadgo.utils import utcnow

from .compatibility import compatible
from .repository import MatchRepository, TicketRepository

if TYPE_CHECKING:
    from squadgo.core.store import DocumentStore, Transaction
    from squadgo.notifications import NotificationDispatcher
    from squadgo.user import UserProfileLookup

    from .models import Match, MatchTicket, TicketSubmission

logger = logging.getLogger(__name__)


def build_match(
    ticket_a: MatchTicket, ticket_b: MatchTicket, now: datetime.datetime
) -> Match:
    """Denormalize two tickets into a match document."""
    language = ticket_a.get("language", ANY)
    if language == ANY:
        language = ticket_b.get("language", ANY)

    return {
        "user1Id": ticket_a["ownerUserId"],
        "user2Id": ticket_b["ownerUserId"],
        "participants": [
            {"userId": ticket_a["ownerUserId"], "user": ticket_a.get("user", {})},
            {"userId": ticket_b["ownerUserId"], "user": ticket_b.get("user", {})},
        ],
        "participantIds": [ticket_a["ownerUserId"], ticket_b["ownerUserId"]],
        "ticketIds": [ticket_a["id"], ticket_b["id"]],
        "game": ticket_a["game"],
        "region": ticket_a["region"],
        "gameMode": ticket_a["gameMode"],
        "skillTier": {
            "user1": ticket_a["skillTier"],
            "user2": ticket_b["skillTier"],
        },
        "language": language,
        "status": MATCH_STATUS_MATCHED,
        "createdAt": now,
    }


class MatchmakingService:
    """Handles ticket submission, cancellation and match creation."""

    def __init__(  # noqa: PLR0913
        self,
        store: DocumentStore,
        profiles: UserProfileLookup,
        notifier: NotificationDispatcher,
        tickets: TicketRepository | None = None,
        matches: MatchRepository | None = None,
        clock: Callable[[], datetime.datetime] = utcnow,
        candidate_limit: int = IMMEDIATE_CANDIDATE_LIMIT,
    ) -> None:
        """Wire the service to its store and collaborators."""
        self.store = store
        self.profiles = profiles
        self.notifier = notifier
        self.tickets = tickets or TicketRepository(store)
        self.matches = matches or MatchRepository(store)
        self.clock = clock
        self.candidate_limit = candidate_limit

    @surface_errors("Failed to start matchmaking")
    def submit_ticket(self, user_id: str, submission: TicketSubmission) -> MatchTicket:
        """Create an active ticket and try to pair it straight away."""
        try:
            submission.validate()
        except ValueError as e:
            raise ValidationError(str(e)) from e

        profile = self.profiles.snapshot(user_id, submission.game)
        now = self.clock()
        data: MatchTicket = {
            "ownerUserId": user_id,
            "user": profile,
            "game": submission.game,
            "region": submission.region,
            "gameMode": submission.game_mode,
            "skillTier": submission.skill_tier.lower(),
            "preferredRoles": submission.normalized_roles(),
            "language": submission.normalized_language(),
            "micRequired": submission.mic_required,
            "maxWaitTime": submission.wait_seconds,
            "status": TICKET_ACTIVE,
            "createdAt": now,
            "expiresAt": now + datetime.timedelta(seconds=submission.wait_seconds),
        }

        def create(transaction: Transaction) -> str:
            if self.tickets.find_active_for_owner(user_id, transaction) is not None:
                raise ConflictError("User already has an active matchmaking ticket.")
            return self.tickets.create(transaction, data)

        ticket_id = self.store.run_transaction(create)
        ticket: MatchTicket = {**data, "id": ticket_id}
        logger.info(f"Ticket {ticket_id} submitted by {user_id}")

        match_id = self.trigger_pairing(ticket)
        if match_id:
            ticket["status"] = TICKET_MATCHED
            ticket["matchId"] = match_id
        return ticket

    @surface_errors("Failed to cancel matchmaking")
    def cancel_ticket(self, user_id: str, ticket_id: str) -> MatchTicket:
        """Move the caller's active ticket to cancelled."""
        now = self.clock()

        def cancel(transaction: Transaction) -> MatchTicket:
            ticket = self.tickets.read(transaction, ticket_id)
            if ticket is None:
                raise NotFoundError("Matchmaking ticket not found.")
            if ticket.get("ownerUserId") != user_id:
                raise ForbiddenError("Not authorized to cancel this ticket.")
            if ticket.get("status") != TICKET_ACTIVE:
                raise InvalidStateError("Ticket is not active.")
            self.tickets.mark_cancelled(transaction, ticket_id, now)
            return {**ticket, "status": TICKET_CANCELLED, "cancelledAt": now}

        ticket = self.store.run_transaction(cancel)
        logger.info(f"Ticket {ticket_id} cancelled by {user_id}")
        return ticket

    @surface_errors("Failed to load ticket")
    def get_ticket(self, user_id: str, ticket_id: str) -> MatchTicket:
        """Return one of the caller's tickets."""
        ticket = self.tickets.get(ticket_id)
        if ticket is None:
            raise NotFoundError("Matchmaking ticket not found.")
        if ticket.get("ownerUserId") != user_id:
            raise ForbiddenError("Not authorized to view this ticket.")
        return ticket

    @surface_errors("Failed to load ticket")
    def get_active_ticket(self, user_id: str) -> MatchTicket | None:
        """Return the caller's active ticket, if any."""
        return self.tickets.find_active_for_owner(user_id)

    @surface_errors("Failed to load match")
    def get_match(self, user_id: str, match_id: str) -> Match:
        """Return a match the caller takes part in."""
        match = self.matches.get(match_id)
        if match is None:
            raise NotFoundError("Match not found.")
        if user_id not in match.get("participantIds", []):
            raise ForbiddenError("Not authorized to view this match.")
        return match

    def trigger_pairing(self, ticket: MatchTicket) -> str | None:
        """Try to pair a fresh ticket with the longest-waiting compatible one.

        Never raises: a lost race or store failure leaves the ticket active
        for the next scheduler pass.
        """
        try:
            candidates = self.tickets.find_candidates(ticket, self.candidate_limit)
            partner = next((c for c in candidates if compatible(ticket, c)), None)
            if partner is None:
                logger.info(f"No compatible ticket yet for {ticket['id']}")
                return None
            return self.create_match(ticket["id"], partner["id"])
        except Exception as e:
            logger.error(f"Error in immediate pairing for {ticket['id']}: {e}")
            return None

    def create_match(self, ticket_a_id: str, ticket_b_id: str) -> str | None:
        """Atomically turn two active tickets into a match.

        Returns the new match id, or None when either ticket was already
        consumed, cancelled, expired or deleted. Store errors propagate.
        """
        now = self.clock()

        def pair(transaction: Transaction) -> tuple[str, MatchTicket, MatchTicket]:
            ticket_a = self.tickets.read(transaction, ticket_a_id)
            ticket_b = self.tickets.read(transaction, ticket_b_id)
            if ticket_a is None or ticket_b is None:
                raise TransactionAborted("One or both tickets no longer exist")
            if (
                ticket_a.get("status") != TICKET_ACTIVE
                or ticket_b.get("status") != TICKET_ACTIVE
            ):
                raise TransactionAborted("One or both tickets are no longer active")
            if ticket_a.get("ownerUserId") == ticket_b.get("ownerUserId"):
                raise TransactionAborted("Tickets belong to the same user")

            match_id = self.matches.create(transaction, build_match(ticket_a, ticket_b, now))
            self.tickets.mark_matched(transaction, ticket_a_id, match_id, now)
            self.tickets.mark_matched(transaction, ticket_b_id, match_id, now)
            return match_id, ticket_a, ticket_b

        try:
            match_id, ticket_a, ticket_b = self.store.run_transaction(pair)
        except TransactionAborted as e:
            logger.info(f"Match not created for {ticket_a_id}/{ticket_b_id}: {e}")
            return None

        logger.info(
            f"Match {match_id} created between "
            f"{ticket_a['ownerUserId']} and {ticket_b['ownerUserId']}"
        )
        self._notify_match_found(match_id, ticket_a, ticket_b)
        self._notify_match_found(match_id, ticket_b, ticket_a)
        return match_id

    def _notify_match_found(
        self, match_id: str, recipient: MatchTicket, opponent: MatchTicket
    ) -> None:
        opponent_user: dict[str, Any] = dict(opponent.get("user") or {})
        opponent_user.setdefault("id", opponent["ownerUserId"])
        self.notifier.enqueue(
            NOTIFY_MATCH_FOUND,
            recipient["ownerUserId"],
            {
                "matchId": match_id,
                "opponentName": smart_display_name(opponent_user),
                "opponentAvatar": opponent_user.get("avatar"),
            },
        )
