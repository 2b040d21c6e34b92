"""Periodic matchmaking jobs: the pairing pass and the expiration sweep.

Both jobs are plain callables so any runner can drive them: the in-process
``JobScheduler``, the ``flask pair-tickets`` / ``flask expire-tickets``
commands, or an external cron. Overlapping runs are not locked against each
other; ``MatchmakingService.create_match`` re-reads both tickets inside its
transaction, which is what keeps a ticket from being paired twice.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

from squadgo.core.constants import (
    EXPIRATION_BATCH_LIMIT,
    PAIRING_BATCH_LIMIT,
    TICKET_ACTIVE,
)
from squadgo.utils import utcnow

from .compatibility import compatible, group_tickets

if TYPE_CHECKING:
    from squadgo.core.store import Transaction

    from .models import MatchTicket
    from .repository import TicketRepository
    from .services import MatchmakingService

logger = logging.getLogger(__name__)


@dataclass
class PairingSummary:
    """Counters reported by one pairing pass."""

    tickets: int = 0
    groups: int = 0
    pairs: int = 0
    expired: int = 0

    def to_dict(self) -> dict[str, int]:
        """Return the counters as a dict."""
        return asdict(self)


class TicketReaper:
    """Expires active tickets whose ``expiresAt`` has passed."""

    def __init__(
        self,
        tickets: TicketRepository,
        clock: Callable[[], datetime.datetime] = utcnow,
        batch_limit: int = EXPIRATION_BATCH_LIMIT,
    ) -> None:
        """Sweep ``tickets`` at most ``batch_limit`` at a time."""
        self.tickets = tickets
        self.clock = clock
        self.batch_limit = batch_limit

    def run_expiration_sweep(self) -> int:
        """Expire one batch of stale tickets. Returns how many were expired.

        Anything beyond ``batch_limit`` waits for the next run.
        """
        now = self.clock()
        try:
            stale = self.tickets.find_expired(now, self.batch_limit)
            if not stale:
                logger.info("No expired tickets found")
                return 0

            ticket_ids = [ticket["id"] for ticket in stale]

            def expire(transaction: Transaction) -> list[str]:
                return self.tickets.expire_active(transaction, ticket_ids, now)

            expired = self.tickets.store.run_transaction(expire)
        except Exception as e:
            logger.error(f"Error cleaning up expired tickets: {e}")
            return 0

        logger.info(f"Expired {len(expired)} tickets")
        return len(expired)


class PairingScheduler:
    """Greedy batch pairing of waiting tickets."""

    def __init__(
        self,
        matchmaking: MatchmakingService,
        reaper: TicketReaper,
        batch_limit: int = PAIRING_BATCH_LIMIT,
    ) -> None:
        """Pair through ``matchmaking`` and sweep with ``reaper`` afterwards."""
        self.matchmaking = matchmaking
        self.reaper = reaper
        self.batch_limit = batch_limit

    def run_pairing_pass(self) -> PairingSummary:
        """Pair the oldest active tickets group by group, then expire stale ones."""
        summary = PairingSummary()
        try:
            tickets = self.matchmaking.tickets.oldest_active(self.batch_limit)
        except Exception as e:
            logger.error(f"Error loading active tickets: {e}")
            tickets = []

        if tickets:
            logger.info(f"Found {len(tickets)} active tickets")
            groups = group_tickets(tickets)
            summary.tickets = len(tickets)
            summary.groups = len(groups)
            for group in groups.values():
                summary.pairs += self.pair_group(group)
        else:
            logger.info("No active tickets found")

        summary.expired = self.reaper.run_expiration_sweep()
        logger.info(f"Pairing pass created {summary.pairs} pairs")
        return summary

    def pair_group(self, group: list[MatchTicket]) -> int:
        """Single forward scan over one group in creation order.

        The oldest unconsumed ticket anchors the search and takes the first
        later, unconsumed, compatible partner. An anchor that left the active
        state since the fetch stops its scan.
        """
        if len(group) < 2:  # noqa: PLR2004
            return 0

        consumed: set[str] = set()
        pairs = 0
        for index, anchor in enumerate(group):
            if anchor["id"] in consumed:
                continue
            for partner in group[index + 1 :]:
                if partner["id"] in consumed or not compatible(anchor, partner):
                    continue
                try:
                    match_id = self.matchmaking.create_match(anchor["id"], partner["id"])
                except Exception as e:
                    logger.error(f"Error creating match: {e}")
                    continue
                if match_id:
                    consumed.update((anchor["id"], partner["id"]))
                    pairs += 1
                    break
                if not self._still_active(anchor["id"]):
                    consumed.add(anchor["id"])
                    break
        return pairs

    def _still_active(self, ticket_id: str) -> bool:
        try:
            ticket = self.matchmaking.tickets.get(ticket_id)
        except Exception as e:
            logger.error(f"Error re-reading ticket {ticket_id}: {e}")
            return False
        return ticket is not None and ticket.get("status") == TICKET_ACTIVE
