"""Service layer for tournament business logic."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from squadgo.core.constants import (
    MIN_TOURNAMENT_PARTICIPANTS,
    NOTIFY_TOURNAMENT_JOINED,
    NOTIFY_TOURNAMENT_STATUS_CHANGE,
    PENDING_VERIFICATION,
    TMATCH_ACTIVE,
    TMATCH_REPORTED,
    TOURNAMENT_ACTIVE,
    TOURNAMENT_REGISTRATION,
)
from squadgo.errors import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
    surface_errors,
)
from squadgo.utils import as_utc, utcnow

from .bracket import BracketGenerator
from .repository import TournamentRepository

if TYPE_CHECKING:
    from squadgo.core.store import DocumentStore, Transaction
    from squadgo.notifications import NotificationDispatcher
    from squadgo.user import UserProfileLookup

    from .models import (
        Bracket,
        MatchReport,
        MatchResult,
        Participant,
        Tournament,
        TournamentMatch,
        TournamentSubmission,
    )

logger = logging.getLogger(__name__)


def organizer_id(tournament: Tournament) -> str | None:
    """Id of the organizing user, from the flat field or the snapshot."""
    return tournament.get("organizerUserId") or (
        tournament.get("organizer") or {}
    ).get("id")


class TournamentService:
    """Handles tournament registration, seeding and match results."""

    def __init__(  # noqa: PLR0913
        self,
        store: DocumentStore,
        profiles: UserProfileLookup,
        notifier: NotificationDispatcher,
        tournaments: TournamentRepository | None = None,
        bracket_generator: BracketGenerator | None = None,
        clock: Callable[[], datetime.datetime] = utcnow,
    ) -> None:
        """Wire the service to its store and collaborators."""
        self.store = store
        self.profiles = profiles
        self.notifier = notifier
        self.tournaments = tournaments or TournamentRepository(store)
        self.bracket_generator = bracket_generator or BracketGenerator()
        self.clock = clock

    def _load(self, tournament_id: str) -> Tournament:
        tournament = self.tournaments.get(tournament_id)
        if tournament is None:
            raise NotFoundError("Tournament not found.")
        return tournament

    @surface_errors("Failed to create tournament")
    def create_tournament(self, user_id: str, submission: TournamentSubmission) -> str:
        """Open a tournament for registration and return its id."""
        try:
            submission.validate()
        except ValueError as e:
            raise ValidationError(str(e)) from e

        profile = self.profiles.get(user_id)
        now = self.clock()
        data: Tournament = {
            "name": submission.name.strip(),
            "description": submission.description,
            "game": submission.game,
            "format": submission.format,
            "maxParticipants": submission.max_participants,
            "entryFee": submission.entry_fee,
            "prizePool": submission.prize_pool,
            "startDate": as_utc(submission.start_date),
            "registrationDeadline": as_utc(submission.registration_deadline),
            "rules": list(submission.rules),
            "organizerUserId": user_id,
            "organizer": {
                "id": user_id,
                "username": profile["username"],
                "displayName": profile["displayName"],
            },
            "participants": [],
            "participantIds": [],
            "status": TOURNAMENT_REGISTRATION,
            "bracket": None,
            "createdAt": now,
            "updatedAt": now,
        }
        tournament_id = self.tournaments.create(data)
        logger.info(f"Tournament {tournament_id} created by {user_id}")
        return tournament_id

    @surface_errors("Failed to load tournament")
    def get_tournament(self, tournament_id: str) -> Tournament:
        """Fetch a tournament."""
        return self._load(tournament_id)

    @surface_errors("Failed to load tournament matches")
    def list_tournament_matches(self, tournament_id: str) -> list[TournamentMatch]:
        """List a tournament's matches in bracket order."""
        self._load(tournament_id)
        return self.tournaments.list_matches(tournament_id)

    @surface_errors("Failed to join tournament")
    def join_tournament(self, tournament_id: str, user_id: str) -> Participant:
        """Register the user, re-checking capacity and duplicates atomically."""
        profile = self.profiles.get(user_id)
        now = self.clock()
        participant: Participant = {
            "id": user_id,
            "username": profile["username"],
            "displayName": profile["displayName"],
            "avatar": profile.get("avatar"),
            "joinedAt": now,
        }

        def join(transaction: Transaction) -> Tournament:
            tournament = self.tournaments.read(transaction, tournament_id)
            if tournament is None:
                raise NotFoundError("Tournament not found.")
            if tournament.get("status") != TOURNAMENT_REGISTRATION:
                raise InvalidStateError("Tournament registration is closed.")
            deadline = tournament.get("registrationDeadline")
            if deadline is not None and now > as_utc(deadline):
                raise InvalidStateError("Tournament registration deadline has passed.")

            participants = list(tournament.get("participants") or [])
            if len(participants) >= tournament.get("maxParticipants", 0):
                raise ConflictError("Tournament is full.")
            if any(p.get("id") == user_id for p in participants):
                raise ConflictError("Already registered for this tournament.")

            participants.append(participant)
            self.tournaments.save_participants(
                transaction, tournament_id, participants, now
            )
            return tournament

        tournament = self.store.run_transaction(join)
        logger.info(f"User {user_id} joined tournament {tournament_id}")
        self.notifier.enqueue(
            NOTIFY_TOURNAMENT_JOINED,
            user_id,
            {"tournamentId": tournament_id, "tournamentName": tournament.get("name")},
        )
        return participant

    @surface_errors("Failed to seed bracket")
    def seed_bracket(self, tournament_id: str, user_id: str) -> Bracket:
        """Build the bracket, start the tournament and open its round-1 matches."""
        now = self.clock()

        def seed(transaction: Transaction) -> tuple[Tournament, Bracket]:
            tournament = self.tournaments.read(transaction, tournament_id)
            if tournament is None:
                raise NotFoundError("Tournament not found.")
            if organizer_id(tournament) != user_id:
                raise ForbiddenError("Only the tournament organizer can seed the bracket.")
            if tournament.get("status") != TOURNAMENT_REGISTRATION:
                raise InvalidStateError("Tournament is not in registration phase.")
            participants = tournament.get("participants") or []
            if len(participants) < MIN_TOURNAMENT_PARTICIPANTS:
                raise InvalidStateError("Need at least 2 participants to create bracket.")

            bracket = self.bracket_generator.generate(participants, now)
            self.tournaments.start(transaction, tournament_id, bracket, now)
            first_round = bracket["rounds"][0]["matches"]
            for number, slot in enumerate(first_round, start=1):
                match: TournamentMatch = {
                    "tournamentId": tournament_id,
                    "roundNumber": 1,
                    "matchNumber": number,
                    "participants": slot["participants"],
                    "participantIds": [p["id"] for p in slot["participants"]],
                    "isBye": len(slot["participants"]) == 1,
                    "status": TMATCH_ACTIVE,
                    "result": None,
                    "createdAt": now,
                    "updatedAt": now,
                }
                self.tournaments.create_match(transaction, tournament_id, match)
            return tournament, bracket

        tournament, bracket = self.store.run_transaction(seed)
        logger.info(
            f"Bracket seeded for tournament {tournament_id}: "
            f"{len(bracket['rounds'][0]['matches'])} round-1 matches"
        )
        self.notifier.enqueue_many(
            NOTIFY_TOURNAMENT_STATUS_CHANGE,
            [p["id"] for p in tournament.get("participants") or []],
            {
                "tournamentId": tournament_id,
                "tournamentName": tournament.get("name"),
                "oldStatus": TOURNAMENT_REGISTRATION,
                "newStatus": TOURNAMENT_ACTIVE,
            },
        )
        return bracket

    def _read_pair(
        self, transaction: Transaction, tournament_id: str, match_id: str
    ) -> tuple[Tournament, TournamentMatch]:
        tournament = self.tournaments.read(transaction, tournament_id)
        match = self.tournaments.read_match(transaction, tournament_id, match_id)
        if tournament is None or match is None:
            raise NotFoundError("Tournament or match not found.")
        return tournament, match

    @surface_errors("Failed to report match")
    def report_match(
        self, tournament_id: str, match_id: str, reporter_id: str, report: MatchReport
    ) -> MatchResult:
        """Record a participant's result claim, pending organizer verification."""
        now = self.clock()

        def submit(transaction: Transaction) -> MatchResult:
            _, match = self._read_pair(transaction, tournament_id, match_id)
            participant_ids = [p.get("id") for p in match.get("participants") or []]
            if reporter_id not in participant_ids:
                raise ForbiddenError("Not authorized to report this match.")
            if match.get("status") != TMATCH_ACTIVE:
                raise InvalidStateError("Match is not active.")
            if report.winner_id not in participant_ids:
                raise ValidationError("Winner must be a participant of this match.")

            result: MatchResult = {
                "reportedBy": reporter_id,
                "winnerId": report.winner_id,
                "score": report.score,
                "proof": report.proof or None,
                "reportedAt": now,
                "verificationStatus": PENDING_VERIFICATION,
            }
            self.tournaments.record_report(
                transaction, tournament_id, match_id, result, now
            )
            return result

        result = self.store.run_transaction(submit)
        logger.info(f"Match {match_id} of {tournament_id} reported by {reporter_id}")
        return result

    @surface_errors("Failed to verify match")
    def verify_match(
        self, tournament_id: str, match_id: str, verifier_id: str, approved: bool
    ) -> TournamentMatch:
        """Organizer approval or dispute of a reported result."""
        now = self.clock()

        def verify(transaction: Transaction) -> None:
            tournament, match = self._read_pair(transaction, tournament_id, match_id)
            if organizer_id(tournament) != verifier_id:
                raise ForbiddenError("Only the tournament organizer can verify matches.")
            if match.get("status") != TMATCH_REPORTED:
                raise InvalidStateError("Match has not been reported yet.")
            self.tournaments.record_verification(
                transaction, tournament_id, match_id, verifier_id, approved, now
            )

        self.store.run_transaction(verify)
        match = self.tournaments.get_match(tournament_id, match_id)
        logger.info(
            f"Match {match_id} of {tournament_id} "
            f"{'verified' if approved else 'disputed'} by {verifier_id}"
        )
        if match is None:
            raise NotFoundError("Tournament or match not found.")
        return match
