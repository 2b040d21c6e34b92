"""Tests for the tournament match report/verify state machine."""

from __future__ import annotations

import unittest

from squadgo.errors import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from squadgo.tournament.models import MatchReport
from tests.helpers import START, Harness, seed_user, tournament_request


class ReportVerifyTestCase(unittest.TestCase):
    """active -> reported -> completed | disputed."""

    def setUp(self) -> None:
        self.h = Harness()
        for user_id in ("org", "p0", "p1", "p2", "p3"):
            seed_user(self.h.store, user_id)
        self.tournament_id = self.h.tournaments.create_tournament(
            "org", tournament_request()
        )
        for user_id in ("p0", "p1", "p2", "p3"):
            self.h.tournaments.join_tournament(self.tournament_id, user_id)
        self.h.tournaments.seed_bracket(self.tournament_id, "org")

        self.match = self.h.tournaments.list_tournament_matches(self.tournament_id)[0]
        self.match_id = self.match["id"]
        self.player, self.opponent = self.match["participantIds"]
        self.outsider = next(
            p
            for p in ("p0", "p1", "p2", "p3")
            if p not in self.match["participantIds"]
        )

    def stored_match(self) -> dict:
        return self.h.store.get(
            f"tournaments/{self.tournament_id}/matches", self.match_id
        )

    def report(self, reporter: str | None = None, winner: str | None = None):
        return self.h.tournaments.report_match(
            self.tournament_id,
            self.match_id,
            reporter or self.player,
            MatchReport(winner_id=winner or self.player, score="3-1", proof="https://img"),
        )

    def test_report_moves_to_reported(self) -> None:
        """A report stores a pending result."""
        result = self.report()

        self.assertEqual(result["verificationStatus"], "pending_verification")
        match = self.stored_match()
        self.assertEqual(match["status"], "reported")
        self.assertEqual(match["result"]["reportedBy"], self.player)
        self.assertEqual(match["result"]["winnerId"], self.player)
        self.assertEqual(match["result"]["score"], "3-1")
        self.assertEqual(match["result"]["proof"], "https://img")
        self.assertEqual(match["result"]["reportedAt"], START)

    def test_either_participant_may_report(self) -> None:
        """Both players are allowed to report."""
        self.report(reporter=self.opponent, winner=self.player)
        self.assertEqual(self.stored_match()["result"]["reportedBy"], self.opponent)

    def test_non_participant_report_is_forbidden(self) -> None:
        """Outsiders cannot report."""
        with self.assertRaises(ForbiddenError):
            self.report(reporter=self.outsider)
        with self.assertRaises(ForbiddenError):
            self.report(reporter="org")
        self.assertEqual(self.stored_match()["status"], "active")

    def test_winner_must_play_in_the_match(self) -> None:
        """The winner must be one of the players."""
        with self.assertRaises(ValidationError):
            self.report(winner=self.outsider)

    def test_second_report_is_rejected(self) -> None:
        """A reported match cannot be reported again."""
        self.report()
        with self.assertRaises(InvalidStateError):
            self.report(reporter=self.opponent, winner=self.opponent)
        self.assertEqual(self.stored_match()["result"]["winnerId"], self.player)

    def test_approve_completes(self) -> None:
        """Approval completes the match and verifies the result."""
        self.report()
        self.h.clock.advance(60)
        match = self.h.tournaments.verify_match(
            self.tournament_id, self.match_id, "org", True
        )

        self.assertEqual(match["status"], "completed")
        self.assertEqual(match["result"]["verificationStatus"], "verified")
        self.assertEqual(match["result"]["verifiedBy"], "org")
        self.assertEqual(match["result"]["winnerId"], self.player)
        self.assertGreater(match["result"]["verifiedAt"], START)

    def test_scenario_dispute_is_terminal(self) -> None:
        """A disputed match cannot be reported or verified again."""
        self.report()
        match = self.h.tournaments.verify_match(
            self.tournament_id, self.match_id, "org", False
        )

        self.assertEqual(match["status"], "disputed")
        self.assertEqual(match["result"]["verificationStatus"], "disputed")
        with self.assertRaises(InvalidStateError):
            self.h.tournaments.verify_match(
                self.tournament_id, self.match_id, "org", True
            )
        with self.assertRaises(InvalidStateError):
            self.report()

    def test_verify_before_report(self) -> None:
        """Verifying an unreported match fails."""
        with self.assertRaises(InvalidStateError):
            self.h.tournaments.verify_match(
                self.tournament_id, self.match_id, "org", True
            )

    def test_only_the_organizer_verifies(self) -> None:
        """Only the organizer can verify."""
        self.report()
        with self.assertRaises(ForbiddenError):
            self.h.tournaments.verify_match(
                self.tournament_id, self.match_id, self.player, True
            )
        self.assertEqual(self.stored_match()["status"], "reported")

    def test_no_automatic_advancement(self) -> None:
        """Completing a match leaves the bracket untouched."""
        self.report()
        self.h.tournaments.verify_match(self.tournament_id, self.match_id, "org", True)

        tournament = self.h.tournaments.get_tournament(self.tournament_id)
        for round_ in tournament["bracket"]["rounds"][1:]:
            for slot in round_["matches"]:
                self.assertEqual(slot["participants"], [])
        self.assertEqual(
            len(self.h.tournaments.list_tournament_matches(self.tournament_id)), 2
        )

    def test_unknown_match(self) -> None:
        """Unknown matches raise NotFound."""
        with self.assertRaises(NotFoundError):
            self.h.tournaments.report_match(
                self.tournament_id, "missing", self.player, MatchReport(self.player, "1-0")
            )
        with self.assertRaises(NotFoundError):
            self.h.tournaments.verify_match(self.tournament_id, "missing", "org", True)
