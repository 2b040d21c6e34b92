"""Tests for tournament creation, registration and seeding."""

from __future__ import annotations

import datetime
import threading
import unittest

from squadgo.errors import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from tests.helpers import START, Harness, seed_user, tournament_request


class CreateTournamentTestCase(unittest.TestCase):
    """Creating tournaments."""

    def setUp(self) -> None:
        self.h = Harness()
        seed_user(self.h.store, "org", displayName="The Organizer")

    def test_create(self) -> None:
        """A new tournament opens for registration."""
        tournament_id = self.h.tournaments.create_tournament(
            "org", tournament_request(rules=["No teaming"], entry_fee=5)
        )

        tournament = self.h.tournaments.get_tournament(tournament_id)
        self.assertEqual(tournament["status"], "registration")
        self.assertEqual(tournament["participants"], [])
        self.assertIsNone(tournament["bracket"])
        self.assertEqual(tournament["organizerUserId"], "org")
        self.assertEqual(
            tournament["organizer"],
            {"id": "org", "username": "org", "displayName": "The Organizer"},
        )
        self.assertEqual(tournament["format"], "single-elimination")
        self.assertEqual(tournament["rules"], ["No teaming"])
        self.assertEqual(tournament["entryFee"], 5)
        self.assertEqual(tournament["createdAt"], START)

    def test_naive_dates_are_stored_as_utc(self) -> None:
        """Naive dates are stored as UTC."""
        tournament_id = self.h.tournaments.create_tournament(
            "org",
            tournament_request(
                registration_deadline=datetime.datetime(2026, 3, 5),
                start_date=datetime.datetime(2026, 3, 6),
            ),
        )
        tournament = self.h.tournaments.get_tournament(tournament_id)
        self.assertEqual(
            tournament["startDate"],
            datetime.datetime(2026, 3, 6, tzinfo=datetime.timezone.utc),
        )

    def test_naive_deadline_with_aware_start(self) -> None:
        """A naive deadline is read as UTC and compared with an aware start."""
        tournament_id = self.h.tournaments.create_tournament(
            "org",
            tournament_request(registration_deadline=datetime.datetime(2026, 3, 7)),
        )
        tournament = self.h.tournaments.get_tournament(tournament_id)
        self.assertEqual(
            tournament["registrationDeadline"],
            datetime.datetime(2026, 3, 7, tzinfo=datetime.timezone.utc),
        )

        with self.assertRaises(ValidationError):
            self.h.tournaments.create_tournament(
                "org",
                tournament_request(
                    registration_deadline=datetime.datetime(2026, 3, 9),
                ),
            )

    def test_invalid_requests(self) -> None:
        """Invalid submissions raise ValidationError."""
        for overrides in (
            {"name": "  "},
            {"max_participants": 1},
            {"max_participants": 1000},
            {"format": "round-robin"},
            {"start_date": START},
            {"entry_fee": -1},
        ):
            with self.assertRaises(ValidationError, msg=str(overrides)):
                self.h.tournaments.create_tournament(
                    "org", tournament_request(**overrides)
                )

    def test_unknown_organizer(self) -> None:
        """An organizer without a profile raises NotFound."""
        with self.assertRaises(NotFoundError):
            self.h.tournaments.create_tournament("ghost", tournament_request())

    def test_get_unknown_tournament(self) -> None:
        """Reading an unknown tournament raises NotFound."""
        with self.assertRaises(NotFoundError):
            self.h.tournaments.get_tournament("missing")


class JoinTournamentTestCase(unittest.TestCase):
    """Registration with capacity, duplicate and deadline checks."""

    def setUp(self) -> None:
        self.h = Harness()
        seed_user(self.h.store, "org")
        for i in range(12):
            seed_user(self.h.store, f"p{i}")
        self.tournament_id = self.h.tournaments.create_tournament(
            "org", tournament_request(max_participants=8)
        )

    def join(self, user_id: str):
        return self.h.tournaments.join_tournament(self.tournament_id, user_id)

    def test_join_appends_a_snapshot(self) -> None:
        """Joining stores the player's profile snapshot."""
        participant = self.join("p0")

        self.assertEqual(participant["id"], "p0")
        self.assertEqual(participant["joinedAt"], START)
        tournament = self.h.tournaments.get_tournament(self.tournament_id)
        self.assertEqual(tournament["participantIds"], ["p0"])
        self.assertEqual(tournament["participants"][0]["displayName"], "P0")
        self.assertEqual(
            tournament["participants"][0]["avatar"], "https://cdn.example.com/p0.png"
        )

    def test_join_notifies_the_player(self) -> None:
        """Joining sends a tournament_joined notification."""
        self.join("p0")
        notes = self.h.notifications("p0")
        self.assertEqual(len(notes), 1)
        self.assertEqual(notes[0]["type"], "tournament_joined")
        self.assertEqual(notes[0]["tournamentId"], self.tournament_id)
        self.assertEqual(notes[0]["tournamentName"], "Spring Cup")

    def test_scenario_full_tournament_rejects_the_ninth(self) -> None:
        """The ninth player of eight is rejected."""
        for i in range(8):
            self.join(f"p{i}")
        with self.assertRaises(ConflictError):
            self.join("p8")
        tournament = self.h.tournaments.get_tournament(self.tournament_id)
        self.assertEqual(len(tournament["participants"]), 8)

    def test_duplicate_join_is_rejected(self) -> None:
        """A player cannot join twice."""
        self.join("p0")
        with self.assertRaises(ConflictError):
            self.join("p0")
        tournament = self.h.tournaments.get_tournament(self.tournament_id)
        self.assertEqual(tournament["participantIds"], ["p0"])

    def test_join_after_deadline(self) -> None:
        """Joining after the deadline fails."""
        self.h.clock.advance(datetime.timedelta(days=6, seconds=1).total_seconds())
        with self.assertRaises(InvalidStateError):
            self.join("p0")

    def test_join_after_seeding(self) -> None:
        """Joining a started tournament fails."""
        self.join("p0")
        self.join("p1")
        self.h.tournaments.seed_bracket(self.tournament_id, "org")
        with self.assertRaises(InvalidStateError):
            self.join("p2")

    def test_unknown_tournament_or_user(self) -> None:
        """Unknown tournaments and users raise NotFound."""
        with self.assertRaises(NotFoundError):
            self.h.tournaments.join_tournament("missing", "p0")
        with self.assertRaises(NotFoundError):
            self.join("ghost")

    def test_concurrent_joins_respect_capacity(self) -> None:
        """Parallel joins never exceed capacity."""
        errors: list[Exception] = []

        def join(user_id: str) -> None:
            try:
                self.join(user_id)
            except ConflictError as e:
                errors.append(e)

        threads = [
            threading.Thread(target=join, args=(user_id,))
            for user_id in [f"p{i}" for i in range(12)] + ["p0", "p1"]
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        tournament = self.h.tournaments.get_tournament(self.tournament_id)
        ids = tournament["participantIds"]
        self.assertEqual(len(ids), 8)
        self.assertEqual(len(set(ids)), 8)
        self.assertEqual(len(errors), 6)


class SeedBracketTestCase(unittest.TestCase):
    """Seeding and the registration -> active transition."""

    def setUp(self) -> None:
        self.h = Harness()
        seed_user(self.h.store, "org")
        for i in range(5):
            seed_user(self.h.store, f"p{i}")
        self.tournament_id = self.h.tournaments.create_tournament(
            "org", tournament_request()
        )

    def fill(self, count: int) -> None:
        for i in range(count):
            self.h.tournaments.join_tournament(self.tournament_id, f"p{i}")

    def test_scenario_five_participants(self) -> None:
        """Five players seed three matches, one a bye."""
        self.fill(5)
        bracket = self.h.tournaments.seed_bracket(self.tournament_id, "org")

        self.assertEqual(len(bracket["rounds"]), 3)
        self.assertEqual(len(bracket["rounds"][0]["matches"]), 3)

        tournament = self.h.tournaments.get_tournament(self.tournament_id)
        self.assertEqual(tournament["status"], "active")
        self.assertEqual(tournament["bracket"]["rounds"], bracket["rounds"])

        matches = self.h.tournaments.list_tournament_matches(self.tournament_id)
        self.assertEqual([m["matchNumber"] for m in matches], [1, 2, 3])
        self.assertTrue(all(m["status"] == "active" for m in matches))
        self.assertTrue(all(m["roundNumber"] == 1 for m in matches))
        self.assertTrue(all(m["tournamentId"] == self.tournament_id for m in matches))
        self.assertEqual([m["isBye"] for m in matches], [False, False, True])
        self.assertEqual(matches[2]["participantIds"], [matches[2]["participants"][0]["id"]])

    def test_participants_are_notified_of_the_start(self) -> None:
        """Every participant hears the tournament started."""
        self.fill(2)
        self.h.tournaments.seed_bracket(self.tournament_id, "org")

        for user_id in ("p0", "p1"):
            notes = [
                n
                for n in self.h.notifications(user_id)
                if n["type"] == "tournament_status_change"
            ]
            self.assertEqual(len(notes), 1)
            self.assertEqual(notes[0]["oldStatus"], "registration")
            self.assertEqual(notes[0]["newStatus"], "active")

    def test_only_the_organizer_seeds(self) -> None:
        """Only the organizer can seed the bracket."""
        self.fill(2)
        with self.assertRaises(ForbiddenError):
            self.h.tournaments.seed_bracket(self.tournament_id, "p0")
        tournament = self.h.tournaments.get_tournament(self.tournament_id)
        self.assertEqual(tournament["status"], "registration")

    def test_needs_two_participants(self) -> None:
        """Seeding needs at least two players."""
        self.fill(1)
        with self.assertRaises(InvalidStateError):
            self.h.tournaments.seed_bracket(self.tournament_id, "org")
        self.assertEqual(self.h.tournaments.list_tournament_matches(self.tournament_id), [])

    def test_seeds_only_once(self) -> None:
        """A started tournament cannot be seeded again."""
        self.fill(2)
        self.h.tournaments.seed_bracket(self.tournament_id, "org")
        with self.assertRaises(InvalidStateError):
            self.h.tournaments.seed_bracket(self.tournament_id, "org")
        self.assertEqual(
            len(self.h.tournaments.list_tournament_matches(self.tournament_id)), 1
        )

    def test_unknown_tournament(self) -> None:
        """Seeding an unknown tournament raises NotFound."""
        with self.assertRaises(NotFoundError):
            self.h.tournaments.seed_bracket("missing", "org")
        with self.assertRaises(NotFoundError):
            self.h.tournaments.list_tournament_matches("missing")
