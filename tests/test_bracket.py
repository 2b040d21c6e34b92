"""Tests for the bracket generator."""

import datetime
import math
import random
import unittest

from squadgo.tournament.bracket import BracketGenerator

CREATED = datetime.datetime(2026, 3, 1, tzinfo=datetime.timezone.utc)


def players(count):
    return [{"id": f"p{i}", "username": f"p{i}"} for i in range(count)]


class BracketGeneratorTestCase(unittest.TestCase):
    """Shape and seeding of generated brackets."""

    def setUp(self):
        self.generator = BracketGenerator(random.Random(42))

    def test_round_count(self):
        """Rounds are the ceiling of log2 of the player count."""
        expected = {2: 1, 3: 2, 4: 2, 5: 3, 8: 3, 9: 4, 16: 4, 17: 5, 256: 8}
        for count, rounds in expected.items():
            self.assertEqual(BracketGenerator.round_count(count), rounds, count)

    def test_shape_for_every_size(self):
        """Every size from 2 to 33 gets the expected round and match counts."""
        for count in range(2, 34):
            bracket = self.generator.generate(players(count), CREATED)
            rounds = bracket["rounds"]
            first = rounds[0]["matches"]

            self.assertEqual(len(rounds), math.ceil(math.log2(count)))
            self.assertEqual(len(first), math.ceil(count / 2))
            byes = [m for m in first if len(m["participants"]) == 1]
            self.assertEqual(len(byes), count % 2)
            for bye in byes:
                self.assertEqual(bye["winner"], bye["participants"][0])
            for number, round_ in enumerate(rounds, start=1):
                self.assertEqual(round_["roundNumber"], number)

    def test_scenario_five_players(self):
        """Five players give three first-round matches, one of them a bye."""
        bracket = self.generator.generate(players(5), CREATED)

        self.assertEqual(len(bracket["rounds"]), 3)
        first = bracket["rounds"][0]["matches"]
        self.assertEqual(len(first), 3)
        self.assertEqual(len(first[-1]["participants"]), 1)
        self.assertIsNotNone(first[-1]["winner"])
        self.assertEqual([len(r["matches"]) for r in bracket["rounds"]], [3, 2, 1])

    def test_later_rounds_are_empty_placeholders(self):
        """Rounds after the first have empty slots only."""
        bracket = self.generator.generate(players(8), CREATED)
        for round_ in bracket["rounds"][1:]:
            for match in round_["matches"]:
                self.assertEqual(match, {"participants": [], "winner": None})

    def test_every_player_is_seeded_once(self):
        """Each participant appears in exactly one first-round slot."""
        bracket = self.generator.generate(players(11), CREATED)
        seeded = [
            p["id"] for m in bracket["rounds"][0]["matches"] for p in m["participants"]
        ]
        self.assertEqual(sorted(seeded), sorted(p["id"] for p in players(11)))

    def test_same_seed_same_bracket(self):
        """A seeded random source makes the shuffle repeatable."""
        one = BracketGenerator(random.Random(3)).generate(players(9), CREATED)
        two = BracketGenerator(random.Random(3)).generate(players(9), CREATED)
        self.assertEqual(one, two)

    def test_input_list_is_not_shuffled_in_place(self):
        """The caller's participant list keeps its order."""
        roster = players(6)
        self.generator.generate(roster, CREATED)
        self.assertEqual([p["id"] for p in roster], [f"p{i}" for i in range(6)])

    def test_metadata(self):
        """The bracket records its format and creation time."""
        bracket = self.generator.generate(players(2), CREATED)
        self.assertEqual(bracket["format"], "single-elimination")
        self.assertEqual(bracket["createdAt"], CREATED)

    def test_too_few_players(self):
        """A single participant cannot be seeded."""
        with self.assertRaises(ValueError):
            self.generator.generate(players(1), CREATED)
