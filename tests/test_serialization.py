"""
Tests for the snapshot codec.

decode(encode(state)) must give back an equal state for anything an engine
produces, and malformed payloads must fail with ValueError so the session
can treat them as "nothing to resume".
"""

import json
import random
import unittest

from tourney import serialization
from tourney.tournaments.elimination import EliminationEngine
from tourney.tournaments.swiss import SwissEngine


def _mid_bracket():
    engine = EliminationEngine(match_point=4, rng=random.Random(5))
    state = engine.create(["Ann", "Bob", "Cid", "Dee", "Eve"], "Spring Cup")
    state = engine.record_score(state, 0, 1, 3)
    state = engine.record_manual_winner(state, 1, 2)
    return state


def _mid_swiss():
    engine = SwissEngine()
    state = engine.create(["Ann", "Bob", "Cid", "Dee", "Eve"], "Swiss Open")
    state = engine.record_result(state, "Ann", "Bob")
    state = engine.record_result(state, "Dee", "Cid")
    return state


class SnapshotRoundTripTests(unittest.TestCase):

    def test_elimination_round_trip(self):
        state = _mid_bracket()
        self.assertEqual(serialization.decode(serialization.encode(state)), state)

    def test_swiss_round_trip(self):
        state = _mid_swiss()
        self.assertEqual(serialization.decode(serialization.encode(state)), state)

    def test_finished_swiss_keeps_champion(self):
        engine = SwissEngine()
        state = engine.record_result(engine.create(["Ann", "Bob"], "Final"), "Bob", "Ann")
        decoded = serialization.decode(serialization.encode(state))
        self.assertEqual(decoded.champion, "Bob")

    def test_payload_carries_version_and_mode(self):
        raw = json.loads(serialization.encode(_mid_swiss()))
        self.assertEqual(raw["version"], serialization.SNAPSHOT_VERSION)
        self.assertEqual(raw["mode"], "swiss")

    def test_bye_sentinels_survive(self):
        state = _mid_bracket()
        decoded = serialization.decode(serialization.encode(state))
        byes = [m for m in decoded.rounds[0] if m.is_bye]
        self.assertEqual(len(byes), 1)
        self.assertTrue(byes[0].player2.is_bye)


class SnapshotDecodeErrorTests(unittest.TestCase):

    def test_invalid_json(self):
        with self.assertRaises(ValueError):
            serialization.decode(b"{not json")

    def test_non_object(self):
        with self.assertRaises(ValueError):
            serialization.decode(b"[1, 2, 3]")

    def test_unknown_version(self):
        raw = json.loads(serialization.encode(_mid_swiss()))
        raw["version"] = 99
        with self.assertRaises(ValueError):
            serialization.decode(json.dumps(raw).encode())

    def test_mode_mismatch(self):
        data = serialization.encode(_mid_swiss())
        with self.assertRaises(ValueError):
            serialization.decode(data, expected_mode="elimination")

    def test_missing_field(self):
        raw = json.loads(serialization.encode(_mid_bracket()))
        del raw["rounds"]
        with self.assertRaises(ValueError):
            serialization.decode(json.dumps(raw).encode())


if __name__ == "__main__":
    unittest.main()
