"""
Tests for the JSON API.  The file store is swapped for a MemoryStore and
the session cache is emptied for every test.
"""

import asyncio
import random
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from tourney.session import EliminationSession
from tourney.store import MemoryStore
from tourney.web import app as web_app


class WebApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.store = MemoryStore()
        for patcher in (
            patch.object(web_app, "store", self.store),
            patch.dict(web_app._sessions, clear=True),
        ):
            patcher.start()
            self.addCleanup(patcher.stop)
        self.client = TestClient(web_app.app)


class ConfigEndpointTests(WebApiTestCase):
    def test_get_config(self) -> None:
        body = self.client.get("/api/config").json()
        self.assertEqual(body["match_point_options"], [4, 5, 7])
        self.assertEqual([a["points"] for a in body["score_actions"]], [1, 2, 3])


class EliminationApiTests(WebApiTestCase):
    def _start(self, players=("Ann", "Bob", "Cid", "Dee"), **extra) -> dict:
        resp = self.client.post(
            "/api/elimination", json={"name": "Cup", "players": list(players), **extra}
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def test_no_tournament_is_404(self) -> None:
        self.assertEqual(self.client.get("/api/elimination").status_code, 404)
        self.assertEqual(self.client.post("/api/elimination/advance").status_code, 404)

    def test_start_and_get(self) -> None:
        body = self._start(match_point=7)
        self.assertEqual(body["mode"], "elimination")
        self.assertEqual(body["match_point"], 7)
        self.assertEqual(len(body["rounds"][0]), 2)
        self.assertEqual(body["total_rounds"], 2)
        self.assertFalse(body["locked"])
        self.assertIsNone(body["champion"])
        self.assertIn("lastTournament", self.store)

        again = self.client.get("/api/elimination").json()
        self.assertEqual(again["rounds"], body["rounds"])

    def test_start_validation(self) -> None:
        resp = self.client.post("/api/elimination", json={"players": ["Solo"]})
        self.assertEqual(resp.status_code, 400)
        for match_point in (0, -1, True, "5", 2.5):
            with self.subTest(match_point=match_point):
                resp = self.client.post(
                    "/api/elimination", json={"players": ["A", "B"], "match_point": match_point}
                )
                self.assertEqual(resp.status_code, 400)
        resp = self.client.post("/api/elimination", json={})
        self.assertEqual(resp.status_code, 400)
        resp = self.client.post("/api/elimination", json={"name": 123, "players": ["A", "B"]})
        self.assertEqual(resp.status_code, 400)

    def test_match_point_outside_menu_accepted(self) -> None:
        body = self._start(match_point=6)
        self.assertEqual(body["match_point"], 6)
        body = self._start(match_point=1)
        self.assertEqual(body["match_point"], 1)

    def test_score_until_champion(self) -> None:
        self._start(players=("Ann", "Bob"))
        body = self.client.post(
            "/api/elimination/score", json={"match_index": 0, "slot": 1, "delta": 3}
        ).json()
        self.assertTrue(body["locked"])
        self.assertEqual(body["rounds"][0][0]["player1"]["score"], 3)

        body = self.client.post(
            "/api/elimination/score", json={"match_index": 0, "slot": 1, "delta": 2}
        ).json()
        winner = body["rounds"][0][0]["player1"]["name"]
        self.assertEqual(body["champion"], winner)
        self.assertEqual(body["match_history"][0]["score"], 5)
        self.assertNotIn("lastTournament", self.store)

    def test_score_validation(self) -> None:
        self._start()
        resp = self.client.post("/api/elimination/score", json={"match_index": 0, "slot": 1})
        self.assertEqual(resp.status_code, 400)
        resp = self.client.post(
            "/api/elimination/score", json={"match_index": 9, "slot": 1, "delta": 1}
        )
        self.assertEqual(resp.status_code, 400)

    def test_winner_and_advance(self) -> None:
        with patch.object(web_app.config.tournament, "auto_advance", False):
            self._start()
        self.client.post("/api/elimination/winner", json={"match_index": 0, "slot": 1})
        resp = self.client.post("/api/elimination/advance")
        self.assertEqual(resp.status_code, 409)
        self.client.post("/api/elimination/winner", json={"match_index": 1, "slot": 2})
        body = self.client.post("/api/elimination/advance").json()
        self.assertEqual(len(body["rounds"]), 2)
        self.assertEqual(body["current_round_index"], 1)

    def test_player_management(self) -> None:
        self._start(players=("Ann", "Bob", "Cid"))
        body = self.client.post("/api/elimination/players", json={"name": "Dee"}).json()
        self.assertEqual(len(body["rounds"][0]), 2)

        resp = self.client.post("/api/elimination/players", json={"name": "Dee"})
        self.assertEqual(resp.status_code, 400)

        body = self.client.patch("/api/elimination/players/Dee", json={"name": "Dana"}).json()
        names = [s["name"] for m in body["rounds"][0] for s in (m["player1"], m["player2"])]
        self.assertIn("Dana", names)

        body = self.client.delete("/api/elimination/players/Dana").json()
        names = [s["name"] for m in body["rounds"][0] for s in (m["player1"], m["player2"])]
        self.assertNotIn("Dana", names)

        open_index = next(
            i for i, m in enumerate(body["rounds"][0])
            if not m["player1"]["is_bye"] and not m["player2"]["is_bye"]
        )
        self.client.post(
            "/api/elimination/score", json={"match_index": open_index, "slot": 1, "delta": 1}
        )
        resp = self.client.post("/api/elimination/players", json={"name": "Eve"})
        self.assertEqual(resp.status_code, 409)

    def test_reset(self) -> None:
        self._start()
        self.assertEqual(self.client.delete("/api/elimination").json(), {"ok": True})
        self.assertNotIn("lastTournament", self.store)
        self.assertEqual(self.client.get("/api/elimination").status_code, 404)

    def test_resumes_saved_snapshot(self) -> None:
        session = EliminationSession(self.store, rng=random.Random(3))
        asyncio.run(session.start(["Ann", "Bob", "Cid"], "Saved"))

        body = self.client.get("/api/elimination").json()
        self.assertEqual(body["name"], "Saved")


class SwissApiTests(WebApiTestCase):
    def _start(self, players=("A", "B", "C", "D")) -> dict:
        resp = self.client.post("/api/swiss", json={"name": "Open", "players": list(players)})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def test_start_and_record(self) -> None:
        body = self._start()
        self.assertEqual(body["round"], 1)
        self.assertEqual(body["decided"], [False, False])

        body = self.client.post("/api/swiss/results", json={"winner": "A", "loser": "B"}).json()
        self.assertEqual(body["decided"], [True, False])
        self.assertEqual(body["standings"][0]["name"], "A")
        self.assertIn("swissTournament", self.store)

    def test_error_mapping(self) -> None:
        self._start()
        self.client.post("/api/swiss/results", json={"winner": "A", "loser": "B"})
        dup = self.client.post("/api/swiss/results", json={"winner": "B", "loser": "A"})
        self.assertEqual(dup.status_code, 409)
        missing = self.client.post("/api/swiss/results", json={"winner": "A", "loser": "C"})
        self.assertEqual(missing.status_code, 404)
        incomplete = self.client.post("/api/swiss/results", json={"winner": "A"})
        self.assertEqual(incomplete.status_code, 400)

    def test_start_rejects_non_string_name(self) -> None:
        resp = self.client.post("/api/swiss", json={"name": 123, "players": ["A", "B"]})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.client.get("/api/swiss").status_code, 404)

    def test_full_run_and_reset(self) -> None:
        self._start()
        self.client.post("/api/swiss/results", json={"winner": "A", "loser": "B"})
        self.client.post("/api/swiss/results", json={"winner": "C", "loser": "D"})
        self.client.post("/api/swiss/results", json={"winner": "A", "loser": "C"})
        body = self.client.post("/api/swiss/results", json={"winner": "B", "loser": "D"}).json()
        self.assertEqual(body["champion"], "A")
        self.assertNotIn("swissTournament", self.store)

        finished = self.client.post("/api/swiss/results", json={"winner": "A", "loser": "C"})
        self.assertEqual(finished.status_code, 409)

        self.client.delete("/api/swiss")
        self.assertEqual(self.client.get("/api/swiss").status_code, 404)
