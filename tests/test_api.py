import random
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

from votechess.api import create_app, status_message, time_left
from votechess.engine import Team, TurnEngine
from votechess.scheduler import TurnScheduler

MATE_IN_ONE_FEN = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"


class ApiTests(unittest.TestCase):
    def setUp(self):
        self.engine = TurnEngine(rng=random.Random(0))
        self.client = create_app(self.engine).test_client()

    def join(self, user_id, team):
        return self.client.post("/api/join", json={"user_id": user_id, "team": team})

    def test_join(self):
        resp = self.join("alice", "white")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json(), {"user_id": "alice", "team": "white"})
        self.assertEqual(self.engine.get_team("alice"), Team.WHITE)

    def test_join_validation(self):
        self.assertEqual(self.client.post("/api/join", json={"team": "white"}).status_code, 400)
        resp = self.join("alice", "purple")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "bad_request")

    def test_move_vote(self):
        self.join("alice", "white")
        self.join("bob", "white")
        self.client.post("/api/move", json={"user_id": "bob", "move": "d4"})
        resp = self.client.post("/api/move", json={"user_id": "alice", "move": "e4"})
        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertEqual(body["move"], "e2e4")
        self.assertEqual(body["san"], "e4")
        self.assertEqual([v["label"] for v in body["top_votes"]], ["d4", "e4"])

    def test_move_gate_errors(self):
        self.join("bob", "black")
        resp = self.client.post("/api/move", json={"user_id": "carol", "move": "e4"})
        self.assertEqual((resp.status_code, resp.get_json()["error"]), (403, "not_joined"))
        resp = self.client.post("/api/move", json={"user_id": "bob", "move": "e5"})
        self.assertEqual((resp.status_code, resp.get_json()["error"]), (409, "wrong_turn"))
        self.join("alice", "white")
        resp = self.client.post("/api/move", json={"user_id": "alice", "move": "e5"})
        self.assertEqual((resp.status_code, resp.get_json()["error"]), (400, "invalid_move"))
        resp = self.client.post("/api/move", json={"user_id": "alice"})
        self.assertEqual(resp.status_code, 400)

    def test_skip_resolves_turn(self):
        self.join("alice", "white")
        self.client.post("/api/move", json={"user_id": "alice", "move": "Nf3"})
        resp = self.client.post("/api/skip", json={"user_id": "alice"})
        body = resp.get_json()
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(body["san"], "Nf3")
        self.assertFalse(body["game_over"])
        self.assertEqual(body["message"], "Turn skipped. Black team to move.")
        self.assertEqual(self.engine.active_team, Team.BLACK)

    def test_skip_goes_through_scheduler(self):
        on_resolve = Mock()
        scheduler = TurnScheduler(self.engine, on_resolve=on_resolve)
        client = create_app(self.engine, scheduler=scheduler).test_client()
        client.post("/api/join", json={"user_id": "alice", "team": "white"})
        client.post("/api/move", json={"user_id": "alice", "move": "e4"})
        resp = client.post("/api/skip", json={"user_id": "alice"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["san"], "e4")
        on_resolve.assert_called_once()
        self.assertEqual(on_resolve.call_args[0][0].move, "e2e4")
        self.assertFalse(client.get("/api/game").get_json()["scheduler_running"])

    def test_game_over_flow_and_reset(self):
        engine = TurnEngine(starting_fen=MATE_IN_ONE_FEN)
        client = create_app(engine).test_client()
        client.post("/api/join", json={"user_id": "w", "team": "white"})
        client.post("/api/move", json={"user_id": "w", "move": "Ra8#"})
        body = client.post("/api/skip", json={"user_id": "w"}).get_json()
        self.assertTrue(body["game_over"])
        self.assertEqual(body["message"], "Game over! White team wins! (checkmate)")

        resp = client.post("/api/move", json={"user_id": "w", "move": "Kf1"})
        self.assertEqual((resp.status_code, resp.get_json()["error"]), (409, "game_over"))
        game = client.get("/api/game").get_json()
        self.assertTrue(game["message"].startswith("Game over! White team wins!"))

        body = client.post("/api/reset").get_json()
        self.assertFalse(body["game_over"])
        self.assertEqual(body["fen"], MATE_IN_ONE_FEN)
        self.assertEqual(body["players"], {"white": 1, "black": 0})

    def test_game_status(self):
        self.join("alice", "white")
        self.engine.set_next_deadline(datetime.now(timezone.utc) + timedelta(hours=2))
        body = self.client.get("/api/game?user_id=alice").get_json()
        self.assertEqual(body["team"], "white")
        self.assertEqual(body["active_team"], "white")
        self.assertIn("White team's turn passes in 1h 59m", body["message"])
        self.assertTrue(body["message"].endswith("No votes yet. Use /move to cast yours!"))

    def test_votes_moves_and_pgn(self):
        self.join("alice", "white")
        self.client.post("/api/move", json={"user_id": "alice", "move": "c4"})
        votes = self.client.get("/api/votes?n=1").get_json()
        self.assertEqual(votes, [{"move": "c2c4", "label": "c4", "count": 1, "percent": 100.0}])
        moves = self.client.get("/api/moves").get_json()
        self.assertEqual(len(moves), 20)
        self.assertIn({"uci": "g1f3", "san": "Nf3"}, moves)
        resp = self.client.get("/api/pgn")
        self.assertIn('[Event "Vote Chess"]', resp.get_data(as_text=True))


class MessageTests(unittest.TestCase):
    def test_time_left(self):
        now = datetime(2026, 10, 19, 22, 0, 0, tzinfo=timezone.utc)
        self.assertEqual(time_left(now + timedelta(hours=1, minutes=2, seconds=3), now), "1h 2m 3s")
        self.assertEqual(time_left(now - timedelta(seconds=5), now), "0h 0m 0s")
        self.assertIsNone(time_left(None, now))

    def test_status_message_without_deadline(self):
        snap = TurnEngine().snapshot()
        self.assertEqual(status_message(snap, "votes"), "White team to move.\n\nvotes")


if __name__ == "__main__":
    unittest.main()
