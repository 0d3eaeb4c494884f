"""
Minimal Flask API over the turn engine.

Endpoints:
- POST /api/join    {user_id, team}  -> join a team (switching drops a pending vote)
- POST /api/move    {user_id, move}  -> vote for a move in SAN or UCI (own turn only)
- POST /api/skip    {user_id}        -> resolve the current turn now (via the scheduler when given)
- POST /api/reset                    -> start a new game, keeping the rosters
- GET  /api/game[?user_id=]          -> snapshot, status message, top votes
- GET  /api/votes[?n=]               -> top-n vote shares of the active team
- GET  /api/moves                    -> legal moves as (uci, san)
- GET  /api/pgn                      -> PGN of the game so far

Rendering (board images, move pagination) is left to the client.
"""
from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime, timezone

from flask import Flask, jsonify, request

from .engine import GameSnapshot, ResolveResult, Team, TurnEngine
from .errors import GameOverError, NotJoinedError, VoteChessError, WrongTurnError
from .scheduler import TurnScheduler

log = logging.getLogger("votechess.api")

ERROR_STATUS = {
    "game_over": 409,
    "wrong_turn": 409,
    "not_joined": 403,
    "invalid_move": 400,
}


class RequestError(VoteChessError):
    code = "bad_request"


def check_player_and_turn(engine: TurnEngine, user_id: str) -> Team:
    """Gate for per-turn actions: game running, user joined, and their team to move."""
    if engine.is_game_over():
        raise GameOverError("game is over; reset to start a new one")
    team = engine.get_team(user_id)
    if team is None:
        raise NotJoinedError(user_id)
    if team is not engine.active_team:
        raise WrongTurnError(user_id, engine.active_team.value)
    return team


def time_left(deadline: datetime | None, now: datetime | None = None) -> str | None:
    if deadline is None:
        return None
    now = now or datetime.now(timezone.utc)
    secs = max(0, int((deadline - now).total_seconds()))
    return f"{secs // 3600}h {secs % 3600 // 60}m {secs % 60}s"


def status_message(snap: GameSnapshot, top_votes: str, now: datetime | None = None) -> str:
    if snap.game_over:
        return f"{snap.summary}\nPOST /api/reset starts a new game."
    team = snap.active_team.value.capitalize()
    left = time_left(snap.next_deadline, now)
    head = f"{team} team's turn passes in {left}." if left else f"{team} team to move."
    return f"{head}\n\n{top_votes}"


def serialize_snapshot(snap: GameSnapshot) -> dict:
    return {
        "fen": snap.fen,
        "active_team": snap.active_team.value,
        "game_over": snap.game_over,
        "summary": snap.summary,
        "last_move": snap.last_move or None,
        "next_deadline": snap.next_deadline.isoformat() if snap.next_deadline else None,
        "votes": list(snap.votes),
        "counts": snap.counts,
        "players": {"white": snap.white_players, "black": snap.black_players},
        "ply": snap.ply,
    }


def serialize_result(result: ResolveResult) -> dict:
    return {
        "team": result.team.value,
        "move": result.move,
        "san": result.san,
        "votes_cast": result.votes_cast,
        "tie_set": list(result.tie_set),
        "random_pick": result.random_pick,
        "game_over": result.game_over,
        "summary": result.summary,
    }


def _payload() -> dict:
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}


def _required(data: dict, key: str) -> str:
    val = data.get(key)
    if val is None or str(val).strip() == "":
        raise RequestError(f"{key} is required")
    return str(val).strip()


def create_app(engine: TurnEngine, scheduler: TurnScheduler | None = None, top_n: int = 3) -> Flask:
    """Build the API; with a scheduler, skips go through its tick() so on_resolve hooks fire."""
    app = Flask(__name__)

    @app.errorhandler(VoteChessError)
    def handle_game_error(e: VoteChessError):
        return jsonify({"error": e.code, "message": str(e)}), ERROR_STATUS.get(e.code, 400)

    @app.route("/api/join", methods=["POST"])
    def join():
        data = _payload()
        user_id = _required(data, "user_id")
        try:
            team = engine.join(user_id, _required(data, "team"))
        except ValueError as e:
            raise RequestError(str(e)) from e
        return jsonify({"user_id": user_id, "team": team.value})

    @app.route("/api/move", methods=["POST"])
    def move():
        data = _payload()
        user_id = _required(data, "user_id")
        raw_move = _required(data, "move")
        team = check_player_and_turn(engine, user_id)
        uci, san = engine.propose_move(user_id, raw_move)
        log.info("User %s (%s) voted %s", user_id, team.value, uci)
        return jsonify({
            "user_id": user_id,
            "team": team.value,
            "move": uci,
            "san": san,
            "top_votes": [asdict(s) for s in engine.top_n_votes(top_n)],
        })

    @app.route("/api/skip", methods=["POST"])
    def skip():
        user_id = _required(_payload(), "user_id")
        check_player_and_turn(engine, user_id)
        result = scheduler.tick() if scheduler is not None else engine.resolve()
        if result is None:
            raise GameOverError("game is over; reset to start a new one")
        body = serialize_result(result)
        body["message"] = result.summary or f"Turn skipped. {engine.active_team.value.capitalize()} team to move."
        return jsonify(body)

    @app.route("/api/reset", methods=["POST"])
    def reset():
        engine.reset()
        return jsonify(serialize_snapshot(engine.snapshot()))

    @app.route("/api/game", methods=["GET"])
    def game():
        snap = engine.snapshot()
        body = serialize_snapshot(snap)
        body["message"] = status_message(snap, engine.describe_top_votes(top_n))
        body["scheduler_running"] = bool(scheduler and scheduler.is_running())
        user_id = request.args.get("user_id")
        if user_id:
            team = engine.get_team(user_id)
            body["team"] = team.value if team else None
        return jsonify(body)

    @app.route("/api/votes", methods=["GET"])
    def votes():
        n = request.args.get("n", default=top_n, type=int)
        return jsonify([asdict(s) for s in engine.top_n_votes(n)])

    @app.route("/api/moves", methods=["GET"])
    def moves():
        return jsonify([{"uci": uci, "san": san} for uci, san in engine.legal_moves()])

    @app.route("/api/pgn", methods=["GET"])
    def pgn():
        return app.response_class(engine.pgn(), mimetype="application/x-chess-pgn")

    return app
