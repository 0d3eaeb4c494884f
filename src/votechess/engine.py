"""
Turn engine: the shared state of a community vote game.

- GameState: board (via Referee), active team, two rosters of per-user
  Proposals, game-over flag and summary, last applied move, next deadline.
- TurnEngine: every operation runs under one lock so a resolution never
  interleaves with a vote. Users join a team, propose moves in SAN or UCI,
  and once per turn window resolve() applies the plurality move (ties and
  empty ballots broken by an injected random generator).
- Read queries (votes, top-N shares, snapshot) are for the transport, which
  renders outside the lock from a GameSnapshot.
"""
from __future__ import annotations
import logging, random, threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

import chess

from .errors import GameOverError, InvalidMoveError, NotJoinedError
from .move_validator import display_move, match_move
from .referee import Referee
from .tally import VoteShare, count_votes, rank_votes, select_move

NO_VOTES_MESSAGE = "No votes yet. Use /move to cast yours!"


class Team(str, Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Team":
        return Team.BLACK if self is Team.WHITE else Team.WHITE

    @classmethod
    def parse(cls, value) -> "Team":
        if isinstance(value, Team):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"unknown team {value!r} (expected 'white' or 'black')") from None

    @classmethod
    def from_color(cls, color: chess.Color) -> "Team":
        return cls.WHITE if color == chess.WHITE else cls.BLACK


@dataclass
class Proposal:
    """A roster slot: the user's pending vote in UCI, empty when not voted."""
    move: str = ""

    def clear(self) -> None:
        self.move = ""


@dataclass
class GameState:
    referee: Referee
    active_team: Team = Team.WHITE
    white_roster: dict[str, Proposal] = field(default_factory=dict)
    black_roster: dict[str, Proposal] = field(default_factory=dict)
    game_over: bool = False
    summary: str = ""
    last_applied_move: str = ""
    next_deadline: datetime | None = None

    def roster(self, team: Team) -> dict[str, Proposal]:
        return self.white_roster if team is Team.WHITE else self.black_roster

    def team_of(self, user_id: str) -> Team | None:
        if user_id in self.white_roster:
            return Team.WHITE
        if user_id in self.black_roster:
            return Team.BLACK
        return None


@dataclass(frozen=True)
class ResolveResult:
    """What one resolution did. summary is empty while the game continues."""
    team: Team
    move: str | None = None
    san: str | None = None
    votes_cast: int = 0
    tie_set: tuple[str, ...] = ()
    random_pick: bool = False
    game_over: bool = False
    summary: str = ""


@dataclass(frozen=True)
class GameSnapshot:
    fen: str
    active_team: Team
    game_over: bool
    summary: str
    last_move: str
    next_deadline: datetime | None
    votes: tuple[str, ...]
    counts: dict[str, int]
    white_players: int
    black_players: int
    ply: int


class TurnEngine:
    """Owns the GameState; all mutation goes through these methods."""

    def __init__(self, starting_fen: str | None = None, rng: random.Random | None = None):
        self.log = logging.getLogger("TurnEngine")
        self.starting_fen = starting_fen
        self._rng = rng if rng is not None else random.Random()
        self._lock = threading.Lock()
        self._state = self._fresh_state()

    def _fresh_state(self) -> GameState:
        ref = Referee(self.starting_fen)
        return GameState(referee=ref, active_team=Team.from_color(ref.board.turn))

    # ---------------- Membership -----------------
    def join(self, user_id: str, team) -> Team:
        """Put user_id on team, leaving (and discarding any vote on) the other roster."""
        team = Team.parse(team)
        with self._lock:
            other = self._state.roster(team.opponent)
            if other.pop(user_id, None) is not None:
                self.log.info("User %s left %s team", user_id, team.opponent.value)
            roster = self._state.roster(team)
            if user_id not in roster:
                roster[user_id] = Proposal()
                self.log.info("User %s joined %s team", user_id, team.value)
        return team

    def get_team(self, user_id: str) -> Team | None:
        with self._lock:
            return self._state.team_of(user_id)

    def roster(self, team) -> list[str]:
        team = Team.parse(team)
        with self._lock:
            return sorted(self._state.roster(team))

    # ---------------- Votes -----------------
    def propose_move(self, user_id: str, text: str) -> tuple[str, str]:
        """Record user_id's vote; text may be SAN or UCI. Returns the stored (uci, san).

        Off-turn votes are kept as dormant proposals until the user's team is active.
        """
        with self._lock:
            if self._state.game_over:
                raise GameOverError()
            team = self._state.team_of(user_id)
            if team is None:
                raise NotJoinedError(user_id)
            mv = match_move(text, self._state.referee.board)
            if mv is None:
                raise InvalidMoveError(text)
            uci, san = mv.uci(), self._state.referee.san(mv)
            self._state.roster(team)[user_id].move = uci
        self.log.debug("User %s (%s) voted %s", user_id, team.value, uci)
        return uci, san

    def _active_votes(self) -> list[str]:
        roster = self._state.roster(self._state.active_team)
        return [p.move for p in roster.values() if p.move]

    def current_votes(self) -> list[str]:
        with self._lock:
            return self._active_votes()

    def vote_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(count_votes(self._active_votes()))

    def top_n_votes(self, n: int) -> list[VoteShare]:
        """Top-n shares of the active team's ballot; empty when nobody voted."""
        with self._lock:
            board = self._state.referee.board
            counts = count_votes(self._active_votes())
            return rank_votes(counts, n, label=lambda uci: display_move(uci, board))

    def describe_top_votes(self, n: int) -> str:
        shares = self.top_n_votes(n)
        if not shares:
            return NO_VOTES_MESSAGE
        return "Current votes:\n" + "\n".join(s.describe() for s in shares)

    # ---------------- Resolution -----------------
    def resolve(self) -> ResolveResult:
        """Tally the active team's votes, apply the winner and advance or end the game."""
        with self._lock:
            state = self._state
            team = state.active_team
            if state.game_over:
                self.log.warning("resolve() called after game over; ignoring")
                return ResolveResult(team=team, game_over=True, summary=state.summary)

            ref = state.referee
            roster = state.roster(team)
            legal = [mv.uci() for mv in ref.legal_moves()]
            counts = count_votes((p.move for p in roster.values()), set(legal))
            for p in roster.values():
                p.clear()

            selection = select_move(counts, legal, self._rng)
            san = None
            if selection.move:
                san = ref.apply(ref.decode(selection.move))
                state.last_applied_move = selection.move
            self.log.info(
                "Resolved %s turn: move=%s san=%s votes=%d ties=%d random=%s",
                team.value, selection.move, san, selection.votes_cast,
                len(selection.tie_set), selection.random_pick,
            )

            result = dict(
                team=team, move=selection.move, san=san, votes_cast=selection.votes_cast,
                tie_set=selection.tie_set, random_pick=selection.random_pick,
            )
            outcome = ref.outcome()
            if outcome is not None:
                state.game_over = True
                state.summary = ref.summary()
                self.log.info("%s", state.summary)
                return ResolveResult(game_over=True, summary=state.summary, **result)

            state.active_team = team.opponent
            return ResolveResult(**result)

    # ---------------- Lifecycle -----------------
    def reset(self) -> None:
        """Start a fresh board; rosters keep their members, every vote is cleared."""
        with self._lock:
            old = self._state
            fresh = self._fresh_state()
            for team in Team:
                roster = old.roster(team)
                for p in roster.values():
                    p.clear()
                fresh.roster(team).update(roster)
            fresh.next_deadline = old.next_deadline
            self._state = fresh
        self.log.info("Game reset (white=%d black=%d)", len(fresh.white_roster), len(fresh.black_roster))

    def is_game_over(self) -> bool:
        with self._lock:
            return self._state.game_over

    @property
    def active_team(self) -> Team:
        with self._lock:
            return self._state.active_team

    @property
    def next_deadline(self) -> datetime | None:
        with self._lock:
            return self._state.next_deadline

    def set_next_deadline(self, when: datetime | None) -> None:
        with self._lock:
            self._state.next_deadline = when

    # ---------------- Board queries -----------------
    def legal_moves(self) -> list[tuple[str, str]]:
        """(uci, san) for every legal move of the current position."""
        with self._lock:
            ref = self._state.referee
            return [(mv.uci(), ref.san(mv)) for mv in ref.legal_moves()]

    def fen(self) -> str:
        with self._lock:
            return self._state.referee.fen()

    def pgn(self) -> str:
        with self._lock:
            return self._state.referee.pgn()

    def snapshot(self) -> GameSnapshot:
        with self._lock:
            state = self._state
            votes = self._active_votes()
            return GameSnapshot(
                fen=state.referee.fen(),
                active_team=state.active_team,
                game_over=state.game_over,
                summary=state.summary,
                last_move=state.last_applied_move,
                next_deadline=state.next_deadline,
                votes=tuple(votes),
                counts=dict(count_votes(votes)),
                white_players=len(state.white_roster),
                black_players=len(state.black_roster),
                ply=len(state.referee.board.move_stack),
            )
