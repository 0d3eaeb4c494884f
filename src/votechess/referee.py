"""
Referee: the rules side of the vote game.

- Owns a python-chess Board; enumerates legal moves and applies chosen ones.
- Encodes moves to SAN and decodes stored UCI votes back to legal moves.
- Reports the automatic outcome of the position and a readable summary.
- Exposes pgn() to serialize finished/ongoing games with team headers.

Used by TurnEngine, which never reimplements chess rules itself.
"""
from __future__ import annotations
import chess, chess.pgn, datetime
from typing import Optional

TERMINATION_LABELS = {
    chess.Termination.CHECKMATE: "checkmate",
    chess.Termination.STALEMATE: "stalemate",
    chess.Termination.INSUFFICIENT_MATERIAL: "insufficient material",
    chess.Termination.SEVENTYFIVE_MOVES: "seventy-five-move rule",
    chess.Termination.FIVEFOLD_REPETITION: "fivefold repetition",
    chess.Termination.FIFTY_MOVES: "fifty-move rule",
    chess.Termination.THREEFOLD_REPETITION: "threefold repetition",
}


def termination_label(termination: chess.Termination) -> str:
    return TERMINATION_LABELS.get(termination, termination.name.lower().replace("_", " "))


def describe_outcome(outcome: chess.Outcome) -> str:
    """Human-readable game-over line, e.g. 'Game over! White team wins! (checkmate)'."""
    if outcome.winner is chess.WHITE:
        result = "White team wins!"
    elif outcome.winner is chess.BLACK:
        result = "Black team wins!"
    else:
        result = "It's a draw!"
    return f"Game over! {result} ({termination_label(outcome.termination)})"


class Referee:
    """Plain chess referee around python-chess Board and PGN export."""
    def __init__(self, starting_fen: str | None = None):
        self.starting_fen = starting_fen or chess.STARTING_FEN
        self.board = chess.Board(fen=self.starting_fen)
        self._headers: dict[str, str] = {}
        self.set_headers()

    # ---------------- Header Management -----------------
    def set_headers(self, event: str = "Vote Chess", site: str = "?", date: Optional[str] = None,
                    round_: str = "?", white: str = "White team", black: str = "Black team") -> None:
        date = date or datetime.date.today().strftime("%Y.%m.%d")
        self._headers.update({
            "Event": event,
            "Site": site,
            "Date": date,
            "Round": round_,
            "White": white,
            "Black": black,
        })

    # ---------------- Move Queries -----------------
    def legal_moves(self) -> list[chess.Move]:
        return list(self.board.legal_moves)

    def san(self, mv: chess.Move) -> str:
        return self.board.san(mv)

    def decode(self, uci: str) -> chess.Move | None:
        """Decode a UCI string into a legal move for the current position, or None."""
        try:
            mv = chess.Move.from_uci(uci or "")
        except ValueError:
            return None
        return mv if mv in self.board.legal_moves else None

    # ---------------- Move Application -----------------
    def apply(self, mv: chess.Move) -> str:
        san = self.board.san(mv)
        self.board.push(mv)
        return san

    # ---------------- Outcome / PGN -----------------
    def outcome(self) -> chess.Outcome | None:
        return self.board.outcome()

    def summary(self) -> str:
        """Game-over line for a finished position, empty while the game continues."""
        outcome = self.outcome()
        return describe_outcome(outcome) if outcome else ""

    def status(self) -> str:
        outcome = self.outcome()
        return outcome.result() if outcome else "*"

    def fen(self) -> str:
        return self.board.fen()

    def pgn(self) -> str:
        game = chess.pgn.Game()
        for k, v in self._headers.items():
            game.headers[k] = v
        if self.starting_fen != chess.STARTING_FEN:
            game.setup(chess.Board(fen=self.starting_fen))
        game.headers["Result"] = self.status()
        node = game
        for mv in list(self.board.move_stack):
            node = node.add_variation(mv)
        outcome = self.outcome()
        if outcome:
            game.comment = f"Termination: {termination_label(outcome.termination)}"
        exporter = chess.pgn.StringExporter(headers=True, variations=False, comments=bool(outcome))
        return game.accept(exporter)
