"""
Move text matching for votes.

Users may type a friendly SAN move ("Nf3", "O-O") or paste the UCI form a
button carries ("g1f3"). Matching is exact and case-sensitive:
- first against the SAN of every legal move,
- then, for text shaped like UCI, against the UCI of every legal move.
Stored votes are always UCI.
"""
from __future__ import annotations

import chess
import re

UCI_RE = re.compile(r"^[a-h][1-8][a-h][1-8][qrbn]?$")


def match_move(text: str, board: chess.Board) -> chess.Move | None:
    """Return the legal move whose SAN, or failing that UCI, equals text."""
    if not text:
        return None
    legal = list(board.legal_moves)
    for mv in legal:
        if board.san(mv) == text:
            return mv
    if not UCI_RE.match(text):
        return None
    for mv in legal:
        if mv.uci() == text:
            return mv
    return None


def display_move(uci: str, board: chess.Board) -> str:
    """SAN for a stored vote when it decodes in this position, else the raw string."""
    try:
        mv = chess.Move.from_uci(uci)
    except ValueError:
        return uci
    if mv not in board.legal_moves:
        return uci
    return board.san(mv)


__all__ = [
    "UCI_RE",
    "match_move",
    "display_move",
]
