"""
Vote tally and winner selection.

Pure functions over UCI vote strings; TurnEngine calls them while holding
its lock. Randomness always comes from the caller's generator so a test
can pass a seeded random.Random (or a mock) and assert exact picks.
"""
from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Collection, Iterable, Sequence


@dataclass(frozen=True)
class Selection:
    """The move chosen for one turn and how it was chosen."""
    move: str | None
    votes_cast: int = 0
    tie_set: tuple[str, ...] = ()
    fallback: bool = False  # no votes: uniform pick among legal moves

    @property
    def random_pick(self) -> bool:
        return self.fallback or len(self.tie_set) > 1


@dataclass(frozen=True)
class VoteShare:
    move: str
    label: str
    count: int
    percent: float

    def describe(self) -> str:
        unit = "vote" if self.count == 1 else "votes"
        return f"{self.label}: {self.percent:.2f}% ({self.count} {unit})"


def count_votes(proposals: Iterable[str], legal: Collection[str] | None = None) -> Counter:
    """Frequency map of non-empty votes; votes outside `legal` are dropped when it is given."""
    counts: Counter = Counter()
    for mv in proposals:
        if not mv:
            continue
        if legal is not None and mv not in legal:
            continue
        counts[mv] += 1
    return counts


def tie_set(counts: dict[str, int]) -> list[str]:
    """Moves sharing the maximum count, sorted; empty when nothing was voted."""
    top = max(counts.values(), default=0)
    if top <= 0:
        return []
    return sorted(mv for mv, c in counts.items() if c == top)


def select_move(counts: dict[str, int], legal_moves: Sequence[str], rng: random.Random) -> Selection:
    """Pick the plurality move, breaking ties uniformly; with no votes pick any legal move."""
    ties = tie_set(counts)
    cast = sum(counts.values())
    if len(ties) == 1:
        # strict plurality: the generator is not consulted
        return Selection(move=ties[0], votes_cast=cast, tie_set=tuple(ties))
    if ties:
        return Selection(move=rng.choice(ties), votes_cast=cast, tie_set=tuple(ties))
    if legal_moves:
        return Selection(move=rng.choice(list(legal_moves)), fallback=True)
    return Selection(move=None)


def rank_votes(counts: dict[str, int], n: int,
               label: Callable[[str], str] | None = None) -> list[VoteShare]:
    """Top-n moves by descending count, ties ordered by UCI string."""
    total = sum(counts.values())
    if total <= 0 or n <= 0:
        return []
    label = label or (lambda mv: mv)
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:n]
    return [
        VoteShare(move=mv, label=label(mv), count=c, percent=c / total * 100)
        for mv, c in ranked
    ]
