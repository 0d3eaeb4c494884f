"""
SIMULATE.py: offline community game
- Seats --voters random users on each team and plays turns until the game ends or --max-turns.
- Each turn a random share of the active team votes; voters mostly agree on a few favourites,
  and some type SAN while others paste UCI.
- Prints per-turn results (with --verbose), the final summary and the PGN.
Usage: python scripts/simulate.py --voters 5 --turn-rate 0.6 --seed 1
"""
import argparse
import logging
import random

from votechess.engine import Team, TurnEngine


def cast_votes(engine: TurnEngine, rng: random.Random, turn_rate: float, favourites: int) -> int:
    moves = engine.legal_moves()
    if not moves:
        return 0
    shortlist = rng.sample(moves, min(favourites, len(moves)))
    cast = 0
    for user_id in engine.roster(engine.active_team):
        if rng.random() > turn_rate:
            continue
        uci, san = rng.choice(shortlist)
        engine.propose_move(user_id, san if rng.random() < 0.5 else uci)
        cast += 1
    return cast


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--voters", type=int, default=5, help="Users per team")
    ap.add_argument("--turn-rate", type=float, default=0.6, help="Chance a user votes on their turn")
    ap.add_argument("--favourites", type=int, default=3, help="Candidate moves the voters pick from each turn")
    ap.add_argument("--max-turns", type=int, default=400)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--fen", default=None)
    ap.add_argument("--verbose", action="store_true")
    ap.add_argument("--log-level", default="WARNING", help="Python logging level (e.g., INFO, DEBUG)")
    args = ap.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING),
                        format="%(asctime)s %(levelname)s %(message)s")

    rng = random.Random(args.seed)
    engine = TurnEngine(starting_fen=args.fen, rng=random.Random(args.seed))
    for i in range(args.voters):
        engine.join(f"w{i}", Team.WHITE)
        engine.join(f"b{i}", Team.BLACK)

    random_turns = 0
    turns = 0
    for turns in range(1, args.max_turns + 1):
        cast = cast_votes(engine, rng, args.turn_rate, args.favourites)
        result = engine.resolve()
        random_turns += int(result.random_pick)
        if args.verbose:
            print(f"{turns:4d} {result.team.value:5s} {result.san or '-':8s} votes={cast} random={result.random_pick}")
        if result.game_over:
            break

    snap = engine.snapshot()
    print("=" * 60)
    print(snap.summary or f"Stopped after {turns} turns; game still running.")
    print(f"Turns: {turns}  random picks: {random_turns}")
    print(engine.pgn())


if __name__ == "__main__":
    main()
