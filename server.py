"""
Vote Chess server: one shared game, a turn scheduler and the Flask API.

Usage: python server.py [--interval 60] [--seed 7] [--log-level DEBUG]
Settings fall back to settings.yml / VOTECHESS_* environment variables.
"""
from __future__ import annotations

import argparse
import logging
import random

from votechess.api import create_app
from votechess.config import SETTINGS
from votechess.engine import TurnEngine
from votechess.scheduler import TurnScheduler


def build(interval_s: float, hour_utc: int, seed: int | None, auto_reset: bool, fen: str | None):
    engine = TurnEngine(starting_fen=fen, rng=random.Random(seed))
    scheduler = TurnScheduler(engine, interval_s=interval_s, hour_utc=hour_utc, auto_reset=auto_reset)
    app = create_app(engine, scheduler=scheduler, top_n=SETTINGS.top_n)
    return engine, scheduler, app


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--host", default=SETTINGS.host)
    ap.add_argument("--port", type=int, default=SETTINGS.port)
    ap.add_argument("--interval", type=float, default=SETTINGS.turn_interval_s,
                    help="Seconds per turn; 0 resolves once a day at --hour UTC")
    ap.add_argument("--hour", type=int, choices=range(24), default=SETTINGS.resolve_hour_utc,
                    metavar="0-23", help="UTC hour of the daily resolution")
    ap.add_argument("--seed", type=int, default=SETTINGS.random_seed, help="Seed for tie-breaks and random moves")
    ap.add_argument("--fen", default=SETTINGS.starting_fen, help="Starting position (defaults to the standard one)")
    ap.add_argument("--auto-reset", action="store_true", default=SETTINGS.auto_reset,
                    help="Start a new game on the tick after a game ends")
    ap.add_argument("--log-level", default=SETTINGS.log_level, help="Python logging level (e.g., INFO, DEBUG)")
    args = ap.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO),
                        format="%(asctime)s %(levelname)s %(message)s")

    _, scheduler, app = build(args.interval, args.hour, args.seed, args.auto_reset, args.fen)
    scheduler.start()
    try:
        app.run(host=args.host, port=args.port)
    finally:
        scheduler.stop()
