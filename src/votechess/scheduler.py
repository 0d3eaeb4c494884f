"""
Turn scheduler: resolves the active team's vote once per turn window.

- next_deadline(): next resolve_hour:00 UTC (daily, the default) or now + interval.
- TurnScheduler runs a daemon thread that publishes each deadline to the
  engine, sleeps on a stop Event until it passes, then calls resolve().
- tick() performs one resolution synchronously; the loop and tests share it.
"""
from __future__ import annotations
import logging, threading
from datetime import datetime, timedelta, timezone
from typing import Callable

from .engine import ResolveResult, TurnEngine


def next_deadline(now: datetime, interval_s: float = 0.0, hour_utc: int = 0) -> datetime:
    """Next resolution time strictly after `now` (aware datetimes, UTC)."""
    if interval_s and interval_s > 0:
        return now + timedelta(seconds=interval_s)
    now_utc = now.astimezone(timezone.utc)
    candidate = now_utc.replace(hour=hour_utc, minute=0, second=0, microsecond=0)
    if candidate <= now_utc:
        candidate += timedelta(days=1)
    return candidate


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TurnScheduler:
    def __init__(self, engine: TurnEngine, interval_s: float = 0.0, hour_utc: int = 0,
                 auto_reset: bool = False, clock: Callable[[], datetime] = _utcnow,
                 on_resolve: Callable[[ResolveResult], None] | None = None,
                 retry_delay_s: float = 60.0):
        if not 0 <= hour_utc <= 23:
            raise ValueError(f"hour_utc must be in 0..23, got {hour_utc}")
        self.log = logging.getLogger("TurnScheduler")
        self.engine = engine
        self.interval_s = interval_s
        self.hour_utc = hour_utc
        self.auto_reset = auto_reset
        self.clock = clock
        self.on_resolve = on_resolve
        self.retry_delay_s = retry_delay_s
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def schedule_next(self) -> datetime:
        when = next_deadline(self.clock(), self.interval_s, self.hour_utc)
        self.engine.set_next_deadline(when)
        return when

    def tick(self) -> ResolveResult | None:
        """Resolve one turn (or reset a finished game when auto_reset is on)."""
        if self.engine.is_game_over():
            if self.auto_reset:
                self.log.info("Game over; starting a new game")
                self.engine.reset()
            else:
                self.log.info("Game over; waiting for a reset")
            return None
        result = self.engine.resolve()
        self.log.info("Turn passed: %s played %s", result.team.value, result.san or "(no move)")
        if self.on_resolve:
            self.on_resolve(result)
        return result

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                when = self.schedule_next()
                delay = max(0.0, (when - self.clock()).total_seconds())
            except Exception:
                self.log.exception("Failed to schedule the next turn; retrying in %.0fs", self.retry_delay_s)
                if self._stop.wait(self.retry_delay_s):
                    break
                continue
            self.log.info("Next turn at %s (in %.0fs)", when.isoformat(), delay)
            if self._stop.wait(delay):
                break
            try:
                self.tick()
            except Exception:
                self.log.exception("Scheduled resolution failed")

    def start(self) -> None:
        if self.is_running():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="turn-scheduler", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None

    def is_running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())
