"""
Configuration and environment loading for Vote Chess.

- Loads settings.yml (YAML) from repo root if present; falls back to environment variables
  (a .env file is loaded first via python-dotenv).
- Exposes SETTINGS with the turn schedule, server and logging knobs.
"""
from dataclasses import dataclass
import logging
import os
from typing import Any, Callable

import yaml
from dotenv import load_dotenv

load_dotenv()


def _repo_root() -> str:
    # this file: src/votechess/config.py → repo root is two levels up
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def _load_yaml(path: str) -> dict:
    if not os.path.isfile(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        logging.getLogger("votechess.config").exception("Failed to read %s; using environment only", path)
        return {}
    return data if isinstance(data, dict) else {}


_cfg = _load_yaml(os.environ.get("VOTECHESS_SETTINGS", os.path.join(_repo_root(), "settings.yml")))


def _get(name: str, default: Any, cast: Callable[[Any], Any] | None = None) -> Any:
    if name in _cfg:
        val = _cfg[name]
        return cast(val) if cast else val
    env = os.environ.get(name)
    if env is not None:
        return cast(env) if cast else env
    return default


def _as_bool(val: Any) -> bool:
    if isinstance(val, bool):
        return val
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _as_seed(val: Any) -> int | None:
    if val is None or str(val).strip() == "":
        return None
    return int(val)


@dataclass(frozen=True)
class Settings:
    # Turn schedule: 0 means once a day at resolve_hour_utc:00
    turn_interval_s: float
    resolve_hour_utc: int
    auto_reset: bool

    # Game
    starting_fen: str | None
    random_seed: int | None
    top_n: int

    # Server / logging
    host: str
    port: int
    log_level: str


SETTINGS = Settings(
    turn_interval_s=float(_get("VOTECHESS_TURN_INTERVAL_S", 0.0, cast=float)),
    resolve_hour_utc=int(_get("VOTECHESS_RESOLVE_HOUR_UTC", 0, cast=int)),
    auto_reset=_get("VOTECHESS_AUTO_RESET", False, cast=_as_bool),
    starting_fen=_get("VOTECHESS_STARTING_FEN", None) or None,
    random_seed=_get("VOTECHESS_RANDOM_SEED", None, cast=_as_seed),
    top_n=int(_get("VOTECHESS_TOP_N", 3, cast=int)),
    host=_get("VOTECHESS_HOST", "0.0.0.0"),
    port=int(_get("VOTECHESS_PORT", 8000, cast=int)),
    log_level=str(_get("VOTECHESS_LOG_LEVEL", "INFO")).upper(),
)
