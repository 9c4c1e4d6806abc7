"""
Environment-driven settings.

Every value is read on call, so tests can change the environment with
`monkeypatch.setenv` without reloading modules.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_MIRROR_FILE = "data/movielist.csv"
DEFAULT_ID_COUNTER_FILE = "data/primary-key/key.xml"
BUNDLED_MIRROR_FILE = Path(__file__).resolve().parent.parent / "movies" / "data" / "movielist.csv"


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def mirror_file() -> Path:
    return Path(_env_str("MIRROR_FILE", DEFAULT_MIRROR_FILE))


def mirror_bundled_file() -> Path:
    return Path(_env_str("MIRROR_BUNDLED_FILE", str(BUNDLED_MIRROR_FILE)))


def mirror_delimiter() -> str:
    # Single-character delimiter; extra characters are ignored.
    return _env_str("MIRROR_DELIMITER", ";")[0]


def mirror_winner_literal() -> str:
    return _env_str("MIRROR_WINNER_LITERAL", "yes")


def mirror_min_columns() -> int:
    return max(1, _env_int("MIRROR_MIN_COLUMNS", 6))


def id_counter_file() -> Path:
    return Path(_env_str("ID_COUNTER_FILE", DEFAULT_ID_COUNTER_FILE))


def id_counter_indent() -> int:
    return max(0, _env_int("ID_COUNTER_INDENT", 4))


def schema_max_attempts() -> int:
    return max(1, _env_int("SCHEMA_MAX_ATTEMPTS", 10))


def schema_initial_delay_s() -> float:
    return max(0, _env_int("SCHEMA_INITIAL_DELAY_MS", 50)) / 1000.0


def schema_max_delay_s() -> float:
    return max(0, _env_int("SCHEMA_MAX_DELAY_MS", 500)) / 1000.0


def import_mirror_on_startup() -> bool:
    return _env_bool("IMPORT_MIRROR_ON_STARTUP", True)


def reset_mirror_to_original() -> bool:
    return _env_bool("RESET_MIRROR_TO_ORIGINAL", False)


def cors_allow_origins() -> list[str]:
    raw = _env_str("CORS_ALLOW_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()
