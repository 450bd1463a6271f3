from __future__ import annotations

from dataclasses import dataclass
import os

from dotenv import load_dotenv

load_dotenv()


def _env(name: str) -> str | None:
    """Stripped value of `name`; blank counts as unset."""
    val = (os.getenv(name) or "").strip()
    return val or None


def _get_str(name: str, default: str) -> str:
    return _env(name) or default


def _get_bool(name: str, default: bool) -> bool:
    val = _env(name)
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "y", "on")


def _get_int(name: str, default: int) -> int:
    val = _env(name)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {val!r}") from None


@dataclass(frozen=True)
class Settings:
    debug: bool = _get_bool("APP_DEBUG", False)
    log_level: str = _get_str("APP_LOG_LEVEL", "INFO")

    # Local saved-game slot
    storage_dir: str = _get_str("APP_STORAGE_DIR", ".scorekeeper")

    # Shared game records + live sync hub
    remote_enabled: bool = _get_bool("APP_REMOTE_ENABLED", True)
    sync_debounce_ms: int = _get_int("APP_SYNC_DEBOUNCE_MS", 350)

    # Default for new games (stats callout)
    target_points: int = _get_int("APP_TARGET_POINTS", 100)

    cors_origins: tuple[str, ...] = (
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    )


settings = Settings()
