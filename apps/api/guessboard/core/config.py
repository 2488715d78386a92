"""
Runtime settings, read once from the process environment.

Defaults:
- BOARD_STORE: supabase (hosted store; needs BOARD_STORE_URL + BOARD_STORE_KEY)
- BOARD_STORE_BUCKET: board-images
- BOARD_STORE_TIMEOUT: 10 (seconds)
- DATABASE_URL: sqlite:///./data/app.db (local store only)
- STORAGE_ROOT: ./data/storage (local store only)
- GAME_IDLE_TTL: 3600 (seconds a game may sit untouched before eviction)
- MAX_GAMES: 500
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

STORE_SUPABASE = "supabase"
STORE_LOCAL = "local"
DEFAULT_DATABASE_URL = "sqlite:///./data/app.db"


class ConfigError(RuntimeError):
    """Missing or invalid configuration. Fatal at startup."""


@dataclass(frozen=True)
class Settings:
    app_version: str = "0.1.0"
    board_store: str = STORE_SUPABASE
    board_store_url: Optional[str] = None
    board_store_key: Optional[str] = None
    board_store_bucket: str = "board-images"
    board_store_timeout: float = 10.0
    database_url: str = DEFAULT_DATABASE_URL
    storage_root: str = "./data/storage"
    public_base_url: str = "http://localhost:7000"
    game_idle_ttl: float = 3600.0
    max_games: int = 500


def _parse_positive(name: str, raw: Optional[str], default: float, cast: Callable[[str], Any] = float) -> Any:
    if raw is None or raw.strip() == "":
        return default
    try:
        v = cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    if v <= 0:
        raise ConfigError(f"{name} must be > 0, got {raw!r}")
    return v


def load_database_url(env: Optional[Mapping[str, str]] = None) -> str:
    """Local store database only. Migrations read this without the hosted store secrets."""
    env = os.environ if env is None else env
    return env.get("DATABASE_URL") or DEFAULT_DATABASE_URL


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env

    store = (env.get("BOARD_STORE") or STORE_SUPABASE).strip().lower()
    if store not in (STORE_SUPABASE, STORE_LOCAL):
        raise ConfigError(f"BOARD_STORE must be {STORE_SUPABASE!r} or {STORE_LOCAL!r}, got {store!r}")

    url = env.get("BOARD_STORE_URL") or None
    key = env.get("BOARD_STORE_KEY") or None
    if store == STORE_SUPABASE and (not url or not key):
        raise ConfigError("Missing BOARD_STORE_URL or BOARD_STORE_KEY environment variables")

    return Settings(
        app_version=env.get("APP_VERSION", "0.1.0"),
        board_store=store,
        board_store_url=url.rstrip("/") if url else None,
        board_store_key=key,
        board_store_bucket=env.get("BOARD_STORE_BUCKET") or "board-images",
        board_store_timeout=_parse_positive("BOARD_STORE_TIMEOUT", env.get("BOARD_STORE_TIMEOUT"), 10.0),
        database_url=load_database_url(env),
        storage_root=env.get("STORAGE_ROOT", "./data/storage"),
        public_base_url=(env.get("PUBLIC_BASE_URL") or "http://localhost:7000").rstrip("/"),
        game_idle_ttl=_parse_positive("GAME_IDLE_TTL", env.get("GAME_IDLE_TTL"), 3600.0),
        max_games=_parse_positive("MAX_GAMES", env.get("MAX_GAMES"), 500, int),
    )
