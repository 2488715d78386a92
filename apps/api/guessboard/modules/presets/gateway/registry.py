from __future__ import annotations

from guessboard.core.config import STORE_LOCAL, ConfigError, Settings
from guessboard.core.db import make_engine
from guessboard.core.storage import resolve_storage_root

from .base import PresetGateway
from .local import LocalGateway
from .supabase import SupabaseGateway


def get_gateway(settings: Settings) -> PresetGateway:
    """
    Registry entry point, routed by BOARD_STORE:
      supabase -> hosted store (default)
      local    -> sqlite + filesystem
    """
    if settings.board_store == STORE_LOCAL:
        return LocalGateway(
            engine=make_engine(settings.database_url),
            storage_root=resolve_storage_root(settings.storage_root),
            public_base_url=settings.public_base_url,
        )
    if not settings.board_store_url or not settings.board_store_key:
        raise ConfigError("Missing BOARD_STORE_URL or BOARD_STORE_KEY environment variables")
    return SupabaseGateway(
        url=settings.board_store_url,
        key=settings.board_store_key,
        bucket=settings.board_store_bucket,
        timeout=settings.board_store_timeout,
    )
