from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from fastapi import Request

from .config import Settings

if TYPE_CHECKING:
    from guessboard.modules.board.sessions import SessionStore
    from guessboard.modules.presets.gateway.base import PresetGateway


def request_id(request: Request) -> Optional[str]:
    return getattr(getattr(request, "state", None), "request_id", None)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_sessions(request: Request) -> "SessionStore":
    return request.app.state.sessions


def get_gateway(request: Request) -> "PresetGateway":
    return request.app.state.gateway
