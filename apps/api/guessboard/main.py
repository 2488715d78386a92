"""
Guess Who board API.

Run with:
    uvicorn guessboard.main:create_app --factory --port 7000
"""
from __future__ import annotations

import uuid
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from guessboard.core.config import Settings, load_settings
from guessboard.core.db import db_health
from guessboard.core.observability import emit, setup_logging
from guessboard.core.storage import storage_health
from guessboard.modules.board.router import router as board_router
from guessboard.modules.board.sessions import SessionStore
from guessboard.modules.intake.router import router as intake_router
from guessboard.modules.presets.gateway.base import PresetGateway
from guessboard.modules.presets.gateway.local import LocalGateway
from guessboard.modules.presets.gateway.registry import get_gateway
from guessboard.modules.presets.router import router as presets_router


# === OBSERVABILITY FOUNDATIONS ===
# - X-Request-Id in/out (missing -> generated; always echoed back; also on errors)
# - Error envelope keys: error, message, request_id, details
def _err_envelope(error: str, message: str, request_id: Optional[str], details: Any, status_code: int):
    headers = {}
    if request_id:
        headers["X-Request-Id"] = request_id
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "request_id": request_id,
            "details": details,
        },
        headers=headers,
    )


def _install_observability(app: FastAPI) -> None:
    @app.middleware("http")
    async def _request_id_mw(request: Request, call_next):
        rid = request.headers.get("X-Request-Id") or uuid.uuid4().hex.upper()
        request.state.request_id = rid
        emit("info", "http.request.start", f"{request.method} {request.url.path}", rid, __name__)
        try:
            resp = await call_next(request)
        except Exception as e:
            emit("error", "http.request.exception", str(e), rid, __name__)
            raise
        resp.headers["X-Request-Id"] = rid
        emit("info", "http.request.end", f"{request.method} {request.url.path} -> {getattr(resp,'status_code',None)}", rid, __name__)
        return resp

    @app.exception_handler(StarletteHTTPException)
    async def _http_exc_handler(request: Request, exc: StarletteHTTPException):
        rid = getattr(request.state, "request_id", None)
        # services raise HTTPException(detail={"error", "message", "details"?})
        if isinstance(exc.detail, dict):
            return _err_envelope(
                str(exc.detail.get("error", "http_error")),
                str(exc.detail.get("message", "")),
                rid,
                exc.detail.get("details", {"status_code": exc.status_code}),
                exc.status_code,
            )
        return _err_envelope("http_error", str(exc.detail), rid, {"status_code": exc.status_code}, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_exc_handler(request: Request, exc: RequestValidationError):
        rid = getattr(request.state, "request_id", None)
        return _err_envelope("validation_error", "request validation failed", rid, exc.errors(), 422)

    @app.exception_handler(Exception)
    async def _unhandled_exc_handler(request: Request, exc: Exception):
        rid = getattr(request.state, "request_id", None)
        return _err_envelope("internal_error", "internal server error", rid, {"type": type(exc).__name__}, 500)
# === END OBSERVABILITY FOUNDATIONS ===


def create_app(settings: Optional[Settings] = None, gateway: Optional[PresetGateway] = None) -> FastAPI:
    """
    Builds the API. Missing store secrets raise ConfigError here, so a
    misconfigured process never starts serving.
    """
    setup_logging()
    settings = settings or load_settings()
    gateway = gateway or get_gateway(settings)

    app = FastAPI(title="Guess Who Board API", version=settings.app_version)
    app.state.settings = settings
    app.state.gateway = gateway
    app.state.sessions = SessionStore(idle_ttl=settings.game_idle_ttl, max_games=settings.max_games)

    _install_observability(app)

    @app.get("/health")
    def health():
        app.state.sessions.evict_idle()
        store: dict = {"status": "ok", "kind": gateway.name}
        if isinstance(gateway, LocalGateway):
            store["db"] = db_health(gateway.engine, settings.database_url)
            store["storage"] = storage_health(gateway.storage_root)
        return {
            "status": "ok",
            "version": settings.app_version,
            "store": store,
            "games": len(app.state.sessions),
        }

    app.include_router(board_router)
    app.include_router(intake_router)
    app.include_router(presets_router)

    emit("info", "app.start", "app created", None, __name__, store=gateway.name, version=settings.app_version)
    return app
