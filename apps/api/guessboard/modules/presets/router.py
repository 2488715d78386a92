from __future__ import annotations

import mimetypes
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from guessboard.core.config import Settings
from guessboard.core.deps import get_gateway, get_sessions, get_settings, request_id
from guessboard.core.storage import UnsafeKeyError, read_blob
from guessboard.modules.board import service as board_service
from guessboard.modules.board.schemas import GamePhase, LocalImage
from guessboard.modules.board.sessions import GameNotFound, SessionStore
from guessboard.modules.intake.service import image_path

from .gateway.base import PresetGateway
from .gateway.local import LocalGateway
from .schemas import PresetLoadOut, PresetOut, PresetSaveIn, PresetSaveOut, PresetsListOut
from .service import (
    SAVE_FAILED_MESSAGE,
    SAVE_OK_MESSAGE,
    CharacterSnapshot,
    SaveBoardError,
    list_presets,
    load_preset,
    save_board,
)

router = APIRouter(tags=["presets"])


def _not_found(what: str = "game") -> HTTPException:
    return HTTPException(status_code=404, detail={"error": "not_found", "message": f"{what} not found"})


@router.get("/presets", response_model=PresetsListOut)
def api_list_presets(request: Request, gateway: PresetGateway = Depends(get_gateway)) -> PresetsListOut:
    items = list_presets(gateway, request_id=request_id(request))
    return PresetsListOut(items=[PresetOut(id=p.id, name=p.name, created_at=p.created_at) for p in items])


@router.post("/games/{game_id}/presets", response_model=PresetSaveOut, status_code=201)
def api_save_board(
    game_id: str,
    body: PresetSaveIn,
    request: Request,
    sessions: SessionStore = Depends(get_sessions),
    gateway: PresetGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> PresetSaveOut:
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail={"error": "bad_request", "message": "preset name is required"})

    # snapshot under the game lock; the network round trip runs without it
    try:
        with sessions.locked(game_id) as session:
            snapshots: List[CharacterSnapshot] = []
            for c in session.state.characters:
                data = None
                if isinstance(c.image, LocalImage):
                    stored = session.images.get(c.image.handle)
                    data = stored.data if stored is not None else None
                snapshots.append(CharacterSnapshot(id=c.id, name=c.name, image=c.image, data=data))
    except GameNotFound:
        raise _not_found()

    if not snapshots:
        raise HTTPException(status_code=400, detail={"error": "bad_request", "message": "board is empty"})

    def local_url(handle: str) -> str:
        return settings.public_base_url + image_path(game_id, handle)

    try:
        preset = save_board(gateway, name, snapshots, local_url, request_id=request_id(request))
    except SaveBoardError as e:
        raise HTTPException(
            status_code=502,
            detail={"error": "save_failed", "message": SAVE_FAILED_MESSAGE, "details": {"step": e.step}},
        )
    return PresetSaveOut(
        preset=PresetOut(id=preset.id, name=preset.name, created_at=preset.created_at),
        message=SAVE_OK_MESSAGE,
    )


@router.post("/games/{game_id}/presets/{preset_id}/load", response_model=PresetLoadOut)
def api_load_preset(
    game_id: str,
    preset_id: str,
    request: Request,
    sessions: SessionStore = Depends(get_sessions),
    gateway: PresetGateway = Depends(get_gateway),
) -> PresetLoadOut:
    try:
        with sessions.locked(game_id) as session:
            board_service.require_phase(session, GamePhase.SETUP)
    except GameNotFound:
        raise _not_found()

    rows = load_preset(gateway, preset_id, request_id=request_id(request))

    try:
        with sessions.locked(game_id) as session:
            if rows is None:
                return PresetLoadOut(loaded=False, game=board_service.game_out(session))
            board_service.replace_board(session, [(r.id, r.name, r.image_url) for r in rows])
            return PresetLoadOut(loaded=True, game=board_service.game_out(session))
    except GameNotFound:
        raise _not_found()


@router.get("/storage/{key:path}")
def api_read_blob(key: str, gateway: PresetGateway = Depends(get_gateway)) -> Response:
    if not isinstance(gateway, LocalGateway):
        raise _not_found("object")
    try:
        data = read_blob(gateway.storage_root, key)
    except (OSError, UnsafeKeyError):
        raise _not_found("object")
    media_type = mimetypes.guess_type(key)[0] or "application/octet-stream"
    return Response(content=data, media_type=media_type)
