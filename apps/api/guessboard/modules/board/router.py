from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path, Response

from guessboard.core.deps import get_sessions
from guessboard.core.observability import emit

from . import service
from .schemas import GameOut
from .sessions import GameNotFound, SessionStore

router = APIRouter(tags=["games"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail={"error": "not_found", "message": "game not found"})


@router.post("/games", response_model=GameOut, status_code=201)
def api_create_game(sessions: SessionStore = Depends(get_sessions)) -> GameOut:
    session = sessions.create()
    emit("info", "game.created", "new game", None, __name__, game_id=session.game_id)
    return service.game_out(session)


@router.get("/games/{game_id}", response_model=GameOut)
def api_get_game(game_id: str = Path(...), sessions: SessionStore = Depends(get_sessions)) -> GameOut:
    try:
        with sessions.locked(game_id) as session:
            return service.game_out(session)
    except GameNotFound:
        raise _not_found()


@router.delete("/games/{game_id}", status_code=204)
def api_discard_game(game_id: str, sessions: SessionStore = Depends(get_sessions)) -> Response:
    try:
        sessions.discard(game_id)
    except GameNotFound:
        raise _not_found()
    return Response(status_code=204)


@router.get("/games/{game_id}/images/{handle}")
def api_get_image(game_id: str, handle: str, sessions: SessionStore = Depends(get_sessions)) -> Response:
    try:
        with sessions.locked(game_id) as session:
            stored = service.image_bytes(session, handle)
    except GameNotFound:
        raise _not_found()
    return Response(content=stored.data, media_type=stored.mime_type)


# -------------------------
# Setup: board editing
# -------------------------
@router.delete("/games/{game_id}/characters/{character_id}", response_model=GameOut)
def api_remove_character(game_id: str, character_id: str, sessions: SessionStore = Depends(get_sessions)) -> GameOut:
    try:
        with sessions.locked(game_id) as session:
            service.remove_character(session, character_id)
            return service.game_out(session)
    except GameNotFound:
        raise _not_found()


@router.post("/games/{game_id}/characters/fill", response_model=GameOut)
def api_fill_board(game_id: str, sessions: SessionStore = Depends(get_sessions)) -> GameOut:
    try:
        with sessions.locked(game_id) as session:
            service.fill_board(session)
            return service.game_out(session)
    except GameNotFound:
        raise _not_found()


@router.post("/games/{game_id}/characters/clear", response_model=GameOut)
def api_clear_board(game_id: str, sessions: SessionStore = Depends(get_sessions)) -> GameOut:
    try:
        with sessions.locked(game_id) as session:
            service.clear_board(session)
            return service.game_out(session)
    except GameNotFound:
        raise _not_found()


# -------------------------
# Phase transitions
# -------------------------
@router.post("/games/{game_id}/start", response_model=GameOut)
def api_start_game(game_id: str, sessions: SessionStore = Depends(get_sessions)) -> GameOut:
    try:
        with sessions.locked(game_id) as session:
            service.start_game(session)
            return service.game_out(session)
    except GameNotFound:
        raise _not_found()


@router.post("/games/{game_id}/cards/{character_id}/click", response_model=GameOut)
def api_click_card(game_id: str, character_id: str, sessions: SessionStore = Depends(get_sessions)) -> GameOut:
    try:
        with sessions.locked(game_id) as session:
            service.click_card(session, character_id)
            return service.game_out(session)
    except GameNotFound:
        raise _not_found()


@router.post("/games/{game_id}/confirm-secret", response_model=GameOut)
def api_confirm_secret(game_id: str, sessions: SessionStore = Depends(get_sessions)) -> GameOut:
    try:
        with sessions.locked(game_id) as session:
            service.confirm_secret(session)
            return service.game_out(session)
    except GameNotFound:
        raise _not_found()


@router.post("/games/{game_id}/reset/soft", response_model=GameOut)
def api_soft_reset(game_id: str, sessions: SessionStore = Depends(get_sessions)) -> GameOut:
    try:
        with sessions.locked(game_id) as session:
            service.soft_reset(session)
            return service.game_out(session)
    except GameNotFound:
        raise _not_found()


@router.post("/games/{game_id}/reset/hard", response_model=GameOut)
def api_request_hard_reset(game_id: str, sessions: SessionStore = Depends(get_sessions)) -> GameOut:
    try:
        with sessions.locked(game_id) as session:
            service.request_hard_reset(session)
            return service.game_out(session)
    except GameNotFound:
        raise _not_found()


@router.post("/games/{game_id}/reset/hard/confirm", response_model=GameOut)
def api_confirm_hard_reset(game_id: str, sessions: SessionStore = Depends(get_sessions)) -> GameOut:
    try:
        with sessions.locked(game_id) as session:
            service.confirm_hard_reset(session)
            return service.game_out(session)
    except GameNotFound:
        raise _not_found()


@router.post("/games/{game_id}/reset/hard/cancel", response_model=GameOut)
def api_cancel_hard_reset(game_id: str, sessions: SessionStore = Depends(get_sessions)) -> GameOut:
    try:
        with sessions.locked(game_id) as session:
            service.cancel_hard_reset(session)
            return service.game_out(session)
    except GameNotFound:
        raise _not_found()
