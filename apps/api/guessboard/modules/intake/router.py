from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from guessboard.core.deps import get_sessions, request_id
from guessboard.modules.board import service as board_service
from guessboard.modules.board.sessions import GameNotFound, SessionStore

from . import service
from .queue import RawImage
from .schemas import IntakeOut, NameIn, NameOut

router = APIRouter(prefix="/games/{game_id}/intake", tags=["intake"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail={"error": "not_found", "message": "game not found"})


def _read_uploads(files: List[UploadFile]) -> List[RawImage]:
    out: List[RawImage] = []
    for f in files:
        out.append(RawImage(data=f.file.read(), mime_type=f.content_type or "", filename=f.filename))
    return out


@router.get("", response_model=IntakeOut)
def api_get_intake(game_id: str, sessions: SessionStore = Depends(get_sessions)) -> IntakeOut:
    try:
        with sessions.locked(game_id) as session:
            return service.intake_out(session)
    except GameNotFound:
        raise _not_found()


@router.post("/files", response_model=IntakeOut)
def api_select_files(
    game_id: str,
    files: List[UploadFile] = File(...),
    sessions: SessionStore = Depends(get_sessions),
) -> IntakeOut:
    raws = _read_uploads(files)
    try:
        with sessions.locked(game_id) as session:
            service.select_files(session, raws)
            return service.intake_out(session)
    except GameNotFound:
        raise _not_found()


@router.post("/paste", response_model=IntakeOut)
def api_paste(
    game_id: str,
    request: Request,
    files: List[UploadFile] = File(...),
    sessions: SessionStore = Depends(get_sessions),
) -> IntakeOut:
    raws = _read_uploads(files)
    try:
        with sessions.locked(game_id) as session:
            service.paste(session, raws, request_id=request_id(request))
            return service.intake_out(session)
    except GameNotFound:
        raise _not_found()


@router.post("/name", response_model=NameOut)
def api_submit_name(game_id: str, body: NameIn, sessions: SessionStore = Depends(get_sessions)) -> NameOut:
    try:
        with sessions.locked(game_id) as session:
            added, character = service.submit_name(session, body.name)
            return NameOut(
                added=added,
                character=character,
                intake=service.intake_out(session),
                game=board_service.game_out(session),
            )
    except GameNotFound:
        raise _not_found()


@router.post("/cancel", response_model=IntakeOut)
def api_cancel(game_id: str, sessions: SessionStore = Depends(get_sessions)) -> IntakeOut:
    try:
        with sessions.locked(game_id) as session:
            service.cancel(session)
            return service.intake_out(session)
    except GameNotFound:
        raise _not_found()
