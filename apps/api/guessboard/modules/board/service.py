from __future__ import annotations

from typing import Iterable, Tuple

from fastapi import HTTPException

from guessboard.core.observability import emit
from guessboard.modules.intake.queue import IntakeQueue

from . import machine, registry
from .images import StoredImage
from .schemas import Character, GameOut, GamePhase
from .sessions import GameSession


def game_out(session: GameSession) -> GameOut:
    return GameOut(game_id=session.game_id, state=session.state)


def require_phase(session: GameSession, *phases: GamePhase) -> None:
    if session.state.phase not in phases:
        raise HTTPException(
            status_code=409,
            detail={
                "error": "wrong_phase",
                "message": f"not allowed during {session.state.phase.value}",
                "details": {"phase": session.state.phase.value, "allowed": [p.value for p in phases]},
            },
        )


# -------------------------
# Setup: board editing
# -------------------------
def add_character(session: GameSession, character: Character) -> bool:
    """Adds one named photo; a full board drops it and frees its image."""
    before = len(session.state.characters)
    characters = registry.add(session.state.characters, character)
    added = len(characters) > before
    if not added:
        session.images.release_characters([character])
        emit("info", "board.character.dropped", "board is full", None, __name__, game_id=session.game_id)
    session.state = session.state.model_copy(update={"characters": characters})
    return added


def remove_character(session: GameSession, character_id: str) -> None:
    require_phase(session, GamePhase.SETUP)
    characters, removed = registry.remove(session.state.characters, character_id)
    if removed is None:
        return
    session.images.release_characters([removed])
    session.state = session.state.model_copy(update={"characters": characters})


def clear_board(session: GameSession) -> None:
    require_phase(session, GamePhase.SETUP)
    session.images.release_characters(session.state.characters)
    session.state = registry.clear(session.state)


def fill_board(session: GameSession) -> int:
    require_phase(session, GamePhase.SETUP)
    before = len(session.state.characters)
    characters = registry.fill_to_capacity(session.state.characters)
    session.state = session.state.model_copy(update={"characters": characters})
    return len(characters) - before


def replace_board(session: GameSession, rows: Iterable[Tuple[str, str, str]]) -> None:
    require_phase(session, GamePhase.SETUP)
    characters = registry.replace(rows)
    session.images.release_characters(session.state.characters)
    session.state = registry.clear(session.state).model_copy(update={"characters": characters})


def image_bytes(session: GameSession, handle: str) -> StoredImage:
    stored = session.images.get(handle)
    if stored is None:
        raise HTTPException(status_code=404, detail={"error": "not_found", "message": "image not found"})
    return stored


# -------------------------
# Phase transitions
# -------------------------
def start_game(session: GameSession) -> None:
    require_phase(session, GamePhase.SETUP)
    if not session.state.characters:
        raise HTTPException(status_code=409, detail={"error": "empty_board", "message": "add at least one character first"})
    session.state = machine.finish_setup(session.state)
    emit("info", "game.phase", "setup finished", None, __name__, game_id=session.game_id, phase=session.state.phase.value)


def click_card(session: GameSession, character_id: str) -> None:
    if registry.find(session.state.characters, character_id) is None:
        raise HTTPException(status_code=404, detail={"error": "not_found", "message": "character not found"})
    session.state = machine.click_card(session.state, character_id)


def confirm_secret(session: GameSession) -> None:
    require_phase(session, GamePhase.SELECT_SECRET)
    session.state = machine.confirm_secret(session.state)
    if session.state.phase == GamePhase.PLAYING:
        emit("info", "game.phase", "secret confirmed", None, __name__, game_id=session.game_id, phase=session.state.phase.value)


def soft_reset(session: GameSession) -> None:
    require_phase(session, GamePhase.PLAYING)
    session.state = machine.soft_reset(session.state)
    emit("info", "game.reset.soft", "board kept, progress cleared", None, __name__, game_id=session.game_id)


def request_hard_reset(session: GameSession) -> None:
    require_phase(session, GamePhase.PLAYING)
    session.state = machine.request_hard_reset(session.state)


def cancel_hard_reset(session: GameSession) -> None:
    session.state = machine.cancel_hard_reset(session.state)


def confirm_hard_reset(session: GameSession) -> None:
    require_phase(session, GamePhase.PLAYING)
    if session.state.pending_confirmation != machine.HARD_RESET:
        raise HTTPException(status_code=409, detail={"error": "not_requested", "message": "hard reset was not requested"})
    session.state = machine.confirm_hard_reset(session.state)
    session.images.clear()
    session.intake = IntakeQueue()
    emit("info", "game.reset.hard", "board cleared", None, __name__, game_id=session.game_id)
