from __future__ import annotations

from typing import List, Optional, Tuple

from guessboard.core.observability import emit
from guessboard.modules.board import service as board_service
from guessboard.modules.board.schemas import Character, GamePhase
from guessboard.modules.board.sessions import GameSession

from . import queue
from .queue import RawImage
from .schemas import IntakeOut


def image_path(game_id: str, handle: str) -> str:
    return f"/games/{game_id}/images/{handle}"


def intake_out(session: GameSession) -> IntakeOut:
    current = session.intake.current
    return IntakeOut(
        active=session.intake.is_active,
        remaining=len(session.intake.pending),
        current=current,
        current_image_path=image_path(session.game_id, current.handle) if current else None,
    )


def select_files(session: GameSession, raws: List[RawImage]) -> None:
    board_service.require_phase(session, GamePhase.SETUP)
    session.intake = queue.select_files(session.intake, session.images, raws)
    emit("info", "intake.files", f"{len(raws)} file(s) selected", None, __name__, game_id=session.game_id)


def paste(session: GameSession, raws: List[RawImage], request_id: Optional[str] = None) -> None:
    board_service.require_phase(session, GamePhase.SETUP)
    was_active = session.intake.is_active
    session.intake = queue.paste(session.intake, session.images, raws)
    emit(
        "info",
        "intake.paste",
        f"{len(session.intake.pending)} photo(s) waiting",
        request_id,
        __name__,
        game_id=session.game_id,
        appended=was_active,
    )


def submit_name(session: GameSession, name: str) -> Tuple[bool, Optional[Character]]:
    board_service.require_phase(session, GamePhase.SETUP)
    session.intake, character = queue.submit_name(session.intake, name)
    if character is None:
        return False, None
    added = board_service.add_character(session, character)
    return added, character if added else None


def cancel(session: GameSession) -> None:
    dropped = len(session.intake.pending)
    session.intake = queue.cancel(session.intake, session.images)
    if dropped:
        emit("info", "intake.cancel", f"{dropped} photo(s) discarded", None, __name__, game_id=session.game_id)
