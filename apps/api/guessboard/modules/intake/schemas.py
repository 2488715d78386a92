from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from guessboard.modules.board.schemas import Character, GameOut

from .queue import PendingImage


class IntakeOut(BaseModel):
    active: bool
    remaining: int
    current: Optional[PendingImage] = None
    # preview of the photo waiting for a name
    current_image_path: Optional[str] = None


class NameIn(BaseModel):
    # blank names are a no-op, not a validation error
    name: str = ""


class NameOut(BaseModel):
    added: bool
    character: Optional[Character] = None
    intake: IntakeOut
    game: GameOut
