from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from guessboard.modules.board.schemas import GameOut


class PresetOut(BaseModel):
    id: str
    name: str
    created_at: str


class PresetsListOut(BaseModel):
    items: List[PresetOut]


class PresetSaveIn(BaseModel):
    name: str = Field(min_length=1)


class PresetSaveOut(BaseModel):
    preset: PresetOut
    message: str


class PresetLoadOut(BaseModel):
    loaded: bool
    game: GameOut
