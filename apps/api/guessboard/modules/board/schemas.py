from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, computed_field

MAX_CHARACTERS = 24

PendingConfirmation = Literal["hard_reset"]


class GamePhase(str, Enum):
    SETUP = "SETUP"
    SELECT_SECRET = "SELECT_SECRET"
    PLAYING = "PLAYING"
    # declared, no transition enters it
    GAME_OVER = "GAME_OVER"


class LocalImage(BaseModel):
    """Transient image held by the game's local image store."""
    kind: Literal["local"] = "local"
    handle: str
    mime_type: str = "application/octet-stream"


class RemoteImage(BaseModel):
    """Durable image reachable at a public URL."""
    kind: Literal["remote"] = "remote"
    url: str


ImageRef = Annotated[Union[LocalImage, RemoteImage], Field(discriminator="kind")]


class Character(BaseModel):
    id: str
    name: str = Field(min_length=1)
    image: ImageRef
    is_eliminated: bool = False


class GameState(BaseModel):
    phase: GamePhase = GamePhase.SETUP
    characters: List[Character] = Field(default_factory=list)
    secret_character_id: Optional[str] = None
    turn_count: int = 0
    pending_confirmation: Optional[PendingConfirmation] = None

    @computed_field  # type: ignore[misc]
    @property
    def total_count(self) -> int:
        return len(self.characters)

    @computed_field  # type: ignore[misc]
    @property
    def remaining_count(self) -> int:
        return sum(1 for c in self.characters if not c.is_eliminated)

    @computed_field  # type: ignore[misc]
    @property
    def eliminated_count(self) -> int:
        return sum(1 for c in self.characters if c.is_eliminated)

    def secret_character(self) -> Optional[Character]:
        if self.secret_character_id is None:
            return None
        for c in self.characters:
            if c.id == self.secret_character_id:
                return c
        return None


# --- API ---
class GameOut(BaseModel):
    game_id: str
    state: GameState
    capacity: int = MAX_CHARACTERS
