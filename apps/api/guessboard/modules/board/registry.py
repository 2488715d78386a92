"""
Character registry: an ordered board of at most MAX_CHARACTERS cards.

All functions are pure. They take the current list and return a new one;
the input list and its Character objects are never mutated.
"""
from __future__ import annotations

import time
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from guessboard.core.ids import new_ulid

from .schemas import MAX_CHARACTERS, Character, GameState, RemoteImage

PLACEHOLDER_IMAGE_URL = "https://picsum.photos/seed/{seed}/300/400"

# (position starting at 1, offset within the batch) -> Character
PlaceholderFactory = Callable[[int, int], Character]


def default_placeholder(position: int, offset: int) -> Character:
    seed = int(time.time() * 1000) + offset
    return Character(
        id=new_ulid(),
        name=f"Person {position}",
        image=RemoteImage(url=PLACEHOLDER_IMAGE_URL.format(seed=seed)),
    )


def has_capacity(characters: Sequence[Character]) -> bool:
    return len(characters) < MAX_CHARACTERS


def find(characters: Sequence[Character], character_id: str) -> Optional[Character]:
    for c in characters:
        if c.id == character_id:
            return c
    return None


def add(characters: Sequence[Character], character: Character) -> List[Character]:
    if not has_capacity(characters) or find(characters, character.id) is not None:
        return list(characters)
    return [*characters, character]


def add_many(characters: Sequence[Character], batch: Iterable[Character]) -> List[Character]:
    out = list(characters)
    for c in batch:
        out = add(out, c)
    return out


def remove(characters: Sequence[Character], character_id: str) -> Tuple[List[Character], Optional[Character]]:
    """Returns the new board and the removed character (None if absent)."""
    removed = find(characters, character_id)
    if removed is None:
        return list(characters), None
    return [c for c in characters if c.id != character_id], removed


def clear(state: GameState) -> GameState:
    return state.model_copy(update={"characters": [], "secret_character_id": None})


def fill_to_capacity(
    characters: Sequence[Character],
    factory: PlaceholderFactory = default_placeholder,
) -> List[Character]:
    needed = MAX_CHARACTERS - len(characters)
    if needed <= 0:
        return list(characters)
    start = len(characters)
    return add_many(characters, (factory(start + i + 1, i) for i in range(needed)))


def toggle_eliminated(characters: Sequence[Character], character_id: str) -> List[Character]:
    return [
        c.model_copy(update={"is_eliminated": not c.is_eliminated}) if c.id == character_id else c
        for c in characters
    ]


def reset_eliminations(characters: Sequence[Character]) -> List[Character]:
    return [c.model_copy(update={"is_eliminated": False}) if c.is_eliminated else c for c in characters]


def replace(rows: Iterable[Tuple[str, str, str]]) -> List[Character]:
    """Builds a fresh board from saved (id, name, image_url) rows."""
    out: List[Character] = []
    for cid, name, image_url in rows:
        out = add(out, Character(id=cid, name=name, image=RemoteImage(url=image_url)))
    return out


def remaining_count(characters: Sequence[Character]) -> int:
    return sum(1 for c in characters if not c.is_eliminated)


def eliminated_count(characters: Sequence[Character]) -> int:
    return sum(1 for c in characters if c.is_eliminated)
