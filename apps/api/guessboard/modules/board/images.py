from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from guessboard.core.ids import new_ulid

from .schemas import Character, LocalImage


@dataclass(frozen=True)
class StoredImage:
    data: bytes
    mime_type: str


class LocalImageStore:
    """
    Bytes behind transient LocalImage handles for one game.

    A handle lives until its character is removed, the board is cleared or
    replaced, a pending intake item is dropped, or the game is discarded.
    """

    def __init__(self) -> None:
        self._images: Dict[str, StoredImage] = {}

    def __len__(self) -> int:
        return len(self._images)

    def __contains__(self, handle: object) -> bool:
        return handle in self._images

    def mint(self, data: bytes, mime_type: str) -> LocalImage:
        handle = new_ulid()
        self._images[handle] = StoredImage(data=data, mime_type=mime_type or "application/octet-stream")
        return LocalImage(handle=handle, mime_type=mime_type or "application/octet-stream")

    def get(self, handle: str) -> Optional[StoredImage]:
        return self._images.get(handle)

    def release(self, handle: str) -> None:
        self._images.pop(handle, None)

    def release_characters(self, characters: Iterable[Character]) -> None:
        for c in characters:
            if isinstance(c.image, LocalImage):
                self.release(c.image.handle)

    def clear(self) -> None:
        self._images.clear()
