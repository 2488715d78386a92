"""
Serial naming queue for incoming photos.

Photos arrive in batches (file picker or clipboard paste) and are named one
at a time, head first. Bytes are parked in the game's LocalImageStore as soon
as they arrive, so every pending item already owns a transient handle.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from guessboard.core.ids import new_ulid
from guessboard.modules.board.images import LocalImageStore
from guessboard.modules.board.schemas import Character, LocalImage


@dataclass(frozen=True)
class RawImage:
    data: bytes
    mime_type: str
    filename: Optional[str] = None


class PendingImage(BaseModel):
    handle: str
    mime_type: str
    filename: Optional[str] = None


class IntakeQueue(BaseModel):
    pending: List[PendingImage] = Field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return bool(self.pending)

    @property
    def current(self) -> Optional[PendingImage]:
        return self.pending[0] if self.pending else None


def is_image(mime_type: Optional[str]) -> bool:
    return bool(mime_type) and str(mime_type).startswith("image")


def _park(images: LocalImageStore, raws: Iterable[RawImage]) -> List[PendingImage]:
    out: List[PendingImage] = []
    for raw in raws:
        ref = images.mint(raw.data, raw.mime_type)
        out.append(PendingImage(handle=ref.handle, mime_type=ref.mime_type, filename=raw.filename))
    return out


def _release(images: LocalImageStore, pending: Iterable[PendingImage]) -> None:
    for p in pending:
        images.release(p.handle)


def select_files(queue: IntakeQueue, images: LocalImageStore, raws: List[RawImage]) -> IntakeQueue:
    """File picker selection: the new batch replaces whatever was queued."""
    if not raws:
        return queue
    _release(images, queue.pending)
    return IntakeQueue(pending=_park(images, raws))


def paste(queue: IntakeQueue, images: LocalImageStore, raws: List[RawImage]) -> IntakeQueue:
    """Clipboard paste: images only; appends to a running session, else starts one."""
    accepted = [r for r in raws if is_image(r.mime_type)]
    if not accepted:
        return queue
    parked = _park(images, accepted)
    if not queue.is_active:
        return IntakeQueue(pending=parked)
    return queue.model_copy(update={"pending": [*queue.pending, *parked]})


def submit_name(queue: IntakeQueue, name: str) -> Tuple[IntakeQueue, Optional[Character]]:
    """
    Names the head of the queue.

    Blank names and an idle queue are rejected as a no-op (the same queue and
    no character come back). The caller adds the character to the board and
    releases its handle if the board has no room left.
    """
    trimmed = (name or "").strip()
    head = queue.current
    if not trimmed or head is None:
        return queue, None

    character = Character(
        id=new_ulid(),
        name=trimmed,
        image=LocalImage(handle=head.handle, mime_type=head.mime_type),
    )
    return queue.model_copy(update={"pending": queue.pending[1:]}), character


def cancel(queue: IntakeQueue, images: LocalImageStore) -> IntakeQueue:
    """Closes the naming prompt and discards every photo still waiting."""
    _release(images, queue.pending)
    return IntakeQueue()
