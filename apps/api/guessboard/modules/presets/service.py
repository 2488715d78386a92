"""
Preset round trip on top of a PresetGateway.

Reads degrade to "nothing" and are logged. Saving runs in four steps:
  1. create the preset row (failure aborts the save)
  2. resolve every character's final image URL concurrently; transient
     images are uploaded, durable ones reused, a failed upload keeps the
     transient reference for that character only
  3. insert all character rows as one batch (failure aborts the save; the
     preset row from step 1 stays behind)
  4. report success
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from guessboard.core.observability import emit
from guessboard.modules.board.schemas import ImageRef, LocalImage

from .gateway.base import GatewayError, NewSavedCharacter, PresetGateway, PresetRecord, SavedCharacterRecord

SAVE_OK_MESSAGE = "Board saved successfully!"
SAVE_FAILED_MESSAGE = "Failed to save board."

MAX_UPLOAD_WORKERS = 8


class SaveBoardError(RuntimeError):
    def __init__(self, step: str, cause: Exception, preset_id: Optional[str] = None) -> None:
        super().__init__(SAVE_FAILED_MESSAGE)
        self.step = step
        self.cause = cause
        self.preset_id = preset_id


@dataclass(frozen=True)
class CharacterSnapshot:
    """Immutable copy of one card taken when the save starts."""
    id: str
    name: str
    image: ImageRef
    # bytes behind a LocalImage, None when the handle is gone
    data: Optional[bytes] = None


def list_presets(gateway: PresetGateway, request_id: Optional[str] = None) -> List[PresetRecord]:
    try:
        return gateway.list_presets()
    except GatewayError as e:
        emit("error", "presets.list.failed", str(e), request_id, __name__, store=gateway.name, details=e.details)
        return []


def load_preset(
    gateway: PresetGateway, preset_id: str, request_id: Optional[str] = None
) -> Optional[List[SavedCharacterRecord]]:
    try:
        return gateway.fetch_preset_characters(preset_id)
    except GatewayError as e:
        emit("error", "presets.load.failed", str(e), request_id, __name__, store=gateway.name, preset_id=preset_id)
        return None


def extension_for(mime_type: str) -> str:
    # image/png -> png, image/svg+xml -> svg, image/jpeg; q=1 -> jpeg
    sub = mime_type.split(";", 1)[0].split("/", 1)[-1].strip()
    sub = sub.split("+", 1)[0]
    return sub or "bin"


def storage_key(preset_id: str, character_id: str, mime_type: str) -> str:
    return f"{preset_id}/{character_id}.{extension_for(mime_type)}"


def resolve_image_url(
    gateway: PresetGateway,
    preset_id: str,
    snap: CharacterSnapshot,
    local_url: Callable[[str], str],
    request_id: Optional[str] = None,
) -> str:
    image = snap.image
    if not isinstance(image, LocalImage):
        return image.url

    fallback = local_url(image.handle)
    if snap.data is None:
        emit("warning", "presets.upload.skipped", "local image no longer held", request_id, __name__, character_id=snap.id)
        return fallback
    try:
        return gateway.upload_image(storage_key(preset_id, snap.id, image.mime_type), snap.data, image.mime_type)
    except GatewayError as e:
        emit(
            "error",
            "presets.upload.failed",
            f"Failed to upload image for char {snap.name}: {e}",
            request_id,
            __name__,
            character_id=snap.id,
        )
        return fallback


def save_board(
    gateway: PresetGateway,
    name: str,
    snapshots: Sequence[CharacterSnapshot],
    local_url: Callable[[str], str],
    request_id: Optional[str] = None,
) -> PresetRecord:
    try:
        preset = gateway.create_preset(name)
    except GatewayError as e:
        emit("error", "presets.save.failed", str(e), request_id, __name__, step="create_preset")
        raise SaveBoardError("create_preset", e) from e

    workers = max(1, min(len(snapshots), MAX_UPLOAD_WORKERS))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        urls = list(
            executor.map(lambda s: resolve_image_url(gateway, preset.id, s, local_url, request_id), snapshots)
        )

    rows = [NewSavedCharacter(name=s.name, image_url=url) for s, url in zip(snapshots, urls)]
    try:
        gateway.save_characters(preset.id, rows)
    except GatewayError as e:
        # not compensated: the preset row stays with no characters
        emit("error", "presets.save.failed", str(e), request_id, __name__, step="save_characters", orphan_preset_id=preset.id)
        raise SaveBoardError("save_characters", e, preset_id=preset.id) from e

    emit("info", "presets.saved", SAVE_OK_MESSAGE, request_id, __name__, preset_id=preset.id, characters=len(rows))
    return preset
