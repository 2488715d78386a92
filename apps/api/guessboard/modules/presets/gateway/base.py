from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence


class GatewayError(RuntimeError):
    """Any failure talking to the board store (HTTP status, network, timeout, DB)."""

    def __init__(self, operation: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation
        self.details = details or {}


@dataclass(frozen=True)
class PresetRecord:
    id: str
    name: str
    created_at: str


@dataclass(frozen=True)
class SavedCharacterRecord:
    id: str
    preset_id: str
    name: str
    image_url: str


@dataclass(frozen=True)
class NewSavedCharacter:
    name: str
    image_url: str


class PresetGateway(Protocol):
    """
    Request/response contract of the board store.

    Implementations raise GatewayError on every failure and never retry.
    """
    name: str

    def list_presets(self) -> List[PresetRecord]:
        """Newest first."""
        ...

    def fetch_preset_characters(self, preset_id: str) -> List[SavedCharacterRecord]:
        ...

    def create_preset(self, name: str) -> PresetRecord:
        ...

    def upload_image(self, key: str, data: bytes, content_type: str) -> str:
        """Stores one blob under <presetId>/<characterId>.<ext>; returns its public URL."""
        ...

    def save_characters(self, preset_id: str, rows: Sequence[NewSavedCharacter]) -> None:
        """Inserts every row as one batch."""
        ...
