"""
Local board store: sqlite tables (SQLModel) + blobs under STORAGE_ROOT.

Public image URLs point back at this API: <PUBLIC_BASE_URL>/storage/<key>.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from guessboard.core.ids import new_ulid, now_iso
from guessboard.core.storage import UnsafeKeyError, ensure_storage_root, write_blob

from ..models import Preset, SavedCharacter
from .base import GatewayError, NewSavedCharacter, PresetRecord, SavedCharacterRecord


class LocalGateway:
    name = "local"

    def __init__(self, engine: Engine, storage_root: Path, public_base_url: str) -> None:
        self.engine = engine
        self.storage_root = ensure_storage_root(storage_root)
        self._public_base_url = public_base_url.rstrip("/")
        SQLModel.metadata.create_all(engine, tables=[Preset.__table__, SavedCharacter.__table__])

    def public_url(self, key: str) -> str:
        return f"{self._public_base_url}/storage/{key}"

    def list_presets(self) -> List[PresetRecord]:
        try:
            with Session(self.engine) as s:
                rows = s.exec(select(Preset).order_by(Preset.created_at.desc(), Preset.id.desc())).all()
                return [PresetRecord(id=r.id, name=r.name, created_at=r.created_at) for r in rows]
        except SQLAlchemyError as e:
            raise GatewayError("list_presets", str(e)) from e

    def fetch_preset_characters(self, preset_id: str) -> List[SavedCharacterRecord]:
        try:
            with Session(self.engine) as s:
                rows = s.exec(
                    select(SavedCharacter)
                    .where(SavedCharacter.preset_id == preset_id)
                    .order_by(SavedCharacter.position.asc())
                ).all()
                return [
                    SavedCharacterRecord(id=r.id, preset_id=r.preset_id, name=r.name, image_url=r.image_url)
                    for r in rows
                ]
        except SQLAlchemyError as e:
            raise GatewayError("fetch_preset_characters", str(e)) from e

    def create_preset(self, name: str) -> PresetRecord:
        record = PresetRecord(id=new_ulid(), name=name, created_at=now_iso())
        try:
            with Session(self.engine) as s:
                s.add(Preset(id=record.id, name=record.name, created_at=record.created_at))
                s.commit()
        except SQLAlchemyError as e:
            raise GatewayError("create_preset", str(e)) from e
        return record

    def upload_image(self, key: str, data: bytes, content_type: str) -> str:
        try:
            write_blob(self.storage_root, key, data)
        except (OSError, UnsafeKeyError) as e:
            raise GatewayError("upload_image", str(e), {"key": key, "content_type": content_type}) from e
        return self.public_url(key)

    def save_characters(self, preset_id: str, rows: Sequence[NewSavedCharacter]) -> None:
        try:
            with Session(self.engine) as s:
                if s.get(Preset, preset_id) is None:
                    raise GatewayError("save_characters", "preset not found", {"preset_id": preset_id})
                for i, r in enumerate(rows):
                    s.add(SavedCharacter(id=new_ulid(), preset_id=preset_id, position=i, name=r.name, image_url=r.image_url))
                s.commit()
        except SQLAlchemyError as e:
            raise GatewayError("save_characters", str(e)) from e
