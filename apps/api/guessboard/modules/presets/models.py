from __future__ import annotations

from sqlmodel import Field, SQLModel


class Preset(SQLModel, table=True):
    __tablename__ = "presets"

    id: str = Field(primary_key=True)
    name: str
    created_at: str = Field(index=True)


class SavedCharacter(SQLModel, table=True):
    __tablename__ = "saved_characters"

    id: str = Field(primary_key=True)
    preset_id: str = Field(foreign_key="presets.id", index=True)
    # board order within the preset
    position: int = Field(default=0)
    name: str
    image_url: str
