from __future__ import annotations

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from guessboard.core.config import STORE_LOCAL, Settings
from guessboard.core.db import make_engine
from guessboard.main import create_app
from guessboard.modules.board.schemas import Character, LocalImage, RemoteImage
from guessboard.modules.presets.gateway.local import LocalGateway


def remote_char(name: str, cid: Optional[str] = None, eliminated: bool = False) -> Character:
    return Character(
        id=cid or f"id-{name}",
        name=name,
        image=RemoteImage(url=f"https://img.example/{name}.jpg"),
        is_eliminated=eliminated,
    )


def local_char(name: str, handle: str, cid: Optional[str] = None) -> Character:
    return Character(id=cid or f"id-{name}", name=name, image=LocalImage(handle=handle, mime_type="image/png"))


@pytest.fixture
def local_settings(tmp_path) -> Settings:
    return Settings(
        board_store=STORE_LOCAL,
        database_url=f"sqlite:///{(tmp_path / 'app.db').as_posix()}",
        storage_root=str(tmp_path / "storage"),
        public_base_url="http://testserver",
    )


@pytest.fixture
def local_gateway(local_settings, tmp_path) -> LocalGateway:
    return LocalGateway(
        engine=make_engine(local_settings.database_url),
        storage_root=tmp_path / "storage",
        public_base_url=local_settings.public_base_url,
    )


@pytest.fixture
def client(local_settings, local_gateway) -> TestClient:
    app = create_app(local_settings, gateway=local_gateway)
    return TestClient(app)
