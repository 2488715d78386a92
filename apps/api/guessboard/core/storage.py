"""
Local filesystem blob storage for the local board store.

Blobs are addressed by a relative key such as "<presetId>/<characterId>.png".

Defaults:
- STORAGE_ROOT: ./data/storage
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict


def _repo_root() -> Path:
    # apps/api/guessboard/core/storage.py -> repo root = parents[4]
    return Path(__file__).resolve().parents[4]


class UnsafeKeyError(ValueError):
    pass


def resolve_storage_root(raw: str) -> Path:
    p = Path(raw)
    return (_repo_root() / p).resolve() if not p.is_absolute() else p


def ensure_storage_root(root: Path) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    return root


def blob_path(root: Path, key: str) -> Path:
    # keys are store-relative; refuse anything escaping the root
    target = (root / key).resolve()
    if root.resolve() not in target.parents:
        raise UnsafeKeyError(f"storage key escapes root: {key!r}")
    return target


def write_blob(root: Path, key: str, data: bytes) -> Path:
    target = blob_path(root, key)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    return target


def read_blob(root: Path, key: str) -> bytes:
    return blob_path(root, key).read_bytes()


def storage_health(root: Path) -> Dict[str, Any]:
    try:
        ensure_storage_root(root)
        probe = root / ".probe_write"
        probe.write_text("ok", encoding="utf-8")
        try:
            probe.unlink()
        except OSError:
            pass
        return {"status": "ok", "kind": "local_fs", "root": str(root.as_posix())}
    except Exception as e:
        return {"status": "error", "kind": "local_fs", "root": str(root.as_posix()), "error": str(e)}
