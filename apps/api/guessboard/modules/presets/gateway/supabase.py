"""
Hosted board store (Supabase): PostgREST tables + Storage bucket over HTTP.

Tables: presets(id, name, created_at), saved_characters(id, preset_id, name, image_url)
Bucket: board-images (public), objects keyed <presetId>/<characterId>.<ext>
"""
from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import requests

from guessboard.core.observability import emit

from .base import GatewayError, NewSavedCharacter, PresetRecord, SavedCharacterRecord

_DEFAULT_TIMEOUT = 10  # seconds


class SupabaseGateway:
    name = "supabase"

    def __init__(
        self,
        url: str,
        key: str,
        bucket: str = "board-images",
        timeout: float = _DEFAULT_TIMEOUT,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self._url = url.rstrip("/")
        self._key = key
        self._bucket = bucket
        self._timeout = timeout
        # requests.Session is not thread safe; uploads fan out across workers
        self._session_factory = session_factory
        self._local = threading.local()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "apikey": self._key,
            "Authorization": f"Bearer {self._key}",
        }
        if extra:
            headers.update(extra)
        return headers

    def _http(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._session_factory()
            self._local.session = session
        return session

    def _request(self, operation: str, method: str, path: str, **kwargs: Any) -> requests.Response:
        try:
            resp = self._http().request(method, f"{self._url}{path}", timeout=self._timeout, **kwargs)
        except requests.Timeout as exc:
            raise GatewayError(operation, f"timed out after {self._timeout}s") from exc
        except requests.RequestException as exc:
            raise GatewayError(operation, str(exc)) from exc
        if resp.status_code >= 400:
            raise GatewayError(
                operation,
                f"HTTP {resp.status_code}",
                {"status_code": resp.status_code, "body": resp.text[:500]},
            )
        return resp

    @staticmethod
    def _json(operation: str, resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise GatewayError(operation, "response is not JSON") from exc

    @staticmethod
    def _rows(operation: str, payload: Any, build: Callable[[Mapping[str, Any]], Any]) -> List[Any]:
        try:
            return [build(r) for r in payload or []]
        except (KeyError, TypeError, ValueError) as exc:
            raise GatewayError(operation, "unexpected row shape", {"error": repr(exc)}) from exc

    def public_url(self, key: str) -> str:
        return f"{self._url}/storage/v1/object/public/{self._bucket}/{key}"

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def list_presets(self) -> List[PresetRecord]:
        resp = self._request(
            "list_presets",
            "GET",
            "/rest/v1/presets",
            params={"select": "*", "order": "created_at.desc"},
            headers=self._headers(),
        )
        return self._rows("list_presets", self._json("list_presets", resp), _preset)

    def fetch_preset_characters(self, preset_id: str) -> List[SavedCharacterRecord]:
        resp = self._request(
            "fetch_preset_characters",
            "GET",
            "/rest/v1/saved_characters",
            params={"select": "*", "preset_id": f"eq.{preset_id}"},
            headers=self._headers(),
        )
        return self._rows("fetch_preset_characters", self._json("fetch_preset_characters", resp), _saved_character)

    def create_preset(self, name: str) -> PresetRecord:
        resp = self._request(
            "create_preset",
            "POST",
            "/rest/v1/presets",
            json=[{"name": name}],
            headers=self._headers({"Prefer": "return=representation"}),
        )
        rows = self._rows("create_preset", self._json("create_preset", resp), _preset)
        if not rows:
            raise GatewayError("create_preset", "store returned no row")
        return rows[0]

    def upload_image(self, key: str, data: bytes, content_type: str) -> str:
        self._request(
            "upload_image",
            "POST",
            f"/storage/v1/object/{self._bucket}/{key}",
            data=data,
            headers=self._headers({"Content-Type": content_type}),
        )
        return self.public_url(key)

    def save_characters(self, preset_id: str, rows: Sequence[NewSavedCharacter]) -> None:
        payload = [{"preset_id": preset_id, "name": r.name, "image_url": r.image_url} for r in rows]
        self._request(
            "save_characters",
            "POST",
            "/rest/v1/saved_characters",
            json=payload,
            headers=self._headers({"Prefer": "return=minimal"}),
        )
        emit("debug", "store.characters.saved", f"saved {len(payload)} characters", None, __name__, preset_id=preset_id)


def _required(row: Mapping[str, Any], key: str) -> Any:
    value = row[key]
    if value is None:
        raise ValueError(f"{key} is null")
    return value


def _preset(row: Mapping[str, Any]) -> PresetRecord:
    return PresetRecord(
        id=str(_required(row, "id")),
        name=str(_required(row, "name")),
        created_at=str(_required(row, "created_at")),
    )


def _saved_character(row: Mapping[str, Any]) -> SavedCharacterRecord:
    return SavedCharacterRecord(
        id=str(_required(row, "id")),
        preset_id=str(_required(row, "preset_id")),
        name=str(_required(row, "name")),
        image_url=str(_required(row, "image_url")),
    )
