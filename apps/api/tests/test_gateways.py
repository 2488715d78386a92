"""Board store adapters: local (sqlite + filesystem) and hosted (Supabase over HTTP)."""

import threading
from unittest.mock import MagicMock, patch

import pytest
import requests

from guessboard.core.config import STORE_SUPABASE, ConfigError, Settings
from guessboard.modules.presets.gateway.base import GatewayError, NewSavedCharacter
from guessboard.modules.presets.gateway.local import LocalGateway
from guessboard.modules.presets.gateway.registry import get_gateway
from guessboard.modules.presets import service
from guessboard.modules.presets.gateway.supabase import SupabaseGateway


class TestLocalGateway:
    def test_presets_listed_newest_first(self, local_gateway):
        stamps = ["2026-01-01T00:00:00Z", "2026-01-02T00:00:00Z", "2026-01-03T00:00:00Z"]
        with patch("guessboard.modules.presets.gateway.local.now_iso", side_effect=stamps):
            for name in ["old", "mid", "new"]:
                local_gateway.create_preset(name)
        assert [p.name for p in local_gateway.list_presets()] == ["new", "mid", "old"]

    def test_characters_round_trip_in_order(self, local_gateway):
        preset = local_gateway.create_preset("Friends")
        rows = [NewSavedCharacter(name=f"N{i}", image_url=f"https://cdn.example/{i}.png") for i in range(5)]
        local_gateway.save_characters(preset.id, rows)

        saved = local_gateway.fetch_preset_characters(preset.id)
        assert [s.name for s in saved] == [f"N{i}" for i in range(5)]
        assert all(s.preset_id == preset.id for s in saved)
        assert len({s.id for s in saved}) == 5

    def test_unknown_preset_has_no_characters(self, local_gateway):
        assert local_gateway.fetch_preset_characters("nope") == []

    def test_save_for_unknown_preset_fails(self, local_gateway):
        with pytest.raises(GatewayError):
            local_gateway.save_characters("nope", [NewSavedCharacter(name="A", image_url="x")])

    def test_upload_writes_blob_and_returns_public_url(self, local_gateway):
        url = local_gateway.upload_image("P1/c1.png", b"\x89PNG", "image/png")
        assert url == "http://testserver/storage/P1/c1.png"
        assert (local_gateway.storage_root / "P1" / "c1.png").read_bytes() == b"\x89PNG"

    def test_upload_refuses_keys_outside_root(self, local_gateway):
        with pytest.raises(GatewayError):
            local_gateway.upload_image("../escape.png", b"x", "image/png")


def _response(status: int = 200, payload=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    resp.text = "" if payload is None else str(payload)
    return resp


@pytest.fixture
def http() -> MagicMock:
    return MagicMock(spec=requests.Session)


@pytest.fixture
def supabase(http) -> SupabaseGateway:
    return SupabaseGateway(url="https://proj.supabase.co/", key="secret", timeout=3, session_factory=lambda: http)


class TestSupabaseGateway:
    def test_list_presets_orders_newest_first(self, supabase, http):
        http.request.return_value = _response(
            payload=[{"id": "p2", "name": "B", "created_at": "2026-01-02"}, {"id": "p1", "name": "A", "created_at": "2026-01-01"}]
        )
        out = supabase.list_presets()

        assert [p.id for p in out] == ["p2", "p1"]
        method, url = http.request.call_args.args
        kwargs = http.request.call_args.kwargs
        assert (method, url) == ("GET", "https://proj.supabase.co/rest/v1/presets")
        assert kwargs["params"]["order"] == "created_at.desc"
        assert kwargs["headers"]["apikey"] == "secret"
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["timeout"] == 3

    def test_fetch_filters_by_preset(self, supabase, http):
        http.request.return_value = _response(
            payload=[{"id": "s1", "preset_id": "p1", "name": "Ann", "image_url": "https://cdn/a.png"}]
        )
        out = supabase.fetch_preset_characters("p1")
        assert out[0].name == "Ann"
        assert http.request.call_args.kwargs["params"]["preset_id"] == "eq.p1"

    def test_create_preset_asks_for_representation(self, supabase, http):
        http.request.return_value = _response(payload=[{"id": "p9", "name": "Friends", "created_at": "2026-01-01"}])
        preset = supabase.create_preset("Friends")
        assert preset.id == "p9"
        kwargs = http.request.call_args.kwargs
        assert kwargs["json"] == [{"name": "Friends"}]
        assert kwargs["headers"]["Prefer"] == "return=representation"

    def test_create_preset_without_row_fails(self, supabase, http):
        http.request.return_value = _response(payload=[])
        with pytest.raises(GatewayError):
            supabase.create_preset("Friends")

    def test_upload_returns_public_url(self, supabase, http):
        http.request.return_value = _response(payload={"Key": "board-images/p1/c1.png"})
        url = supabase.upload_image("p1/c1.png", b"png", "image/png")
        assert url == "https://proj.supabase.co/storage/v1/object/public/board-images/p1/c1.png"
        method, target = http.request.call_args.args
        assert (method, target) == ("POST", "https://proj.supabase.co/storage/v1/object/board-images/p1/c1.png")
        assert http.request.call_args.kwargs["headers"]["Content-Type"] == "image/png"

    def test_save_characters_is_one_batch(self, supabase, http):
        http.request.return_value = _response(status=201)
        supabase.save_characters("p1", [NewSavedCharacter("A", "u1"), NewSavedCharacter("B", "u2")])
        http.request.assert_called_once()
        assert http.request.call_args.kwargs["json"] == [
            {"preset_id": "p1", "name": "A", "image_url": "u1"},
            {"preset_id": "p1", "name": "B", "image_url": "u2"},
        ]

    def test_http_error_status_raises(self, supabase, http):
        http.request.return_value = _response(status=500, payload={"message": "boom"})
        with pytest.raises(GatewayError) as exc:
            supabase.list_presets()
        assert exc.value.details["status_code"] == 500

    def test_timeout_raises(self, supabase, http):
        http.request.side_effect = requests.Timeout("slow")
        with pytest.raises(GatewayError) as exc:
            supabase.fetch_preset_characters("p1")
        assert "timed out" in str(exc.value)

    def test_network_error_raises(self, supabase, http):
        http.request.side_effect = requests.ConnectionError("down")
        with pytest.raises(GatewayError):
            supabase.create_preset("x")

    @pytest.mark.parametrize(
        "payload",
        [
            [{"id": "p1"}],
            [{"id": "p1", "name": None, "created_at": "2026-01-01"}],
            {"message": "not a list"},
            [None],
        ],
    )
    def test_malformed_preset_rows_raise(self, supabase, http, payload):
        http.request.return_value = _response(payload=payload)
        with pytest.raises(GatewayError) as exc:
            supabase.list_presets()
        assert exc.value.operation == "list_presets"
        assert str(exc.value) == "list_presets: unexpected row shape"

    def test_malformed_preset_list_degrades_to_empty(self, supabase, http):
        http.request.return_value = _response(payload=[{"id": "p1"}])
        assert service.list_presets(supabase) == []

    def test_null_image_url_fails_the_load(self, supabase, http):
        http.request.return_value = _response(
            payload=[{"id": "s1", "preset_id": "p1", "name": "Ann", "image_url": None}]
        )
        with pytest.raises(GatewayError):
            supabase.fetch_preset_characters("p1")
        assert service.load_preset(supabase, "p1") is None

    def test_created_row_missing_id_raises(self, supabase, http):
        http.request.return_value = _response(payload=[{"name": "Friends"}])
        with pytest.raises(GatewayError):
            supabase.create_preset("Friends")

    def test_each_thread_gets_its_own_session(self):
        made = []

        def factory():
            s = MagicMock(spec=requests.Session)
            s.request.return_value = _response(payload=[])
            made.append(s)
            return s

        gw = SupabaseGateway(url="https://proj.supabase.co", key="k", session_factory=factory)
        gw.list_presets()
        gw.list_presets()
        worker = threading.Thread(target=gw.list_presets)
        worker.start()
        worker.join()

        assert len(made) == 2
        assert made[0].request.call_count == 2
        assert made[1].request.call_count == 1


class TestRegistry:
    def test_local_store(self, local_settings):
        assert isinstance(get_gateway(local_settings), LocalGateway)

    def test_hosted_store(self):
        settings = Settings(board_store=STORE_SUPABASE, board_store_url="https://proj.supabase.co", board_store_key="k")
        assert isinstance(get_gateway(settings), SupabaseGateway)

    def test_hosted_store_needs_secrets(self):
        with pytest.raises(ConfigError):
            get_gateway(Settings(board_store=STORE_SUPABASE))
