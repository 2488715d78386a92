import pytest

from guessboard.core.config import STORE_LOCAL, STORE_SUPABASE, ConfigError, load_database_url, load_settings
from guessboard.main import create_app


class TestLoadSettings:
    def test_hosted_store_requires_url_and_key(self):
        with pytest.raises(ConfigError):
            load_settings({})
        with pytest.raises(ConfigError):
            load_settings({"BOARD_STORE_URL": "https://proj.supabase.co"})
        with pytest.raises(ConfigError):
            load_settings({"BOARD_STORE_KEY": "k"})

    def test_hosted_store_defaults(self):
        s = load_settings({"BOARD_STORE_URL": "https://proj.supabase.co/", "BOARD_STORE_KEY": "k"})
        assert s.board_store == STORE_SUPABASE
        assert s.board_store_url == "https://proj.supabase.co"
        assert s.board_store_bucket == "board-images"
        assert s.board_store_timeout == 10.0

    def test_local_store_needs_no_secrets(self):
        s = load_settings({"BOARD_STORE": "local", "STORAGE_ROOT": "/tmp/boards"})
        assert s.board_store == STORE_LOCAL
        assert s.storage_root == "/tmp/boards"

    def test_unknown_store_rejected(self):
        with pytest.raises(ConfigError):
            load_settings({"BOARD_STORE": "ftp"})

    @pytest.mark.parametrize("raw", ["abc", "0", "-3"])
    def test_bad_timeout_rejected(self, raw):
        with pytest.raises(ConfigError):
            load_settings({"BOARD_STORE": "local", "BOARD_STORE_TIMEOUT": raw})

    @pytest.mark.parametrize("var, raw", [("GAME_IDLE_TTL", "never"), ("GAME_IDLE_TTL", "0"), ("MAX_GAMES", "1.5"), ("MAX_GAMES", "-1")])
    def test_bad_session_limits_rejected(self, var, raw):
        with pytest.raises(ConfigError):
            load_settings({"BOARD_STORE": "local", var: raw})

    def test_session_limits(self):
        s = load_settings({"BOARD_STORE": "local", "GAME_IDLE_TTL": "90", "MAX_GAMES": "7"})
        assert (s.game_idle_ttl, s.max_games) == (90.0, 7)
        d = load_settings({"BOARD_STORE": "local"})
        assert (d.game_idle_ttl, d.max_games) == (3600.0, 500)

    def test_database_url_needs_no_store_secrets(self):
        assert load_database_url({}) == "sqlite:///./data/app.db"
        assert load_database_url({"DATABASE_URL": "sqlite:////tmp/x.db"}) == "sqlite:////tmp/x.db"

    def test_timeout_parsed(self):
        s = load_settings({"BOARD_STORE": "local", "BOARD_STORE_TIMEOUT": "2.5"})
        assert s.board_store_timeout == 2.5


def test_app_refuses_to_start_without_secrets(monkeypatch):
    for var in ("BOARD_STORE", "BOARD_STORE_URL", "BOARD_STORE_KEY"):
        monkeypatch.delenv(var, raising=False)
    with pytest.raises(ConfigError):
        create_app()
