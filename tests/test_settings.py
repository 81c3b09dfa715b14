"""Functional tests for the settings dictionary loader."""

from bakery_hub.handlers.settings import load_settings


def _by_name(settings):
    return {item["name"]: item for item in settings}


class TestLoadSettings:
    def test_every_setting_is_listed(self):
        settings = _by_name(load_settings())

        for name in (
            "BAKERY_SESSION_INACTIVITY_TIMEOUT",
            "BAKERY_SESSION_ACTIVITY_THROTTLE",
            "BAKERY_SESSION_ACTIVE_POLL_INTERVAL",
            "BAKERY_SESSION_HEARTBEAT_INTERVAL",
            "BAKERY_PRESENCE_WINDOW",
            "BAKERY_PRESENCE_RETENTION",
            "BAKERY_DB_URL",
            "BAKERY_HOSTED_URL",
            "BAKERY_HOSTED_API_KEY",
            "BAKERY_PORT",
            "BAKERY_COOKIE_NAME",
            "BAKERY_LOGIN_URL",
        ):
            assert name in settings

    def test_defaults_and_categories(self):
        settings = _by_name(load_settings())

        timeout = settings["BAKERY_SESSION_INACTIVITY_TIMEOUT"]
        assert timeout["value"] == "1800"
        assert timeout["category"] == "session"
        assert settings["BAKERY_HOSTED_URL"]["value"].startswith("(not set")

    def test_env_value_wins(self, monkeypatch):
        monkeypatch.setenv("BAKERY_SESSION_INACTIVITY_TIMEOUT", "900")
        assert _by_name(load_settings())["BAKERY_SESSION_INACTIVITY_TIMEOUT"]["value"] == "900"

    def test_secret_is_masked(self, monkeypatch):
        monkeypatch.setenv("BAKERY_HOSTED_API_KEY", "anon-key")
        assert _by_name(load_settings())["BAKERY_HOSTED_API_KEY"]["value"] == "********"

    def test_missing_file_returns_empty(self, tmp_path):
        assert load_settings(str(tmp_path / "missing.yml")) == []

    def test_custom_dictionary(self, tmp_path):
        path = tmp_path / "settings.yml"
        path.write_text("misc:\n  - name: BAKERY_EXTRA\n    default: 3\n    description: Extra\nnot_a_list: 1\n")

        assert load_settings(str(path)) == [
            {"category": "misc", "name": "BAKERY_EXTRA", "value": "3", "description": "Extra"},
        ]
