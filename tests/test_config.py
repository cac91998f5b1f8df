from pathlib import Path

import pytest

from config import DEFAULT_USER_AGENT, load_settings
from errors import ConfigurationError


def test_load_settings_defaults() -> None:
    settings = load_settings({})

    assert settings.apple_authorization == ""
    assert settings.user_agent == DEFAULT_USER_AGENT
    assert settings.use_relay is False
    assert settings.db_port == 5432
    assert settings.data_dir == Path("data")
    assert settings.headers_file == Path("data") / "headers.json"


def test_load_settings_reads_environment(tmp_path: Path) -> None:
    settings = load_settings(
        {
            "APPLE_AUTHORIZATION": "abc",
            "DATA_DIR": str(tmp_path),
            "SCRAPE_NINJA_ENABLED": "TRUE",
            "SCRAPE_NINJA_API_KEY": " key ",
            "DB_HOST": "db.internal",
            "DB_PORT": "6543",
            "DB_NAME": "scrapers_test",
        }
    )

    assert settings.apple_authorization == "abc"
    assert settings.headers_file == tmp_path / "headers.json"
    assert settings.use_relay is True
    assert settings.relay_api_key == "key"
    assert settings.db_params()["host"] == "db.internal"
    assert settings.db_params()["port"] == 6543
    assert settings.db_params()["dbname"] == "scrapers_test"


@pytest.mark.parametrize("flag", ["1", "yes", "on", ""])
def test_relay_enabled_only_by_literal_true(flag: str) -> None:
    assert load_settings({"SCRAPE_NINJA_ENABLED": flag}).use_relay is False


def test_load_settings_rejects_bad_integer() -> None:
    with pytest.raises(ConfigurationError, match="DB_PORT"):
        load_settings({"DB_PORT": "five"})
