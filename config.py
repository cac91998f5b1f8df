"""Run-level configuration resolved once from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from errors import ConfigurationError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/142.0.0.0 Safari/537.36"
)
DEFAULT_DATA_DIR = Path("data")


@dataclass(frozen=True, slots=True)
class Settings:
    """Everything the pipeline needs, passed explicitly to each component."""

    apple_authorization: str = ""
    user_agent: str = DEFAULT_USER_AGENT
    data_dir: Path = DEFAULT_DATA_DIR
    use_relay: bool = False
    relay_api_key: str = ""
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "postgres"
    db_password: str = ""
    db_name: str = "scrapers"
    db_pool_max: int = 2
    request_timeout: int = 30

    @property
    def headers_file(self) -> Path:
        return self.data_dir / "headers.json"

    def db_params(self) -> dict[str, object]:
        """Keyword arguments for psycopg2.connect / the connection pool."""
        return {
            "host": self.db_host,
            "port": self.db_port,
            "user": self.db_user,
            "password": self.db_password,
            "dbname": self.db_name,
        }


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from environment variables (os.environ by default).

    Only the literal string "true" (any case) enables the relay.
    """
    env = os.environ if environ is None else environ

    return Settings(
        apple_authorization=env.get("APPLE_AUTHORIZATION", ""),
        user_agent=env.get("USER_AGENT") or DEFAULT_USER_AGENT,
        data_dir=Path(env["DATA_DIR"]) if env.get("DATA_DIR") else DEFAULT_DATA_DIR,
        use_relay=env.get("SCRAPE_NINJA_ENABLED", "").strip().lower() == "true",
        relay_api_key=env.get("SCRAPE_NINJA_API_KEY", "").strip(),
        db_host=env.get("DB_HOST") or "localhost",
        db_port=_as_int(env, "DB_PORT", 5432),
        db_user=env.get("DB_USER") or "postgres",
        db_password=env.get("DB_PASSWORD", ""),
        db_name=env.get("DB_NAME") or "scrapers",
        db_pool_max=_as_int(env, "DB_POOL_MAX", 2),
        request_timeout=_as_int(env, "REQUEST_TIMEOUT_SECONDS", 30),
    )


def _as_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got {value}")
    return value
