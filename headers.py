"""Request header assembly for the Apple Podcasts catalog API."""

from __future__ import annotations

import json
import logging
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from config import Settings
from errors import ConfigurationError

LOGGER = logging.getLogger(__name__)

# Browser-like defaults; the catalog API rejects requests that do not look
# like they come from podcasts.apple.com.
_STATIC_HEADERS: dict[str, str] = {
    "accept": "*/*",
    "accept-language": "en-US,en;q=0.9,ru;q=0.8,uk;q=0.7",
    "cookie": "geo=UA",
    "origin": "https://podcasts.apple.com",
    "priority": "u=1, i",
    "referer": "https://podcasts.apple.com/",
    "sec-ch-ua": '"Chromium";v="142", "Google Chrome";v="142", "Not_A Brand";v="99"',
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": '"Windows"',
    "sec-fetch-dest": "empty",
    "sec-fetch-mode": "cors",
    "sec-fetch-site": "same-site",
}


def build_authorization_value(raw: Any) -> str:
    """Return a Bearer credential, or "" when nothing usable was supplied."""
    if not isinstance(raw, str) or not raw.strip():
        return ""

    trimmed = raw.strip()
    if trimmed.lower().startswith("bearer"):
        return trimmed
    return f"Bearer {trimmed}"


def load_header_overrides(path: Path) -> dict[str, Any]:
    """Read optional header overrides from a JSON object on disk.

    A missing file, unreadable file, invalid JSON or any non-object document
    all yield an empty mapping.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        LOGGER.debug("No header overrides file at %s", path)
        return {}
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.warning("Could not read header overrides from %s: %s", path, exc)
        return {}

    try:
        parsed = json.loads(raw)
    except JSONDecodeError as exc:
        LOGGER.warning("Ignoring header overrides in %s: invalid JSON (%s)", path, exc)
        return {}

    if not isinstance(parsed, dict):
        LOGGER.warning("Ignoring header overrides in %s: expected a JSON object", path)
        return {}

    return parsed


def default_headers(settings: Settings) -> dict[str, str]:
    headers = dict(_STATIC_HEADERS)
    headers["authorization"] = build_authorization_value(settings.apple_authorization)
    headers["user-agent"] = settings.user_agent
    return headers


def build_request_headers(overrides: dict[str, Any] | None, settings: Settings) -> dict[str, str]:
    """Merge overrides onto the defaults and drop empty entries.

    Override keys are lower-cased; only string values that are non-blank after
    trimming are applied.
    """
    headers = default_headers(settings)

    for key, value in (overrides or {}).items():
        if isinstance(value, str) and value.strip():
            headers[str(key).lower()] = value.strip()

    return {key: value for key, value in headers.items() if value != ""}


def validate_auth_headers(headers: dict[str, str]) -> None:
    if not headers.get("authorization"):
        raise ConfigurationError(
            "authorization (Bearer token) is required. "
            "Supply APPLE_AUTHORIZATION env var or data/headers.json"
        )
