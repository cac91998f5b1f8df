"""Apple Podcasts catalog search client, direct or through the ScrapeNinja relay."""

from __future__ import annotations

import json
import logging
from json import JSONDecodeError
from typing import Any
from urllib.parse import urlencode

import requests

from config import Settings
from errors import ConfigurationError, TransportError

API_URL = "https://amp-api.podcasts.apple.com/v1/catalog/us/search/groups"

SCRAPE_NINJA_ENDPOINT = "https://scrapeninja.p.rapidapi.com/scrape"
SCRAPE_NINJA_HOST = "scrapeninja.p.rapidapi.com"

SNIPPET_MAX_CHARS = 200

LOGGER = logging.getLogger(__name__)

# Order matters to the provider; the term is slotted in before the locale.
_SEARCH_PARAMS_BEFORE_TERM: tuple[tuple[str, str], ...] = (
    ("platform", "web"),
    ("extend", "editorialArtwork,feedUrl"),
    ("extend[podcast-channels]", "availableShowCount"),
    ("extend[podcasts]", "editorialArtwork"),
    ("include[podcast-episodes]", "channel,podcast"),
    ("include[podcasts]", "channel"),
    ("limit", "25"),
    ("groups", "category,channel,episode,show,top"),
    ("with", "entitlements,transcripts"),
    ("types", "podcasts,podcast-channels,podcast-episodes,categories,editorial-items"),
)
_SEARCH_LOCALE = "en-US"


def build_search_url(query: str) -> str:
    """Return the catalog search URL for one free-text term."""
    params = [*_SEARCH_PARAMS_BEFORE_TERM, ("term", query), ("l", _SEARCH_LOCALE)]
    return f"{API_URL}?{urlencode(params)}"


def fetch_search_results(query: str, headers: dict[str, str], settings: Settings) -> Any:
    """Fetch and decode the search response for one query.

    The relay flag in settings decides between a direct GET and a ScrapeNinja
    proxied request; both return the decoded provider document.
    """
    url = build_search_url(query)
    if settings.use_relay:
        return fetch_via_relay(
            url,
            headers,
            api_key=settings.relay_api_key,
            timeout=settings.request_timeout,
        )
    return fetch_direct(url, headers, timeout=settings.request_timeout)


def fetch_direct(url: str, headers: dict[str, str], timeout: int) -> Any:
    LOGGER.debug("GET %s", url)
    try:
        response = requests.get(url, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        raise TransportError(f"Request to {API_URL} failed: {exc}") from exc

    if not response.ok:
        raise TransportError(
            f"Request failed with status {response.status_code}: {_snippet(response.text)}"
        )

    try:
        return response.json()
    except ValueError as exc:
        raise TransportError(f"Provider returned a non-JSON body: {_snippet(response.text)}") from exc


def fetch_via_relay(url: str, headers: dict[str, str], api_key: str, timeout: int) -> Any:
    """Proxy the search GET through ScrapeNinja and unwrap its envelope."""
    if not api_key:
        raise ConfigurationError(
            "SCRAPE_NINJA_API_KEY is required when SCRAPE_NINJA_ENABLED is true."
        )

    relay_headers = {
        "content-type": "application/json",
        "x-rapidapi-key": api_key,
        "x-rapidapi-host": SCRAPE_NINJA_HOST,
    }
    payload = {
        "url": url,
        "method": "GET",
        "headers": headers,
        "autoparse": True,
    }

    LOGGER.debug("POST %s for %s", SCRAPE_NINJA_ENDPOINT, url)
    try:
        response = requests.post(
            SCRAPE_NINJA_ENDPOINT,
            headers=relay_headers,
            json=payload,
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise TransportError(f"ScrapeNinja request failed: {exc}") from exc

    if not response.ok:
        raise TransportError(
            f"ScrapeNinja request failed with status {response.status_code}: "
            f"{_snippet(response.text)}"
        )

    try:
        envelope = response.json()
    except ValueError as exc:
        raise TransportError(
            f"ScrapeNinja returned a non-JSON envelope: {_snippet(response.text)}"
        ) from exc

    return _unwrap_relay_body(envelope)


def _unwrap_relay_body(envelope: Any) -> Any:
    body = envelope.get("body") if isinstance(envelope, dict) else None

    # autoparse usually yields a decoded body, but plain-text responses still
    # arrive as a JSON string.
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except JSONDecodeError as exc:
            raise TransportError(f"ScrapeNinja returned a non-JSON body: {_snippet(body)}") from exc

    if body is None:
        raise TransportError("ScrapeNinja response did not include a body.")

    return body


def _snippet(text: str | None) -> str:
    return (text or "")[:SNIPPET_MAX_CHARS]
