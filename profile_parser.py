"""Extraction of podcast profile records from catalog search responses.

The search/groups endpoint nests resources at varying depths: inside
``results.groups[].data[]``, inside ``resources``/``included`` side-car
collections, and occasionally as a flat top-level ``data`` array. Rather than
chasing that layout, the parser walks the whole document and treats every
object carrying an ``attributes`` object as a candidate profile.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from errors import ApiError
from models import ProfileRecord

LOGGER = logging.getLogger(__name__)

_ERROR_TEXT_FIELDS = ("detail", "title", "message")
_FALLBACK_ERROR_MESSAGE = "provider returned an error response"


def parse_profiles(document: Any, query: str) -> list[ProfileRecord]:
    """Return unique profiles in depth-first discovery order.

    Raises:
        ApiError: the document carries a non-empty ``errors`` array.
    """
    _raise_for_api_errors(document)

    seen_urls: set[str] = set()
    profiles: list[ProfileRecord] = []

    for attributes in iter_candidates(document):
        url = attributes.get("url")
        if not isinstance(url, str) or not url or url in seen_urls:
            continue

        seen_urls.add(url)
        profiles.append(
            ProfileRecord(
                author_name=_str_or_empty(attributes.get("artistName")),
                profile_title=_str_or_empty(attributes.get("name")),
                query=query,
                url=url,
            )
        )

    LOGGER.debug("Parsed %s profile(s) for query %r", len(profiles), query)
    return profiles


def iter_candidates(document: Any) -> Iterator[dict[str, Any]]:
    """Yield every ``attributes`` object in pre-order, depth-first.

    Uses an explicit stack so arbitrarily deep responses cannot hit the
    recursion limit. Children are pushed in reverse to keep document order.
    """
    stack: list[Any] = [document]

    while stack:
        node = stack.pop()

        if isinstance(node, dict):
            attributes = node.get("attributes")
            if isinstance(attributes, dict):
                yield attributes
            stack.extend(reversed([v for v in node.values() if isinstance(v, (dict, list))]))
        elif isinstance(node, list):
            stack.extend(reversed([v for v in node if isinstance(v, (dict, list))]))


def _raise_for_api_errors(document: Any) -> None:
    if not isinstance(document, dict):
        return

    errors = document.get("errors")
    if not isinstance(errors, list) or not errors:
        return

    messages = [text for text in (_error_text(entry) for entry in errors) if text]
    raise ApiError("; ".join(messages) or _FALLBACK_ERROR_MESSAGE)


def _error_text(entry: Any) -> str:
    if not isinstance(entry, dict):
        return ""
    for field in _ERROR_TEXT_FIELDS:
        value = entry.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _str_or_empty(value: Any) -> str:
    return value if isinstance(value, str) else ""
