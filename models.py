"""Shared typed models for the pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class ProfileRecord:
    """Normalized podcast profile extracted from one search response."""

    author_name: str
    profile_title: str
    query: str
    url: str


class QueryStatus(str, Enum):
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class QueryOutcome:
    """Terminal state of one query after a pipeline pass."""

    query: str
    status: QueryStatus
    saved: int = 0
    error: str | None = None
