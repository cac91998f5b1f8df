"""Exception taxonomy for the podcast search scraper."""

from __future__ import annotations


class ScraperError(Exception):
    """Base class for every error raised by the scraper itself."""


class ConfigurationError(ScraperError):
    """Missing or invalid run-level configuration (fatal for the whole run)."""


class TransportError(ScraperError):
    """The provider or relay request failed or returned an unusable body."""


class ApiError(ScraperError):
    """The provider answered with a structured ``errors`` payload."""


class PersistenceError(ScraperError):
    """A database write failed; the query's transaction was rolled back."""
