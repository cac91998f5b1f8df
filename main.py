"""CLI entrypoint for the Apple Podcasts search scraper."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

from dotenv import load_dotenv
from psycopg2.pool import SimpleConnectionPool

from config import Settings, load_settings
from errors import ConfigurationError, ScraperError
from headers import build_request_headers, load_header_overrides, validate_auth_headers
from models import QueryOutcome, QueryStatus
from pg_store import create_pool, load_queries, save_profiles
from podcasts_client import fetch_search_results
from profile_parser import parse_profiles


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {raw!r}") from exc
    if value < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(
        description="Search Apple Podcasts for pending queries and store the profiles found"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and parse every query, but do not write to the database",
    )
    parser.add_argument(
        "--limit",
        type=_positive_int,
        default=None,
        metavar="N",
        help="Process at most N pending queries",
    )
    parser.add_argument(
        "--relay",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Force the ScrapeNinja relay on or off (default: SCRAPE_NINJA_ENABLED)",
    )
    return parser.parse_args(argv)


def process_query(
    query: str,
    headers: dict[str, str],
    settings: Settings,
    pool: SimpleConnectionPool,
    dry_run: bool = False,
) -> QueryOutcome:
    """Fetch, parse and persist one query. Errors propagate to the caller."""
    document = fetch_search_results(query, headers, settings)
    profiles = parse_profiles(document, query)

    if not profiles:
        logging.warning("No profiles returned for query: %s", query)
        return QueryOutcome(query=query, status=QueryStatus.SKIPPED)

    if dry_run:
        logging.info("[dry-run] Would save %s profile(s) for query %r", len(profiles), query)
        return QueryOutcome(query=query, status=QueryStatus.DONE, saved=len(profiles))

    inserted = save_profiles(pool, profiles)
    logging.info(
        'Saved %s profile%s for query "%s".', inserted, "" if inserted == 1 else "s", query
    )
    return QueryOutcome(query=query, status=QueryStatus.DONE, saved=inserted)


def run(settings: Settings, dry_run: bool = False, limit: int | None = None) -> list[QueryOutcome]:
    """Run one pass over every pending query.

    Header validation and database setup happen before the loop and abort the
    run; anything raised while handling a single query only fails that query.
    """
    if limit is not None and limit < 1:
        raise ConfigurationError(f"limit must be a positive integer, got {limit}")

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    overrides = load_header_overrides(settings.headers_file)
    headers = build_request_headers(overrides, settings)
    validate_auth_headers(headers)
    if settings.use_relay and not settings.relay_api_key:
        raise ConfigurationError(
            "SCRAPE_NINJA_API_KEY is required when SCRAPE_NINJA_ENABLED is true."
        )

    logging.info(
        "Transport: %s", "ScrapeNinja relay" if settings.use_relay else "direct"
    )

    pool = create_pool(settings)
    outcomes: list[QueryOutcome] = []
    try:
        queries = load_queries(pool)

        if not queries:
            logging.warning("No queries found to process.")
            return outcomes

        if limit is not None:
            queries = queries[:limit]

        logging.info(
            "Processing %s quer%s.", len(queries), "y" if len(queries) == 1 else "ies"
        )

        for query in queries:
            try:
                outcome = process_query(query, headers, settings, pool, dry_run=dry_run)
            except ScraperError as exc:
                logging.error('Failed to process query "%s": %s', query, exc)
                outcome = QueryOutcome(query=query, status=QueryStatus.FAILED, error=str(exc))
            except Exception as exc:  # per-query boundary
                logging.exception('Failed to process query "%s": %s', query, exc)
                outcome = QueryOutcome(query=query, status=QueryStatus.FAILED, error=str(exc))
            outcomes.append(outcome)
    finally:
        pool.closeall()

    logging.info(
        "Run complete. saved=%s skipped=%s failed=%s",
        sum(o.saved for o in outcomes if o.status is QueryStatus.DONE),
        sum(1 for o in outcomes if o.status is QueryStatus.SKIPPED),
        sum(1 for o in outcomes if o.status is QueryStatus.FAILED),
    )
    return outcomes


def main(argv: list[str] | None = None) -> int:
    """Initialize config and execute the pipeline; return the process exit code."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)

    try:
        settings = load_settings()
        if args.relay is not None:
            settings = dataclasses.replace(settings, use_relay=args.relay)
        run(settings, dry_run=args.dry_run, limit=args.limit)
    except ScraperError as exc:
        logging.error("Fatal error while running scraper: %s", exc)
        return 1
    except Exception as exc:
        logging.exception("Fatal error while running scraper: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
