"""PostgreSQL query source and profile sink."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import psycopg2
from psycopg2.extensions import connection as PgConnection
from psycopg2.pool import SimpleConnectionPool

from config import Settings
from errors import PersistenceError
from models import ProfileRecord

FETCH_QUERIES_SQL = "select query from apple_podcasts.not_scraped_queries_vw"
INSERT_SEARCH_SQL = (
    "insert into apple_podcasts.searches(author_name, profile_title, query, url) "
    "values (%s, %s, %s, %s)"
)

LOGGER = logging.getLogger(__name__)


def create_pool(settings: Settings) -> SimpleConnectionPool:
    """Open the run's connection pool. Failures here are fatal to the run."""
    LOGGER.info(
        "Connecting to PostgreSQL host=%s port=%s db=%s",
        settings.db_host,
        settings.db_port,
        settings.db_name,
    )
    return SimpleConnectionPool(1, settings.db_pool_max, **settings.db_params())


@contextmanager
def borrowed_connection(pool: SimpleConnectionPool) -> Iterator[PgConnection]:
    conn = pool.getconn()
    try:
        yield conn
    finally:
        pool.putconn(conn)


@contextmanager
def transaction(pool: SimpleConnectionPool) -> Iterator[PgConnection]:
    """Commit on clean exit, roll back on any error; always release the connection."""
    with borrowed_connection(pool) as conn:
        try:
            yield conn
            conn.commit()
        except BaseException:
            conn.rollback()
            raise


def load_queries(pool: SimpleConnectionPool) -> list[str]:
    """Return pending search terms, trimmed, blanks dropped, order preserved."""
    with borrowed_connection(pool) as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(FETCH_QUERIES_SQL)
                rows = cur.fetchall()
        finally:
            # End the read-only transaction so the connection goes back idle.
            conn.rollback()

    queries: list[str] = []
    for row in rows:
        value = row[0] if row else None
        if isinstance(value, str) and value.strip():
            queries.append(value.strip())
    return queries


def save_profiles(pool: SimpleConnectionPool, profiles: list[ProfileRecord]) -> int:
    """Insert all profiles for one query atomically and return the row count.

    Raises:
        PersistenceError: any insert failed; nothing from this batch is kept.
    """
    if not profiles:
        return 0

    try:
        with transaction(pool) as conn:
            with conn.cursor() as cur:
                for profile in profiles:
                    cur.execute(
                        INSERT_SEARCH_SQL,
                        (profile.author_name, profile.profile_title, profile.query, profile.url),
                    )
    except psycopg2.Error as exc:
        raise PersistenceError(f"Failed to save {len(profiles)} profile(s): {exc}") from exc

    return len(profiles)
