"""
Shared fixtures for integration tests.

Requires PostgreSQL reachable at DATABASE_URL.
Migrations are applied once per session and both tables are emptied
before each test.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import run_migrations
from src.config.settings import get_settings


@pytest.fixture(scope="session")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for integration tests."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean members and admins tables before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM members")
        conn.execute("DELETE FROM admins")
        conn.commit()
    yield
