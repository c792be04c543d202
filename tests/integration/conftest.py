import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from docscan.config.settings import Settings
from docscan.database.connection import apply_schema, close_pool, get_connection, init_pool


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docscan_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        apply_schema()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_category(db_conn: psycopg.Connection[Any]) -> Generator[str, None, None]:
    """A category name unique to the test; its rows and those of derived names are deleted."""
    category = f"Itest{os.getpid()}{id(db_conn) % 100000}"
    yield category
    with db_conn.cursor() as cur:
        cur.execute("DELETE FROM scanned_documents WHERE category LIKE %s", (f"{category}%",))
    db_conn.commit()


@pytest.fixture
def audit_cleanup(db_conn: psycopg.Connection[Any]) -> Generator[list[str], None, None]:
    actors: list[str] = []
    yield actors
    with db_conn.cursor() as cur:
        for actor_id in actors:
            cur.execute("DELETE FROM audit_logs WHERE actor_id = %s", (actor_id,))
    db_conn.commit()
