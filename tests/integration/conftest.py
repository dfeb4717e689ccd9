import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import close_pool, get_connection, init_pool
from app.database.models import NewLiterature

_SCHEMA = Path(__file__).resolve().parents[2] / "app" / "database" / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "literature_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(_SCHEMA.read_text(encoding="utf-8"))
            conn.commit()
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
def integration_cleanup(integration_pool: None) -> Generator[list[int], None, None]:
    cleanup: list[int] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("DELETE FROM literature WHERE id = ANY(%s)", (cleanup,))
        conn.commit()


@pytest.fixture
def new_literature() -> NewLiterature:
    return NewLiterature(
        original_name="paper.pdf",
        file_path="/app/files/2026/10/abc.pdf",
        file_size=2048,
        file_type="pdf",
        content_length=1200,
    )
