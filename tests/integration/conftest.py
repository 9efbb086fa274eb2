import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import close_pool, get_connection, init_pool


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "invitations_test")
    return Settings()


def _choose_existing_company_id(db_conn: psycopg.Connection[Any]) -> str:
    with db_conn.cursor() as cur:
        cur.execute("SELECT id FROM companies ORDER BY created_at LIMIT 1")
        row = cur.fetchone()
    if row is None:
        pytest.skip("No companies rows in DB for integration test setup")
    return str(row[0])


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute("SELECT 1")
    except Exception as e:
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
def integration_cleanup() -> Generator[list[tuple[str, Any]], None, None]:
    cleanup: list[tuple[str, Any]] = []
    yield cleanup
    if not cleanup:
        return
    # children first: tokens and apartments reference objects
    order = ["code_export_jobs", "invitation_tokens", "apartments", "objects"]
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table in order:
                for entry_table, row_id in cleanup:
                    if entry_table != table:
                        continue
                    if table == "invitation_tokens":
                        cur.execute(
                            "DELETE FROM invitation_tokens WHERE apartment_id = %s",
                            (row_id,),
                        )
                    else:
                        cur.execute(f"DELETE FROM {table} WHERE id = %s", (row_id,))
        conn.commit()


@pytest.fixture
def seed_building(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, Any]],
) -> dict[str, Any]:
    """Insert a building with three apartments; returns ids and names."""
    company_id = _choose_existing_company_id(db_conn)
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO objects (name, street, zip_code, company_id)
            VALUES (%s, %s, %s, %s)
            RETURNING id
            """,
            ("Integration Court 1", "Integration Court 1", 10115, company_id),
        )
        row = cur.fetchone()
        assert row is not None
        building_id = str(row[0])
        apartment_ids = []
        for name in ("Top 2", "Top 1", "Top 3"):
            cur.execute(
                "INSERT INTO apartments (name, object_id) VALUES (%s, %s) RETURNING id",
                (name, building_id),
            )
            apt_row = cur.fetchone()
            assert apt_row is not None
            apartment_ids.append(str(apt_row[0]))
    db_conn.commit()
    integration_cleanup.append(("objects", building_id))
    for apartment_id in apartment_ids:
        integration_cleanup.append(("apartments", apartment_id))
        integration_cleanup.append(("invitation_tokens", apartment_id))
    return {
        "building_id": building_id,
        "company_id": company_id,
        "apartment_ids": apartment_ids,
    }


@pytest.fixture
def seed_export_job(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, Any]],
    seed_building: dict[str, Any],
) -> int:
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO code_export_jobs (building_ids, status)
            VALUES (%s::uuid[], 'pending')
            RETURNING id
            """,
            ([seed_building["building_id"]],),
        )
        row = cur.fetchone()
        assert row is not None
        job_id = row[0]
    db_conn.commit()
    integration_cleanup.append(("code_export_jobs", job_id))
    return job_id
