"""
Name: Integration Test DB Setup

Responsibilities:
  - Ensure database schema exists before integration tests run
  - Run Alembic migrations once per test session
  - Provide a clean pool-backed environment per test

Notes:
  - Only runs when RUN_INTEGRATION=1
  - Uses DATABASE_URL from environment (see alembic/env.py)
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

RUN_INTEGRATION = os.getenv("RUN_INTEGRATION") == "1"
BACKEND_DIR = Path(__file__).resolve().parents[2]


def pytest_collection_modifyitems(config, items):
    if RUN_INTEGRATION:
        return
    skip = pytest.mark.skip(reason="RUN_INTEGRATION=1 required")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(scope="session")
def migrated_database():
    from alembic import command
    from alembic.config import Config

    cfg = Config(str(BACKEND_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    command.upgrade(cfg, "head")
    yield os.environ["DATABASE_URL"]


@pytest.fixture
def db_pool(migrated_database):
    from app.infrastructure.db.pool import close_pool, init_pool

    pool = init_pool(migrated_database, min_size=1, max_size=4)
    with pool.connection() as conn:
        conn.execute("TRUNCATE driver_offer_stops, driver_offers, audit_events")
        conn.commit()
    yield pool
    close_pool()
