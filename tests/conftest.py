"""
Pytest configuration: make sure `import fleetwatch` and `import api`
work regardless of where pytest is invoked.

It prepends the project root (one directory above *tests/*) to
``sys.path`` **before** any tests are collected, and provides an
in-memory SQLite store for the persistence and API tests.
"""

import sys
from pathlib import Path

import pytest

# /path/to/project/tests -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def memory_engine():
    """Fresh in-memory SQLite engine with every fleet table created."""
    from sqlalchemy.pool import StaticPool
    from sqlmodel import create_engine

    from fleetwatch.db import create_all

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_store(memory_engine):
    from fleetwatch.db import SessionLocal
    from fleetwatch.store_db import DBFleetStore

    with DBFleetStore(SessionLocal(memory_engine)) as store:
        yield store
