"""
api.deps
========

Shared FastAPI dependencies: a per-request row store, settings and the
clock.
"""

from datetime import datetime, timezone
from functools import lru_cache
from typing import Generator

from fleetwatch.db import SessionLocal, create_all
from fleetwatch.settings import settings
from fleetwatch.store_db import DBFleetStore


@lru_cache
def _schema_ready() -> bool:
    create_all()
    return True


def get_store() -> Generator[DBFleetStore, None, None]:
    """DB-backed row store on its own session, closed when the request ends."""
    _schema_ready()
    with DBFleetStore(SessionLocal()) as store:
        yield store


@lru_cache
def get_settings():
    return settings


def get_now() -> datetime:
    return datetime.now(timezone.utc)
