"""
fleetwatch.sources.base
=======================

Shared abstract base class for everything that supplies fleet rows.

Concrete subclasses must implement ``.fetch(table, **filters) -> list[dict]``.
"""

__all__ = ["RowSource", "SourceError", "sync_tables"]

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List

from fleetwatch.settings import SOURCE_TIMEOUT, SOURCE_USER_AGENT
from fleetwatch.store import TABLES

logger = logging.getLogger(__name__)


class SourceError(RuntimeError):
    """Raised when a source cannot deliver rows for a table."""


class RowSource(ABC):
    """
    Abstract base for row sources.

    Concrete subclasses implement `.fetch(table, **filters) -> list[dict]`.
    """

    def __init__(self):
        """Initialize with default settings from configuration."""
        self.timeout = SOURCE_TIMEOUT
        self.user_agent = SOURCE_USER_AGENT

    @abstractmethod
    def fetch(self, table: str, **filters: Any) -> List[Dict[str, Any]]:
        """Return every row of *table* whose columns equal *filters*."""


def sync_tables(source: RowSource, store, tables: Iterable[str] = TABLES) -> Dict[str, int]:
    """
    Copy rows from *source* into *store* (anything with ``add(table, row)``).

    Returns the number of rows written per table.  A failing table
    aborts the sync with :class:`SourceError`; tables already copied
    stay copied.
    """
    written: Dict[str, int] = {}
    for table in tables:
        rows = source.fetch(table)
        for row in rows:
            store.add(table, row)
        written[table] = len(rows)
        logger.info(f"Synced {len(rows)} rows into {table}")
    return written
