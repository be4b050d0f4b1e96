"""
fleetwatch.store
================

An in-memory registry of fleet rows, keyed by table and row id.

Rows are plain dicts shaped like the hosted database's tables, which is
exactly what the classifier and aggregator consume.  The module is
stdlib-only so pages and tests can run without a database; see
:pymod:`fleetwatch.store_db` for the SQLite-backed twin.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, List

TABLES = (
    "partners",
    "vehicles",
    "vehicle_documents",
    "compliance_requirements",
    "claims",
)


def new_id() -> str:
    """Fresh row id for rows that arrive without one."""
    return uuid.uuid4().hex


class FleetStore:
    """
    Dictionary-backed row store.

    Example
    -------
    >>> st = FleetStore()
    >>> vid = st.add("vehicles", {"id": "v1", "make": "Toyota"})
    >>> st.get("vehicles", vid)["make"]
    'Toyota'
    """

    def __init__(self) -> None:
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {t: {} for t in TABLES}

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _table(self, table: str) -> Dict[str, Dict[str, Any]]:
        try:
            return self._tables[table]
        except KeyError:
            raise KeyError(f"unknown table {table!r}") from None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def add(self, table: str, row: Dict[str, Any]) -> str:
        """Insert or overwrite a row; returns its id."""
        rows = self._table(table)
        row = dict(row)
        row_id = str(row.get("id") or new_id())
        row["id"] = row_id
        rows[row_id] = row
        return row_id

    def get(self, table: str, row_id: str) -> Dict[str, Any]:
        """Retrieve by id (raise KeyError if not present)."""
        return dict(self._table(table)[row_id])

    def rows(self, table: str) -> List[Dict[str, Any]]:
        """Every row of *table*, in insertion order."""
        return [dict(r) for r in self._table(table).values()]

    def find_by(self, table: str, **match: Any) -> List[Dict[str, Any]]:
        """Rows whose columns equal every keyword given."""
        return [r for r in self.rows(table) if all(r.get(k) == v for k, v in match.items())]

    def clear(self) -> None:
        for rows in self._tables.values():
            rows.clear()

    # ------------------------------------------------------------------
    # Dunder helpers for convenience
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return sum(len(rows) for rows in self._tables.values())
