"""
fleetwatch.store_db
===================

SQLite-backed implementation of the :class:`~fleetwatch.store.FleetStore`
public surface.

This adapter wraps the CRUD helpers in :pymod:`fleetwatch.db` so that any
code expecting the in-memory store can switch to a persistent one without
changing its calls.
"""

from __future__ import annotations

from typing import Any, Dict, List

from sqlmodel import Session

from fleetwatch.db import SessionLocal, all_rows, clear_rows, get_row, upsert_row
from fleetwatch.store import TABLES


class DBFleetStore:
    """
    Drop-in replacement backed by SQLite.

    Methods mirror the in-memory FleetStore:
    * add(table, row)
    * get(table, row_id)
    * rows(table) / find_by(table, **match)
    * clear() / len()
    """

    def __init__(self, session: Session | None = None) -> None:
        self._session: Session = session or SessionLocal()

    # ------------------------------------------------------------------ CRUD
    def add(self, table: str, row: Dict[str, Any]) -> str:
        return upsert_row(self._session, table, row)

    def get(self, table: str, row_id: str) -> Dict[str, Any]:
        row = get_row(self._session, table, row_id)
        if row is None:
            raise KeyError(row_id)
        return row

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return all_rows(self._session, table)

    def find_by(self, table: str, **match: Any) -> List[Dict[str, Any]]:
        return [r for r in self.rows(table) if all(r.get(k) == v for k, v in match.items())]

    def clear(self) -> None:
        clear_rows(self._session)

    # ------------------------------------------------------ dunder helpers
    def __len__(self) -> int:
        return sum(len(self.rows(t)) for t in TABLES)

    # ----------------------------------------------------- context manager
    def __enter__(self) -> "DBFleetStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._session.close()
