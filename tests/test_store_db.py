"""
tests/test_store_db.py
======================

Integration-style tests for the SQLite-backed row store.

These tests mirror `test_store.py` but use DBFleetStore (on an in-memory
engine, see ``conftest.py``) to ensure persistence and API parity with
the in-memory version.
"""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from fleetwatch.db import SessionLocal, model_for, upsert_row
from fleetwatch.store_db import DBFleetStore


def test_add_and_get(db_store):
    db_store.add("vehicles", {"id": "v1", "make": "Toyota", "mot_expiry": date(2024, 5, 20), "mileage": 1200})
    row = db_store.get("vehicles", "v1")
    assert row["make"] == "Toyota"
    assert row["mot_expiry"] == date(2024, 5, 20)
    assert row["mileage"] == 1200
    assert row["insurance_expiry"] is None


def test_iso_date_strings_are_stored_as_dates(db_store):
    db_store.add("vehicle_documents", {"id": "d1", "vehicle_id": "v1", "type": "mot", "expiry_date": "2024-06-01"})
    assert db_store.get("vehicle_documents", "d1")["expiry_date"] == date(2024, 6, 1)


def test_add_generates_ids_and_defaults(db_store):
    row_id = db_store.add("claims", {"partner_id": "p1", "attachments": ["a.jpg", "b.jpg"]})
    claim = db_store.get("claims", row_id)
    assert claim["status"] == "open"
    assert claim["attachments"] == ["a.jpg", "b.jpg"]


def test_upsert_updates_existing_row(db_store):
    db_store.add("partners", {"id": "p1", "business_name": "Old Name"})
    db_store.add("partners", {"id": "p1", "business_name": "New Name"})
    assert db_store.get("partners", "p1")["business_name"] == "New Name"
    assert len(db_store.rows("partners")) == 1


def test_unknown_row_and_table_raise_keyerror(db_store):
    with pytest.raises(KeyError):
        db_store.get("vehicles", "nope")
    with pytest.raises(KeyError):
        db_store.add("drivers", {"id": "d1"})
    with pytest.raises(KeyError):
        model_for("drivers")


def test_find_by(db_store):
    db_store.add("vehicles", {"id": "v1", "partner_id": "p1", "make": "Toyota"})
    db_store.add("vehicles", {"id": "v2", "partner_id": "p2", "make": "Toyota"})
    db_store.add("vehicles", {"id": "v3", "partner_id": "p1", "make": "Ford"})
    assert [v["id"] for v in db_store.find_by("vehicles", partner_id="p1", make="Toyota")] == ["v1"]


def test_len_and_clear(db_store):
    db_store.add("partners", {"id": "p1"})
    db_store.add("vehicles", {"id": "v1", "partner_id": "p1"})
    assert len(db_store) == 2
    db_store.clear()
    assert len(db_store) == 0


def test_persistence_across_sessions(memory_engine):
    # write in first session
    with DBFleetStore(SessionLocal(memory_engine)) as store:
        store.add("compliance_requirements", {"id": "c1", "name": "DBS checks", "next_review": date(2024, 7, 1)})

    # read in a brand-new session
    with DBFleetStore(SessionLocal(memory_engine)) as store2:
        fetched = store2.get("compliance_requirements", "c1")
        assert fetched["name"] == "DBS checks"
        assert fetched["category"] == "General"
        assert fetched["next_review"] == date(2024, 7, 1)


def test_failed_commit_rolls_back():
    session = MagicMock()
    session.commit.side_effect = RuntimeError("disk full")
    with pytest.raises(RuntimeError):
        upsert_row(session, "partners", {"id": "p1"})
    session.rollback.assert_called_once()


def test_session_usable_after_failed_commit(db_store):
    with patch.object(db_store._session, "commit", side_effect=RuntimeError("disk full")):
        with pytest.raises(RuntimeError):
            db_store.add("partners", {"id": "p1"})
    db_store.add("partners", {"id": "p2", "business_name": "Northside Cars"})
    assert [p["id"] for p in db_store.rows("partners")] == ["p2"]
