"""
tests/test_store.py
===================

Unit tests for fleetwatch.store.FleetStore
"""

import pytest

from fleetwatch.store import TABLES, FleetStore


def _demo_store():
    st = FleetStore()
    st.add("partners", {"id": "p1", "business_name": "Northside Cars"})
    st.add("vehicles", {"id": "v1", "partner_id": "p1", "make": "Toyota"})
    st.add("vehicles", {"id": "v2", "partner_id": "p1", "make": "Ford"})
    st.add("vehicles", {"id": "v3", "partner_id": "p2", "make": "Toyota"})
    return st


def test_add_and_get():
    st = FleetStore()
    row_id = st.add("vehicles", {"id": "v1", "make": "Toyota"})
    assert row_id == "v1"
    assert st.get("vehicles", "v1") == {"id": "v1", "make": "Toyota"}


def test_add_generates_ids():
    st = FleetStore()
    row_id = st.add("claims", {"status": "open"})
    assert row_id
    assert st.get("claims", row_id)["id"] == row_id


def test_add_overwrites_same_id():
    st = _demo_store()
    st.add("vehicles", {"id": "v1", "make": "Lexus"})
    assert st.get("vehicles", "v1")["make"] == "Lexus"
    assert len(st.rows("vehicles")) == 3


def test_unknown_row_and_table_raise_keyerror():
    st = _demo_store()
    with pytest.raises(KeyError):
        st.get("vehicles", "nope")
    with pytest.raises(KeyError):
        st.add("drivers", {"id": "d1"})


def test_rows_are_copies():
    st = _demo_store()
    st.rows("vehicles")[0]["make"] = "changed"
    assert st.get("vehicles", "v1")["make"] == "Toyota"


def test_find_by():
    st = _demo_store()
    toyotas = st.find_by("vehicles", make="Toyota")
    assert [v["id"] for v in toyotas] == ["v1", "v3"]
    assert st.find_by("vehicles", make="Toyota", partner_id="p2") == [st.get("vehicles", "v3")]


def test_len_and_clear():
    st = _demo_store()
    assert len(st) == 4
    st.clear()
    assert len(st) == 0
    assert all(st.rows(t) == [] for t in TABLES)
