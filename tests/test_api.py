"""
Tests for the Fleetwatch HTTP API.

These tests use FastAPI TestClient against an in-memory SQLite store,
with the clock pinned through the ``get_now`` dependency.
"""

from datetime import date, datetime, timezone
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api.deps import get_now, get_store
from api.main import app
from fleetwatch.db import SessionLocal

NOW = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def client(db_store):
    db_store.add("partners", {"id": "p1", "business_name": "Northside Cars"})
    db_store.add("partners", {"id": "p2", "email": "river@fleet.example"})
    db_store.add("vehicles", {"id": "v1", "partner_id": "p1", "make": "Toyota", "model": "Corolla",
                              "next_service_date": date(2024, 5, 4), "mot_expiry": date(2024, 4, 30)})
    db_store.add("vehicles", {"id": "v2", "partner_id": "p2", "make": "Ford", "model": "Focus"})
    db_store.add("vehicle_documents", {"id": "d1", "vehicle_id": "v1", "type": "mot",
                                       "expiry_date": date(2024, 4, 26)})
    db_store.add("compliance_requirements", {"id": "c1", "name": "DBS checks", "status": "compliant",
                                             "next_review": date(2024, 5, 10)})
    db_store.add("claims", {"id": "cl1", "partner_id": "p1", "driver_id": "d1", "car_id": "v1",
                            "status": "open", "description": "Scratch"})

    app.dependency_overrides[get_store] = lambda: db_store
    app.dependency_overrides[get_now] = lambda: NOW
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_documents_overview(client):
    response = client.get("/documents/overview")
    assert response.status_code == 200
    data = response.json()
    # 2 vehicles x 4 document types
    assert sum(data["summary"]["total"].values()) == 8
    assert data["summary"]["total"]["expired"] == 1
    assert data["summary"]["total"]["missing"] == 5
    assert {p["partner_id"] for p in data["partners"]} == {"p1", "p2"}


def test_documents_overview_filters(client):
    data = client.get("/documents/overview", params={"status": "expired"}).json()
    assert [row["id"] for row in data["page"]["items"]] == ["v1"]

    data = client.get("/documents/overview", params={"q": "FORD"}).json()
    assert [row["id"] for row in data["page"]["items"]] == ["v2"]

    data = client.get("/documents/overview", params={"page": 9999, "page_size": 1}).json()
    assert data["page"]["page"] == 2
    assert len(data["page"]["items"]) == 1


def test_maintenance_overview(client):
    data = client.get("/maintenance/overview").json()
    assert data["summary"]["total"]["urgent"] == 1
    assert data["summary"]["total"]["no-schedule"] == 1
    assert data["summary"]["document_expiry"] == 1

    data = client.get("/maintenance/overview", params={"status": "document-expiry"}).json()
    assert [row["id"] for row in data["page"]["items"]] == ["v1"]


def test_compliance_overview(client):
    data = client.get("/compliance/overview").json()
    assert data["summary"]["compliance_rate"] == 100
    assert data["summary"]["reviews"]["total"]["upcoming"] == 1


def test_claims(client):
    data = client.get("/claims", params={"q": "northside"}).json()
    assert data["summary"]["open"] == 1
    assert [c["id"] for c in data["page"]["items"]] == ["cl1"]
    assert data["groups"] == {"p1": {"d1": ["cl1"]}}


def test_add_and_get_record(client):
    response = client.post("/records/vehicles", json={"id": "v9", "make": "Kia", "mot_expiry": "2024-06-01"})
    assert response.status_code == 201
    assert response.json() == {"id": "v9"}

    response = client.get("/records/vehicles/v9")
    assert response.status_code == 200
    assert response.json()["mot_expiry"] == "2024-06-01"


def test_unknown_table_is_404(client):
    assert client.post("/records/drivers", json={"id": "x"}).status_code == 404
    assert client.get("/records/drivers/x").status_code == 404


def test_missing_record_is_404(client):
    assert client.get("/records/vehicles/nope").status_code == 404


def test_get_store_opens_a_session_per_request(memory_engine):
    sessions = []

    def session_factory():
        session = SessionLocal(memory_engine)
        sessions.append(session)
        return session

    with patch("api.deps.SessionLocal", side_effect=session_factory), \
            patch("api.deps.create_all"):
        first, second = get_store(), get_store()
        store_a, store_b = next(first), next(second)
        assert store_a is not store_b
        assert sessions[0] is not sessions[1]

        with patch.object(sessions[0], "close") as close:
            first.close()
        close.assert_called_once()
        second.close()
