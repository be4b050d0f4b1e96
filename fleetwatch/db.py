"""
fleetwatch.db
=============

SQLite persistence layer mirroring the hosted fleet tables.

This module exposes:

* ``engine`` – a global SQLModel engine built from ``settings.DB_URL``
* ``SessionLocal`` – a session factory used via ``with SessionLocal() as s:``
* one ``SQLModel`` table per hosted table (partners, vehicles, ...)
* ``upsert_row`` / ``get_row`` / ``all_rows`` – dict-in, dict-out CRUD
* ``create_all()`` – helper to create tables at first run
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import Column, JSON
from sqlalchemy.engine import Engine
from sqlmodel import Field, Session, SQLModel, create_engine, select

from fleetwatch.settings import DB_ECHO, DB_URL
from fleetwatch.store import new_id

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
engine = create_engine(DB_URL, echo=DB_ECHO, connect_args={"check_same_thread": False})


# ---------------------------------------------------------------------------
# Session factory
# ---------------------------------------------------------------------------
def SessionLocal(bind: Optional[Engine] = None) -> Session:  # noqa: N802 (factory camel-case for consistency with FastAPI docs)
    """Return a new Session bound to *bind* or the global engine."""
    return Session(bind or engine)


# ---------------------------------------------------------------------------
# ORM models that mirror the hosted tables
# ---------------------------------------------------------------------------
class PartnerDB(SQLModel, table=True):
    """Fleet partner (vehicle owner) account."""
    __tablename__ = "partners"

    id: str = Field(primary_key=True)
    business_name: Optional[str] = None
    company_name: Optional[str] = None
    name: Optional[str] = None
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class VehicleDB(SQLModel, table=True):
    """A vehicle with its service schedule and statutory expiry columns."""
    __tablename__ = "vehicles"

    id: str = Field(primary_key=True)
    partner_id: Optional[str] = Field(default=None, index=True)
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    registration_number: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    daily_rate: Optional[float] = None
    mileage: Optional[int] = None
    service_interval: Optional[int] = None
    last_service_mileage: Optional[int] = None
    last_service_date: Optional[date] = None
    next_service_date: Optional[date] = None
    mot_expiry: Optional[date] = None
    insurance_expiry: Optional[date] = None
    road_tax_expiry: Optional[date] = None


class VehicleDocumentDB(SQLModel, table=True):
    """An uploaded vehicle document (licence, MOT, insurance, logbook)."""
    __tablename__ = "vehicle_documents"

    id: str = Field(primary_key=True)
    vehicle_id: str = Field(index=True)
    partner_id: Optional[str] = Field(default=None, index=True)
    type: str
    file_url: Optional[str] = None
    expiry_date: Optional[date] = None
    upload_date: Optional[datetime] = None


class ComplianceRequirementDB(SQLModel, table=True):
    """A regulatory requirement with its review schedule."""
    __tablename__ = "compliance_requirements"

    id: str = Field(primary_key=True)
    name: str
    description: Optional[str] = None
    category: str = "General"
    status: str = "pending"
    risk_level: str = "medium"
    priority: str = "medium"
    assigned_to: Optional[str] = None
    regulatory_framework: Optional[str] = None
    evidence_required: bool = False
    last_evidence_date: Optional[date] = None
    last_checked: Optional[date] = None
    next_review: Optional[date] = None


class ClaimDB(SQLModel, table=True):
    """A damage/incident claim raised against a partner's vehicle."""
    __tablename__ = "claims"

    id: str = Field(primary_key=True)
    partner_id: Optional[str] = Field(default=None, index=True)
    driver_id: Optional[str] = None
    car_id: Optional[str] = None
    status: str = "open"
    description: Optional[str] = None
    amount: Optional[float] = None
    attachments: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: Optional[datetime] = None


TABLE_MODELS: Dict[str, Type[SQLModel]] = {
    "partners": PartnerDB,
    "vehicles": VehicleDB,
    "vehicle_documents": VehicleDocumentDB,
    "compliance_requirements": ComplianceRequirementDB,
    "claims": ClaimDB,
}


def model_for(table: str) -> Type[SQLModel]:
    """ORM class for *table* (raise KeyError for unknown tables)."""
    try:
        return TABLE_MODELS[table]
    except KeyError:
        raise KeyError(f"unknown table {table!r}") from None


# ---------------------------------------------------------------------------
# Convenience CRUD helpers
# ---------------------------------------------------------------------------
def upsert_row(s: Session, table: str, row: Dict[str, Any]) -> str:
    """Insert or update a row; returns its id."""
    model = model_for(table)
    data = dict(row)
    data["id"] = str(data.get("id") or new_id())
    obj = model.model_validate(data)
    s.merge(obj)
    try:
        s.commit()
    except Exception:
        s.rollback()
        raise
    return data["id"]


def get_row(s: Session, table: str, row_id: str) -> Dict[str, Any] | None:
    """Return a row as a dict or *None* if missing."""
    db_row = s.get(model_for(table), row_id)
    return db_row.model_dump() if db_row else None


def all_rows(s: Session, table: str) -> List[Dict[str, Any]]:
    """Return every row of *table* as dicts."""
    rows = s.exec(select(model_for(table))).all()
    return [row.model_dump() for row in rows]


def clear_rows(s: Session) -> None:
    """Delete every row from every fleet table."""
    for model in TABLE_MODELS.values():
        for obj in s.exec(select(model)).all():
            s.delete(obj)
    s.commit()


# ---------------------------------------------------------------------------
# Utility: create tables
# ---------------------------------------------------------------------------
def create_all(bind: Optional[Engine] = None) -> None:
    """Create all fleet tables on *bind* or the global engine."""
    SQLModel.metadata.create_all(bind or engine)
    logger.info(f"Fleet tables ready on {(bind or engine).url}")


# ---------------------------------------------------------------------------
# Lightweight CLI
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    """
    Quick bootstrap helper.

    Examples
    --------
    $ python -m fleetwatch.db --create        # first-time table creation
    $ python -m fleetwatch.db --drop --create # start from an empty schema
    """
    import argparse
    import textwrap

    parser = argparse.ArgumentParser(
        prog="python -m fleetwatch.db",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Fleetwatch DB utilities
            -----------------------
            --drop     Drop every fleet table (data is lost)
            --create   Create all SQLModel tables (safe if they already exist)
            """
        ),
    )
    parser.add_argument("--drop", action="store_true", help="drop tables")
    parser.add_argument("--create", action="store_true", help="create tables")
    args = parser.parse_args()

    if args.drop:
        SQLModel.metadata.drop_all(engine)
        print("fleetwatch.db tables dropped")

    if args.create:
        create_all()
        print("fleetwatch.db schema initialised")
