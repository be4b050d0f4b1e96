#!/usr/bin/env python
"""
Seed database with sample fleet rows for testing.

This script creates partners, vehicles, documents, compliance
requirements and claims so every portal page has something to show.
Dates are relative to today, so the demo always contains expired,
expiring and healthy items.

With ``--sync`` the rows are copied from the hosted database instead
(``FLEETWATCH_SUPABASE_URL`` / ``FLEETWATCH_SUPABASE_KEY``).
"""

import argparse
import json
from datetime import date, timedelta

from fleetwatch.store_db import DBFleetStore

today = date.today()


def _in(days):
    return (today + timedelta(days=days)).isoformat()


SAMPLE_ROWS = {
    "partners": [
        {"id": "p-north", "business_name": "Northside Cars Ltd", "email": "ops@northside.example"},
        {"id": "p-river", "name": "Amira Patel", "email": "amira@river.example"},
        {"id": "p-quiet", "email": "quiet@fleet.example"},
    ],
    "vehicles": [
        {"id": "v-1", "partner_id": "p-north", "make": "Toyota", "model": "Prius",
         "registration_number": "NS21 ABC", "category": "hybrid", "mileage": 41200,
         "service_interval": 10000, "last_service_mileage": 31000,
         "next_service_date": _in(5), "mot_expiry": _in(20), "insurance_expiry": _in(200)},
        {"id": "v-2", "partner_id": "p-north", "make": "Skoda", "model": "Octavia",
         "registration_number": "NS19 XYZ", "category": "saloon", "mileage": 88000,
         "service_interval": 12000, "last_service_mileage": 80000,
         "next_service_date": _in(-3), "mot_expiry": _in(120), "road_tax_expiry": _in(-10)},
        {"id": "v-3", "partner_id": "p-river", "make": "Kia", "model": "Niro",
         "registration_number": "RV22 KIA", "category": "electric",
         "next_service_date": _in(90), "mot_expiry": _in(300)},
        {"id": "v-4", "partner_id": "p-river", "make": "Ford", "model": "Galaxy",
         "registration_number": "RV18 FRD", "category": "mpv"},
    ],
    "vehicle_documents": [
        {"id": "d-1", "vehicle_id": "v-1", "partner_id": "p-north", "type": "mot", "expiry_date": _in(20)},
        {"id": "d-2", "vehicle_id": "v-1", "partner_id": "p-north", "type": "private_hire_license",
         "expiry_date": _in(250)},
        {"id": "d-3", "vehicle_id": "v-1", "partner_id": "p-north", "type": "logbook"},
        {"id": "d-4", "vehicle_id": "v-2", "partner_id": "p-north", "type": "mot", "expiry_date": _in(-15)},
        {"id": "d-5", "vehicle_id": "v-3", "partner_id": "p-river", "type": "insurance", "expiry_date": _in(10)},
    ],
    "compliance_requirements": [
        {"id": "c-1", "name": "Operator licence renewal", "category": "Licensing", "status": "compliant",
         "risk_level": "high", "regulatory_framework": "TfL PHV", "evidence_required": True,
         "last_evidence_date": _in(-30), "next_review": _in(60)},
        {"id": "c-2", "name": "Driver DBS checks", "category": "Safeguarding", "status": "pending",
         "risk_level": "critical", "regulatory_framework": "TfL PHV", "evidence_required": True,
         "next_review": _in(-2)},
        {"id": "c-3", "name": "GDPR data retention", "category": "Data", "status": "review",
         "risk_level": "medium", "regulatory_framework": "UK GDPR", "next_review": _in(14)},
    ],
    "claims": [
        {"id": "cl-1", "partner_id": "p-north", "driver_id": "drv-1", "car_id": "v-1", "status": "open",
         "description": "Rear bumper scratch", "amount": 320.0},
        {"id": "cl-2", "partner_id": "p-north", "driver_id": "drv-2", "car_id": "v-2", "status": "need_info",
         "description": "Windscreen chip", "amount": 90.0},
        {"id": "cl-3", "partner_id": "p-river", "driver_id": "drv-3", "car_id": "v-3", "status": "closed",
         "description": "Side mirror replaced", "amount": 145.5},
    ],
}


def seed_database(store, rows=SAMPLE_ROWS):
    """Add sample rows to the database."""
    for table, table_rows in rows.items():
        for row in table_rows:
            store.add(table, row)
        print(f"Added {len(table_rows)} rows to {table}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Populate the local fleet database.")
    parser.add_argument("--sync", action="store_true", help="copy rows from the hosted database")
    parser.add_argument("--rows", help="JSON file shaped like {table: [rows]} to load instead of the demo rows")
    args = parser.parse_args()

    # Initialize DB if needed
    from fleetwatch.db import create_all
    print("Ensuring database tables exist...")
    create_all()

    with DBFleetStore() as store:
        if args.sync:
            from fleetwatch.sources import RestRowSource, sync_tables
            print("Syncing rows from the hosted database...")
            counts = sync_tables(RestRowSource(), store)
            print(json.dumps(counts, indent=2))
        else:
            rows = SAMPLE_ROWS
            if args.rows:
                with open(args.rows) as f:
                    rows = json.load(f)
            print("Seeding database with sample rows...")
            seed_database(store, rows)

    print("\nDone! You can now run the API server with:")
    print("uvicorn api.main:app --reload --port 8000")
