"""
fleetwatch.settings
===================

Configuration settings for the Fleetwatch application.

Module-level constants cover the process (database file, API binding,
HTTP timeout) and are read straight from the environment.  Business
thresholds live on the pydantic :class:`Settings` model so they can be
overridden per deployment or per test without touching code.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Base directories
# ---------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent

# Database settings
# ---------------------------------------------------------------------------
DB_FILE = os.environ.get("FLEETWATCH_DB_FILE", str(BASE_DIR / "fleetwatch.db"))
DB_URL = f"sqlite:///{DB_FILE}"
DB_ECHO = os.environ.get("FLEETWATCH_DB_ECHO", "False").lower() == "true"

# API settings
# ---------------------------------------------------------------------------
API_HOST = os.environ.get("FLEETWATCH_API_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("FLEETWATCH_API_PORT", "8000"))
API_DEBUG = os.environ.get("FLEETWATCH_API_DEBUG", "False").lower() == "true"

# Row source settings
# ---------------------------------------------------------------------------
SOURCE_TIMEOUT = int(os.environ.get("FLEETWATCH_SOURCE_TIMEOUT", "30"))
SOURCE_USER_AGENT = os.environ.get(
    "FLEETWATCH_SOURCE_USER_AGENT",
    "Fleetwatch/0.1.0 Fleet Status Engine",
)


# ---------------------------------------------------------------------------
# Pydantic settings model for thresholds and hosted-database credentials
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Thresholds and credentials, loaded from ``FLEETWATCH_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="FLEETWATCH_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Vehicle documents (licence, MOT, insurance, logbook)
    document_warn_days: int = Field(30, ge=0, description="Days before expiry a document counts as expiring")

    # Maintenance schedule
    maintenance_urgent_days: int = Field(7, ge=0, description="Service due within this many days is urgent")
    maintenance_soon_days: int = Field(30, ge=0, description="Service due within this many days is soon")
    mileage_urgent_miles: int = Field(500, ge=0, description="Remaining service miles considered urgent")
    mileage_soon_miles: int = Field(2000, ge=0, description="Remaining service miles considered soon")
    vehicle_expiry_warn_days: int = Field(30, ge=0, description="Warning window for MOT/insurance/road tax columns")

    # Compliance reviews
    compliance_upcoming_days: int = Field(30, ge=0, description="Review due within this many days is upcoming")

    # Tables
    default_page_size: int = Field(10, ge=1, description="Rows per page when the client does not ask")

    # Hosted database (PostgREST-style REST interface)
    supabase_url: str = Field("http://localhost:54321", description="Base URL of the hosted database")
    supabase_key: str = Field("", description="Service or anon key sent with every request")

    @model_validator(mode="after")
    def _tiers_increase(self) -> "Settings":
        if self.maintenance_urgent_days >= self.maintenance_soon_days:
            raise ValueError("maintenance_urgent_days must be below maintenance_soon_days")
        if self.mileage_urgent_miles >= self.mileage_soon_miles:
            raise ValueError("mileage_urgent_miles must be below mileage_soon_miles")
        return self


# Initialize settings
settings = Settings()
