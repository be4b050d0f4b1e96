"""
api.maintenance
===============

Maintenance page: service schedule per vehicle, rolled up per partner.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from fleetwatch.fleet import maintenance_overview
from fleetwatch.settings import Settings
from fleetwatch.store_db import DBFleetStore
from .deps import get_now, get_settings, get_store

router = APIRouter(prefix="/maintenance", tags=["maintenance"])

logger = logging.getLogger(__name__)


@router.get("/overview", response_model=Dict[str, Any])
def maintenance_page(
    status: str = Query(
        "all",
        description="overdue, urgent, soon, ok, no-schedule, document-expiry or all",
    ),
    q: str = Query("", description="Search partner name, make, model or registration"),
    page: int = Query(1, description="1-indexed page; clamped to the available range"),
    page_size: Optional[int] = Query(None, description="Rows per page"),
    partner_id: Optional[str] = Query(None, description="Only this partner's vehicles"),
    store: DBFleetStore = Depends(get_store),
    cfg: Settings = Depends(get_settings),
    now: datetime = Depends(get_now),
):
    """Each vehicle counted once, under the worse of its date and mileage status."""
    logger.info(f"Maintenance overview status={status} q={q!r} page={page}")
    return maintenance_overview(
        store.rows("vehicles"),
        store.rows("partners"),
        now,
        status=status,
        q=q,
        page=page,
        page_size=page_size,
        partner_id=partner_id,
        cfg=cfg,
    )
