"""
api.documents
=============

Fleet documents page: per-partner document status and the vehicle table.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from fleetwatch.fleet import document_overview
from fleetwatch.settings import Settings
from fleetwatch.store_db import DBFleetStore
from .deps import get_now, get_settings, get_store

router = APIRouter(prefix="/documents", tags=["documents"])

logger = logging.getLogger(__name__)


@router.get("/overview", response_model=Dict[str, Any])
def documents_overview(
    status: str = Query("all", description="valid, expiring, expired, missing or all"),
    q: str = Query("", description="Search partner name, make, model or registration"),
    page: int = Query(1, description="1-indexed page; clamped to the available range"),
    page_size: Optional[int] = Query(None, description="Rows per page"),
    partner_id: Optional[str] = Query(None, description="Only this partner's vehicles"),
    partner_status: str = Query("all", description="Only partners with a document in this bucket"),
    store: DBFleetStore = Depends(get_store),
    cfg: Settings = Depends(get_settings),
    now: datetime = Depends(get_now),
):
    """
    Document status for every vehicle.

    Summary cards count each (vehicle × document type); partner panels
    only list partners that own vehicles.
    """
    logger.info(f"Documents overview status={status} q={q!r} page={page}")
    return document_overview(
        store.rows("vehicles"),
        store.rows("vehicle_documents"),
        store.rows("partners"),
        now,
        status=status,
        q=q,
        page=page,
        page_size=page_size,
        partner_id=partner_id,
        partner_status=partner_status,
        cfg=cfg,
    )
