"""
api.compliance
==============

Compliance page: requirement status, risk and review schedule.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from fleetwatch.fleet import compliance_overview
from fleetwatch.settings import Settings
from fleetwatch.store_db import DBFleetStore
from .deps import get_now, get_settings, get_store

router = APIRouter(prefix="/compliance", tags=["compliance"])

logger = logging.getLogger(__name__)


@router.get("/overview", response_model=Dict[str, Any])
def compliance_page(
    status: str = Query("all", description="Stored status: compliant, non-compliant, pending, review or all"),
    review: str = Query("all", description="Review bucket: overdue, upcoming, scheduled, missing or all"),
    category: Optional[str] = Query(None, description="Only this category"),
    q: str = Query("", description="Search name, description, category, framework or assignee"),
    page: int = Query(1, description="1-indexed page; clamped to the available range"),
    page_size: Optional[int] = Query(None, description="Rows per page"),
    store: DBFleetStore = Depends(get_store),
    cfg: Settings = Depends(get_settings),
    now: datetime = Depends(get_now),
):
    logger.info(f"Compliance overview status={status} review={review} category={category}")
    return compliance_overview(
        store.rows("compliance_requirements"),
        now,
        status=status,
        review=review,
        category=category,
        q=q,
        page=page,
        page_size=page_size,
        cfg=cfg,
    )
