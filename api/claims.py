"""
api.claims
==========

Claims page: stored-status stats, search and partner → driver grouping.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from fleetwatch.fleet import claims_overview
from fleetwatch.settings import Settings
from fleetwatch.store_db import DBFleetStore
from .deps import get_settings, get_store

router = APIRouter(tags=["claims"])

logger = logging.getLogger(__name__)


@router.get("/claims", response_model=Dict[str, Any])
def list_claims(
    status: str = Query("all", description="open, need_info, closed or all"),
    q: str = Query("", description="Search partner, driver, description or vehicle"),
    page: int = Query(1, description="1-indexed page; clamped to the available range"),
    page_size: Optional[int] = Query(None, description="Rows per page"),
    store: DBFleetStore = Depends(get_store),
    cfg: Settings = Depends(get_settings),
):
    logger.info(f"Claims status={status} q={q!r} page={page}")
    return claims_overview(
        store.rows("claims"),
        store.rows("partners"),
        store.rows("vehicles"),
        status=status,
        q=q,
        page=page,
        page_size=page_size,
        cfg=cfg,
    )
