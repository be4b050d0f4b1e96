import logging
from typing import Any, Dict

from fastapi import Body, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from fleetwatch.settings import API_DEBUG
from fleetwatch.store_db import DBFleetStore
from .deps import get_store

logging.basicConfig(level=logging.DEBUG if API_DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Fleetwatch API",
    version="0.1.0",
    description="Status cards, partner panels and paged tables for the fleet partner portal.",
)

# --- CORS ----------------------------------------------------------
# Dev origins for the portal front-end.
origins = [
    "http://localhost:5173",    # Vite dev server default port
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)

# --- Include Routers ----------------------------------------------------------
from .claims import router as claims_router  # noqa: E402
from .compliance import router as compliance_router  # noqa: E402
from .documents import router as documents_router  # noqa: E402
from .maintenance import router as maintenance_router  # noqa: E402

app.include_router(documents_router)
app.include_router(maintenance_router)
app.include_router(compliance_router)
app.include_router(claims_router)


# ---------- health-check ----------
@app.get("/")
def root():
    return {"status": "ok", "msg": "Fleetwatch API is alive"}


# ---------- POST /records/{table} ----------
@app.post("/records/{table}", status_code=201)
def add_record(table: str,
               row: Dict[str, Any] = Body(...),
               store: DBFleetStore = Depends(get_store)):
    """Insert or update one row of a fleet table; returns its id."""
    try:
        row_id = store.add(table, row)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown table {table}")
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    logger.info(f"Stored {table}/{row_id}")
    return {"id": row_id}


# ---------- GET /records/{table}/{row_id} ----------
@app.get("/records/{table}/{row_id}")
def get_record(table: str, row_id: str, store: DBFleetStore = Depends(get_store)):
    """Return a stored row; 404 if the table or the row is unknown."""
    try:
        return store.get(table, row_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Record not found")
