import logging
import time
from datetime import datetime, timezone
from functools import lru_cache

from fastapi import APIRouter, Depends, Query

from mgnrega_api.core.config import settings
from mgnrega_api.core.errors import PersistenceUnavailable
from mgnrega_api.db.database import SessionLocal
from mgnrega_api.services.cache_store import RecordStore
from mgnrega_api.services.fallback import build_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter()

STARTED_AT = time.monotonic()

AVAILABLE_ROUTES = {
    "health": "/health",
    "api": "/api",
    "districts": "/api/districts",
    "districtData": "/api/data/{district}",
    "clearCache": "/api/cache/clear",
}


@lru_cache
def get_orchestrator():
    return build_orchestrator(settings, session_factory=SessionLocal)


def _database_status():
    try:
        return "connected", RecordStore(SessionLocal).count()
    except PersistenceUnavailable as e:
        logger.warning("Database health check failed: %s", e.message)
        return "disconnected", None


# ---------- INFO ----------
@router.get("/")
def root():
    return {
        "success": True,
        "message": "MGNREGA Goa Dashboard API Server",
        "version": settings.VERSION,
        "documentation": {"endpoints": AVAILABLE_ROUTES},
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ---------- HEALTH ----------
@router.get("/health")
def health(orchestrator=Depends(get_orchestrator)):
    database, cached_records = _database_status()
    csv_cache = orchestrator.csv_cache
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "environment": settings.ENVIRONMENT,
        "version": settings.VERSION,
        "services": {
            "database": database,
            "cached_records": cached_records,
            "csv_cache": "fresh" if csv_cache is not None and csv_cache.is_fresh() else "cold",
            "api": "healthy",
        },
    }


# ---------- DATA ----------
@router.get("/api")
def all_data(orchestrator=Depends(get_orchestrator)):
    return orchestrator.get_all_data().to_dict()


@router.get("/api/districts")
def list_districts(orchestrator=Depends(get_orchestrator)):
    return orchestrator.get_districts().to_dict()


@router.get("/api/data")
def district_data_by_query(district: str = Query(""), orchestrator=Depends(get_orchestrator)):
    return orchestrator.get_district_data(district).to_dict()


@router.get("/api/data/{district}")
def district_data(district: str, orchestrator=Depends(get_orchestrator)):
    return orchestrator.get_district_data(district).to_dict()


# ---------- CACHE ----------
@router.post("/api/cache/clear")
def clear_cache(orchestrator=Depends(get_orchestrator)):
    return orchestrator.clear_cache()
