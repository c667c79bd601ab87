"""Root and health endpoints."""

from fastapi import APIRouter

from roro_engine.reasons import supported_locales

from ..state import get_state

router = APIRouter()

API_VERSION = "1.0.0"


@router.get("/")
def root():
    state = get_state()
    return {
        "name": "Roro Recommendation & Experimentation API",
        "version": API_VERSION,
        "store": state.store_name,
        "locales": supported_locales(),
        "endpoints": {
            "recommendations": [
                "/api/recommendations",
                "/api/recommendations/hit",
                "/api/recommendations/report",
            ],
            "experiments": [
                "/api/ab/assign",
                "/api/ab/event",
                "/api/ab/significance",
                "/api/ab/report",
                "/api/ab/daily",
            ],
        },
    }


@router.get("/api/health")
def health():
    state = get_state()
    store_ok = state.store.ping()
    return {
        "status": "healthy" if store_ok else "degraded",
        "store": {"name": state.store_name, "available": store_ok},
    }
