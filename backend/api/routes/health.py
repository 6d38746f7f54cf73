"""
api/routes/health.py
--------------------
Health-check endpoint used by load balancers, Docker health probes, etc.
"""
from __future__ import annotations

from fastapi import APIRouter

import config

router = APIRouter()


def _google_mode() -> str:
    if config.USE_STUB_GOOGLE:
        return "stub"
    return "live" if config.GOOGLE_MAPS_API_KEY else "unconfigured"


@router.get("/health", summary="Health check")
def health() -> dict:
    """Returns 200 OK when the service is running, plus the Google data mode."""
    return {"status": "ok", "service": "itinerary-enrichment", "google": _google_mode()}
