"""
api/routes/itinerary.py
------------------------
POST /v1/itinerary/enrich

Takes the generator's raw day-by-day skeleton plus traveller preferences and
returns the enriched, ordered days. Enrichment failures never surface as
errors: the affected fields are simply absent. Malformed requests get 422.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from main import run_enrichment
from modules.pipeline.enrichment_pipeline import EnrichmentPipeline

router = APIRouter()


# ── Request schemas (camelCase, as the frontend sends them) ────────────────────

class ActivityIn(BaseModel):
    # generator fields the engine doesn't read are carried through untouched
    model_config = ConfigDict(extra="allow")

    time: str = Field(..., description="HH:MM, 24h")
    title: str
    location: str = ""
    type: Optional[str] = None
    mealType: Optional[str] = Field(None, pattern="^(breakfast|lunch|dinner)$")
    coordinates: Optional[dict[str, float]] = None


class DayIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    day: int = Field(..., ge=1)
    activities: list[ActivityIn] = Field(default_factory=list)
    summary: Optional[str] = None


class DietaryIn(BaseModel):
    halal: bool = False
    nutAllergy: bool = False
    seafoodAllergy: bool = False
    vegetarian: bool = False
    vegan: bool = False
    wheelchairAccessible: bool = False


class PreferencesIn(BaseModel):
    destination: str = Field(..., min_length=1, description="e.g. 'Tokyo, Japan'")
    budget: str = Field("medium", pattern="(?i)^(low|medium|high)$")
    interests: list[str] = Field(default_factory=list)
    dietaryPreferences: DietaryIn = Field(default_factory=DietaryIn)
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    numberOfTravelers: int = Field(1, ge=1)


class EnrichRequest(BaseModel):
    days: list[DayIn] = Field(..., min_length=1)
    prefs: PreferencesIn


# ── Dependencies ───────────────────────────────────────────────────────────────

def get_pipeline() -> EnrichmentPipeline:
    """One pipeline per request, so rate-limiter state never leaks between calls."""
    return EnrichmentPipeline()


# ── Endpoint ───────────────────────────────────────────────────────────────────

@router.post("/enrich", summary="Enrich and order a raw itinerary")
def enrich_itinerary(
    req: EnrichRequest,
    pipeline: EnrichmentPipeline = Depends(get_pipeline),
) -> dict[str, Any]:
    """
    Per day: geocode + photos → meal times → real restaurants → mosque stops
    (halal only) → transport legs. Then day-1 / last-day ordering rules.
    """
    raw_days = [d.model_dump(exclude_none=True) for d in req.days]
    prefs = req.prefs.model_dump(exclude_none=True)
    try:
        days = run_enrichment(raw_days, prefs, pipeline=pipeline)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return {"days": days}
