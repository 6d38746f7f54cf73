"""
modules/validation/ingestion_validator.py
------------------------------------------
Data-quality guards applied to the raw itinerary before enrichment.

  Activity:
    ✓ Non-empty title
    ✓ time is HH:MM (24h)
    ✓ Non-empty location (needed for geocoding and photo lookup)
    ✓ Coordinates, if present: lat in [-90, 90], lng in [-180, 180],
      not both exactly 0.0

  Day:
    ✓ day > 0
    ✓ activities is a non-empty list

  Preferences:
    ✓ Non-empty destination
    ✓ budget in {low, medium, high} (case-insensitive)

A failed check never aborts a run: the pipeline skips only the step the bad
record cannot feed (an activity without a location is not geocoded, a day
without activities is passed through untouched).

Usage:
    from modules.validation import validate_activity, validate_day

    result = validate_day(raw_day)
    if not result.valid:
        logger.warning("; ".join(result.errors))
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

_HHMM = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d$")
_BUDGETS = ("low", "medium", "high")


# ── Result dataclass ───────────────────────────────────────────────────────────

@dataclass
class ValidationResult:
    """
    Outcome of a single validation run.

    Attributes:
        valid:  True iff there are zero errors.
        errors: Human-readable list of failure reasons.
        record: The input record dict (for logging purposes).
    """
    valid: bool
    errors: list[str] = field(default_factory=list)
    record: dict = field(default_factory=dict, repr=False)

    def __bool__(self) -> bool:
        return self.valid


def _check_coordinates(coords: Any, errors: list[str]) -> None:
    if not isinstance(coords, dict):
        errors.append(f"coordinates must be an object with lat/lng (got {coords!r})")
        return
    lat, lng = coords.get("lat"), coords.get("lng")
    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError):
        errors.append(f"coordinates must be numeric (got lat={lat!r}, lng={lng!r})")
        return

    if not (-90.0 <= lat <= 90.0):
        errors.append(f"lat={lat} is outside valid range [-90, 90]")
    if not (-180.0 <= lng <= 180.0):
        errors.append(f"lng={lng} is outside valid range [-180, 180]")
    if lat == 0.0 and lng == 0.0:
        errors.append("lat=0.0 and lng=0.0: likely a missing/default value")


# ── Activity validation ────────────────────────────────────────────────────────

def validate_activity(record: dict[str, Any]) -> ValidationResult:
    """Validate one raw activity dict (camelCase wire keys)."""
    errors: list[str] = []

    title = record.get("title", "")
    if not title or not str(title).strip():
        errors.append("title must not be empty")

    time = record.get("time")
    if time is None or not _HHMM.match(str(time).strip()):
        errors.append(f"time={time!r} must be HH:MM (24h)")

    location = record.get("location", "")
    if not location or not str(location).strip():
        errors.append("location must not be empty")

    if record.get("coordinates") is not None:
        _check_coordinates(record["coordinates"], errors)

    return ValidationResult(valid=len(errors) == 0, errors=errors, record=record)


# ── Day validation ─────────────────────────────────────────────────────────────

def validate_day(record: dict[str, Any]) -> ValidationResult:
    """Validate one raw day dict: positive day number, non-empty activities."""
    errors: list[str] = []

    day_num = record.get("day")
    try:
        d = int(day_num)
        if d <= 0:
            errors.append(f"day={d} must be > 0")
    except (TypeError, ValueError):
        errors.append(f"day={day_num!r} must be a positive integer")

    activities = record.get("activities")
    if not isinstance(activities, list) or not activities:
        errors.append("activities must be a non-empty list")

    return ValidationResult(valid=len(errors) == 0, errors=errors, record=record)


# ── Preferences validation ─────────────────────────────────────────────────────

def validate_preferences(record: dict[str, Any]) -> ValidationResult:
    errors: list[str] = []

    destination = record.get("destination", "")
    if not destination or not str(destination).strip():
        errors.append("destination must not be empty")

    budget = record.get("budget")
    if str(budget or "").lower() not in _BUDGETS:
        errors.append(f"budget={budget!r} must be one of {', '.join(_BUDGETS)}")

    return ValidationResult(valid=len(errors) == 0, errors=errors, record=record)


# ── Batch filter helper ────────────────────────────────────────────────────────

def filter_valid(
    items: list[T],
    validator: Callable[[dict], ValidationResult],
    to_dict: Callable[[T], dict] | None = None,
    log: bool = True,
) -> list[T]:
    """
    Apply a validator to every item in a list, return only the valid ones.

    Args:
        items:     List of items (dataclass instances or dicts).
        validator: One of validate_activity / validate_day / validate_preferences.
        to_dict:   Optional callable to convert each item to a dict.
                   If None, items are assumed to already be dicts or have __dict__.
        log:       If True, log a warning for every rejected record.
    """
    valid_items: list[T] = []
    rejected = 0

    for item in items:
        record_dict = (
            to_dict(item)
            if to_dict is not None
            else (item if isinstance(item, dict) else item.__dict__)
        )
        result = validator(record_dict)
        if result.valid:
            valid_items.append(item)
        else:
            rejected += 1
            if log:
                name = record_dict.get("title", record_dict.get("day", "?"))
                logger.warning("REJECTED %r: %s", name, "; ".join(result.errors))

    if log and rejected:
        logger.warning("%d/%d records rejected; %d passed.", rejected, len(items), len(valid_items))

    return valid_items
