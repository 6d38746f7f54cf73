"""
modules/validation package: data quality guards on the raw itinerary.
"""
from modules.validation.ingestion_validator import (
    ValidationResult,
    validate_activity,
    validate_day,
    validate_preferences,
    filter_valid,
)

__all__ = [
    "ValidationResult",
    "validate_activity",
    "validate_day",
    "validate_preferences",
    "filter_valid",
]
