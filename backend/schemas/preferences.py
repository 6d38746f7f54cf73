"""
schemas/preferences.py
----------------------
Traveller preferences consumed by the enrichment pipeline.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional


BUDGET_LEVELS: tuple[str, ...] = ("low", "medium", "high")


@dataclass
class DietaryPreferences:
    halal: bool = False
    nut_allergy: bool = False
    seafood_allergy: bool = False
    vegetarian: bool = False
    vegan: bool = False
    wheelchair_accessible: bool = False

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "DietaryPreferences":
        data = data or {}
        return cls(
            halal=bool(data.get("halal", False)),
            nut_allergy=bool(data.get("nutAllergy", False)),
            seafood_allergy=bool(data.get("seafoodAllergy", False)),
            vegetarian=bool(data.get("vegetarian", False)),
            vegan=bool(data.get("vegan", False)),
            wheelchair_accessible=bool(data.get("wheelchairAccessible", False)),
        )


@dataclass
class TripPreferences:
    """
    destination: "City, Country" free text; the part before the first comma
                 is used as the city name for transit / text-search lookups
    budget:      low | medium | high (case-insensitive on input)
    """
    destination: str
    budget: str = "medium"
    interests: list[str] = field(default_factory=list)
    dietary: DietaryPreferences = field(default_factory=DietaryPreferences)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    number_of_travelers: int = 1

    def __post_init__(self) -> None:
        self.budget = (self.budget or "medium").lower()
        if self.budget not in BUDGET_LEVELS:
            raise ValueError(
                f"budget must be one of {BUDGET_LEVELS}, got {self.budget!r}"
            )

    @property
    def city_name(self) -> str:
        return self.destination.split(",")[0].strip()

    @classmethod
    def from_dict(cls, data: dict) -> "TripPreferences":
        return cls(
            destination=data["destination"],
            budget=str(data.get("budget") or "medium"),
            interests=list(data.get("interests") or []),
            dietary=DietaryPreferences.from_dict(data.get("dietaryPreferences")),
            start_date=data.get("startDate"),
            end_date=data.get("endDate"),
            number_of_travelers=int(data.get("numberOfTravelers") or 1),
        )
