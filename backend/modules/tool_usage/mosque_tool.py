"""
modules/tool_usage/mosque_tool.py
-----------------------------------
Nearby-mosque lookup for halal travellers.

After every lunch or dinner that has coordinates, a mosque activity is
inserted directly after the meal at the same clock time. The search starts
at MOSQUE_START_RADIUS_M and widens by MOSQUE_RADIUS_STEP_M up to
MOSQUE_MAX_RADIUS_M until it finds a mosque not already added that day.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

import config
from modules.errors import EnrichmentError, ServiceUnavailableError
from modules.pipeline.rate_limiter import NoDelayRateLimiter, RateLimiter
from modules.planning.activity_classifier import is_meal, meal_type_of
from modules.tool_usage.distance_tool import distance_m, format_km, minutes_at_speed
from modules.tool_usage.places_tool import PlacesClient, first_photo_reference, place_coordinates
from schemas.itinerary import Activity, Coordinates

logger = logging.getLogger(__name__)

MOSQUE_START_RADIUS_M: int = 2_000
MOSQUE_RADIUS_STEP_M:  int = 2_000
MOSQUE_MAX_RADIUS_M:   int = 10_000
MOSQUE_KEYWORD: str = "masjid|mosque"
MOSQUE_CANDIDATES: int = 3
WALKING_KMH: float = 5.0

MOSQUE_ICON = "🕌"
_MEALS_WITH_MOSQUE: tuple[str, ...] = ("lunch", "dinner")


@dataclass(frozen=True)
class Mosque:
    name: str
    address: str
    coordinates: Coordinates
    place_id: Optional[str] = None
    rating: Optional[float] = None
    photo_reference: Optional[str] = None


def _to_mosque(place: dict) -> Optional[Mosque]:
    coords = place_coordinates(place)
    name = place.get("name")
    if coords is None or not name:
        return None
    return Mosque(
        name=name,
        address=place.get("vicinity") or place.get("formatted_address") or "",
        coordinates=coords,
        place_id=place.get("place_id"),
        rating=place.get("rating"),
        photo_reference=first_photo_reference(place),
    )


class MosqueFinder:
    """Adds a nearby mosque after each lunch and dinner of a day."""

    def __init__(
        self,
        places: Optional[PlacesClient] = None,
        limiter: Optional[RateLimiter] = None,
    ) -> None:
        self.places = places or PlacesClient()
        self.limiter = limiter or NoDelayRateLimiter()

    @property
    def available(self) -> bool:
        return self.places.available

    def nearby(self, location: Coordinates, radius_m: int) -> list[Mosque]:
        results = self.places.nearby(location, radius_m, place_type="mosque", keyword=MOSQUE_KEYWORD)
        mosques = [_to_mosque(p) for p in results[:MOSQUE_CANDIDATES]]
        return [m for m in mosques if m is not None]

    def find_unique(self, location: Coordinates, seen: set[str]) -> Optional[Mosque]:
        """First mosque within the widening radius whose id and name are not in *seen*."""
        radius = MOSQUE_START_RADIUS_M
        while radius <= MOSQUE_MAX_RADIUS_M:
            for mosque in self.nearby(location, radius):
                if (mosque.place_id and mosque.place_id in seen) or mosque.name in seen:
                    logger.debug("Skipping mosque already on today's plan: %s", mosque.name)
                    continue
                return mosque
            radius += MOSQUE_RADIUS_STEP_M
        return None

    def insert_for_day(self, activities: list[Activity], day_number: int) -> list[Activity]:
        """Return *activities* with a mosque after each lunch/dinner. Never raises."""
        if not self.available:
            logger.warning("Day %d: no Google API key, skipping mosque search", day_number)
            return activities

        result: list[Activity] = []
        seen: set[str] = set()
        added = 0
        unavailable = False
        for activity in activities:
            result.append(activity)
            if unavailable or not is_meal(activity) or activity.coordinates is None:
                continue
            if meal_type_of(activity) not in _MEALS_WITH_MOSQUE:
                continue

            self.limiter.wait()
            try:
                mosque = self.find_unique(activity.coordinates, seen)
            except ServiceUnavailableError as exc:
                logger.warning("Day %d: mosque search unavailable: %s", day_number, exc)
                unavailable = True
                continue
            except EnrichmentError as exc:
                logger.warning("Day %d: mosque search near %r failed: %s", day_number, activity.title, exc)
                continue

            if mosque is None:
                logger.info("Day %d: no unique mosque near %r", day_number, activity.title)
                continue

            result.append(self.mosque_activity(mosque, activity))
            added += 1
            if mosque.place_id:
                seen.add(mosque.place_id)
            seen.add(mosque.name)

        logger.info("Day %d: added %d mosque(s)", day_number, added)
        return result

    def mosque_activity(self, mosque: Mosque, meal: Activity) -> Activity:
        extra: dict = {}
        if meal.coordinates is not None:
            metres = distance_m(meal.coordinates, mosque.coordinates)
            extra["distance"] = format_km(metres)
            extra["walkingTime"] = f"{minutes_at_speed(metres, WALKING_KMH)} min walk"
        if mosque.rating is not None:
            extra["rating"] = mosque.rating

        photo_url = None
        if mosque.photo_reference:
            photo_url = self.places.photo_url(mosque.photo_reference, config.RESTAURANT_PHOTO_MAX_WIDTH)

        return Activity(
            id=f"mosque-{mosque.place_id or meal.id or mosque.name}",
            time=meal.time,
            title=f"Nearby Mosque: {mosque.name}",
            location=mosque.address,
            coordinates=mosque.coordinates,
            type="mosque",
            place_id=mosque.place_id,
            photo_url=photo_url,
            icon=MOSQUE_ICON,
            extra=extra,
        )
