"""
modules/tool_usage/places_tool.py
-----------------------------------
Google Places (legacy JSON API) search + photo helpers.

Results are returned as raw Google place dicts; the fields consumed downstream:
    place_id, name, vicinity | formatted_address, rating, user_ratings_total,
    price_level, types[], geometry.location.{lat,lng}, opening_hours.open_now,
    photos[0].photo_reference

nearby() / text_search() raise the modules.errors taxonomy; callers decide
how to degrade. find_photo() never raises.
"""

from __future__ import annotations
import logging
from typing import Optional

import config
from google_places_client import (
    NEARBY_SEARCH_URL,
    TEXT_SEARCH_URL,
    GoogleMapsClient,
    status_results,
)
from modules.errors import EnrichmentError, NotFoundError
from schemas.itinerary import Coordinates

logger = logging.getLogger(__name__)


def place_coordinates(place: dict) -> Optional[Coordinates]:
    loc = (place.get("geometry") or {}).get("location") or {}
    return Coordinates.from_dict(loc)


def first_photo_reference(place: dict) -> Optional[str]:
    photos = place.get("photos") or []
    if photos and isinstance(photos[0], dict):
        return photos[0].get("photo_reference")
    return None


class PlacesClient:
    """Nearby / text search and photo URLs over one GoogleMapsClient."""

    def __init__(self, client: Optional[GoogleMapsClient] = None) -> None:
        self.client = client or GoogleMapsClient()

    @property
    def available(self) -> bool:
        return self.client.available

    def nearby(
        self,
        location: Coordinates,
        radius_m: int,
        place_type: str = "restaurant",
        keyword: str = "",
    ) -> list[dict]:
        params = {
            "location": f"{location.lat},{location.lng}",
            "radius": str(int(radius_m)),
            "type": place_type,
        }
        if keyword:
            params["keyword"] = keyword
        data = self.client.get_json(NEARBY_SEARCH_URL, params)
        try:
            return status_results(data, f"nearby {place_type} r={radius_m}")
        except NotFoundError:
            return []

    def text_search(self, query: str, place_type: Optional[str] = None) -> list[dict]:
        params = {"query": query}
        if place_type:
            params["type"] = place_type
        data = self.client.get_json(TEXT_SEARCH_URL, params)
        try:
            results = status_results(data, f"text search {query!r}")
        except NotFoundError:
            return []
        # Text Search returns formatted_address instead of vicinity
        return [
            {**place, "vicinity": place.get("vicinity") or place.get("formatted_address") or "Address not available"}
            for place in results
        ]

    def photo_url(self, photo_reference: str, max_width: int) -> str:
        return self.client.photo_url(photo_reference, max_width)

    def find_photo(self, location: str, destination: str) -> tuple[Optional[str], Optional[str]]:
        """Return (photo_url, place_id) for the best text-search match, or (None, None)."""
        query = f"{location}, {destination}" if destination else location
        try:
            results = self.text_search(query)
        except EnrichmentError as exc:
            logger.warning("Photo lookup failed for %r: %s", query, exc)
            return None, None

        if not results:
            logger.info("No photo found for %r", location)
            return None, None

        place = results[0]
        ref = first_photo_reference(place)
        if not ref:
            logger.info("No photo found for %r", location)
            return None, None
        return self.photo_url(ref, config.ACTIVITY_PHOTO_MAX_WIDTH), place.get("place_id")
