"""Shared fixtures: in-memory stand-ins for the Google-backed tools."""

from __future__ import annotations

import os

# Never touch the network or the real key from tests
os.environ["USE_STUB_GOOGLE"] = "false"
os.environ["GOOGLE_MAPS_API_KEY"] = ""
os.environ["ENABLE_STRUCTURED_LOGS"] = "false"

from typing import Optional  # noqa: E402

import pytest  # noqa: E402

from modules.pipeline.enrichment_pipeline import EnrichmentPipeline, PipelineLimiters  # noqa: E402
from modules.planning.transport_planner import TransportCalculator  # noqa: E402
from modules.tool_usage.mosque_tool import MosqueFinder  # noqa: E402
from modules.tool_usage.restaurant_tool import RestaurantFinder  # noqa: E402
from schemas.itinerary import Activity, Coordinates  # noqa: E402
from schemas.preferences import DietaryPreferences, TripPreferences  # noqa: E402

TOKYO = Coordinates(35.6812, 139.7671)


def make_place(
    place_id: str,
    name: str,
    lat: float = TOKYO.lat,
    lng: float = TOKYO.lng,
    rating: float = 4.5,
    reviews: int = 500,
    price_level: Optional[int] = 2,
    types: Optional[list[str]] = None,
    vicinity: str = "1 Test Street",
) -> dict:
    """A Google Places result dict with the fields the tools read."""
    place = {
        "place_id": place_id,
        "name": name,
        "vicinity": vicinity,
        "rating": rating,
        "user_ratings_total": reviews,
        "types": types or ["restaurant"],
        "geometry": {"location": {"lat": lat, "lng": lng}},
        "photos": [{"photo_reference": f"ref-{place_id}"}],
    }
    if price_level is not None:
        place["price_level"] = price_level
    return place


class FakePlaces:
    """
    PlacesClient stand-in.

    nearby_by_radius maps radius → results (restaurant searches);
    mosques_by_radius does the same for type=mosque.
    """

    def __init__(
        self,
        nearby_by_radius: Optional[dict[int, list[dict]]] = None,
        text_results: Optional[list[dict]] = None,
        mosques_by_radius: Optional[dict[int, list[dict]]] = None,
        available: bool = True,
    ) -> None:
        self.nearby_by_radius = nearby_by_radius or {}
        self.text_results = text_results or []
        self.mosques_by_radius = mosques_by_radius or {}
        self.available = available
        self.nearby_calls: list[tuple] = []
        self.text_calls: list[str] = []
        self.photo_calls: list[str] = []

    def nearby(self, location, radius_m, place_type="restaurant", keyword=""):
        self.nearby_calls.append((location, radius_m, place_type, keyword))
        source = self.mosques_by_radius if place_type == "mosque" else self.nearby_by_radius
        return list(source.get(radius_m, []))

    def text_search(self, query, place_type=None):
        self.text_calls.append(query)
        return list(self.text_results)

    def photo_url(self, photo_reference, max_width):
        return f"https://photos.test/{photo_reference}?w={max_width}"

    def find_photo(self, location, destination):
        self.photo_calls.append(location)
        return f"https://photos.test/{location}", f"pid-{location}"


class FakeGeocoder:
    def __init__(self, table: Optional[dict[str, Coordinates]] = None, available: bool = True) -> None:
        self.table = table or {}
        self.available = available
        self.calls: list[tuple[str, Optional[str]]] = []

    def resolve(self, location_name, context=None):
        self.calls.append((location_name, context))
        return self.table.get(location_name)


class CountingLimiter:
    def __init__(self) -> None:
        self.waits = 0

    def wait(self) -> None:
        self.waits += 1


def activity(time: str, title: str, **kwargs) -> Activity:
    kwargs.setdefault("location", title)
    return Activity(time=time, title=title, **kwargs)


@pytest.fixture
def prefs() -> TripPreferences:
    return TripPreferences(destination="Tokyo, Japan", budget="medium")


@pytest.fixture
def halal_prefs() -> TripPreferences:
    return TripPreferences(
        destination="Tokyo, Japan",
        budget="medium",
        dietary=DietaryPreferences(halal=True),
    )


@pytest.fixture
def build_pipeline():
    """Factory: EnrichmentPipeline over fakes, no delays, no directions lookups."""

    def _build(
        places: Optional[FakePlaces] = None,
        geocoder: Optional[FakeGeocoder] = None,
        **kwargs,
    ) -> EnrichmentPipeline:
        places = places or FakePlaces()
        geocoder = geocoder or FakeGeocoder()
        kwargs.setdefault("limiters", PipelineLimiters())
        return EnrichmentPipeline(
            geocoder=geocoder,
            places=places,
            finder=RestaurantFinder(places),
            transport=TransportCalculator(directions=None),
            mosques=MosqueFinder(places),
            **kwargs,
        )

    return _build
