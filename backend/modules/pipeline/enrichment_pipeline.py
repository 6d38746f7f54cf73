"""
modules/pipeline/enrichment_pipeline.py
-----------------------------------------
Turns a raw day-by-day activity skeleton into an enriched, ordered itinerary.

Per day, strictly in order 1..N (restaurant exclusions flow forward):
    1. geocode + photo every activity          (GEOCODE_DELAY_MS between calls)
    2. meal times from the non-meal activities
    3. meal insertion                           (exclusions in → used ids out)
    4. mosque insertion after lunch / dinner    (halal travellers only)
    5. transport legs between consecutive activities (TRANSPORT_DELAY_MS)

Then, once for the itinerary:
    6. ActivityOrderEnforcer.normalize()
    7. transport legs recomputed for every day whose order changed

run() never raises. A day whose processing fails keeps its raw activities.
Once PIPELINE_DEADLINE_SECONDS is exceeded no further external lookups are
made; meal and mosque insertion stop, transport legs fall back to local
estimates, and ordering still runs.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional

import config
from google_places_client import GoogleMapsClient
from modules.observability.logger import StructuredLogger
from modules.pipeline.rate_limiter import NoDelayRateLimiter, RateLimiter, limiter_for
from modules.planning.activity_classifier import is_meal
from modules.planning.activity_order import ActivityOrderEnforcer
from modules.planning.meal_planner import MealPlanner, determine_meal_times
from modules.planning.transport_planner import TransportCalculator, country_code_for
from modules.tool_usage.directions_tool import DirectionsClient
from modules.tool_usage.geocoding_tool import Geocoder
from modules.tool_usage.mosque_tool import MosqueFinder
from modules.tool_usage.places_tool import PlacesClient
from modules.tool_usage.restaurant_tool import RestaurantFinder
from modules.validation import validate_activity, validate_day, validate_preferences
from schemas.itinerary import Day, RestaurantExclusions
from schemas.preferences import TripPreferences

logger = logging.getLogger(__name__)


@dataclass
class PipelineLimiters:
    geocode: RateLimiter = field(default_factory=NoDelayRateLimiter)
    transport: RateLimiter = field(default_factory=NoDelayRateLimiter)
    restaurant: RateLimiter = field(default_factory=NoDelayRateLimiter)
    mosque: RateLimiter = field(default_factory=NoDelayRateLimiter)

    @classmethod
    def from_config(cls) -> "PipelineLimiters":
        return cls(
            geocode=limiter_for(config.GEOCODE_DELAY_MS),
            transport=limiter_for(config.TRANSPORT_DELAY_MS),
            restaurant=limiter_for(config.RESTAURANT_LEVEL_DELAY_MS),
            mosque=limiter_for(config.MOSQUE_DELAY_MS),
        )


class EnrichmentPipeline:
    """
    Wires the Google-backed tools together. Every collaborator is injectable;
    anything left as None is built over one shared GoogleMapsClient.
    """

    def __init__(
        self,
        geocoder: Optional[Geocoder] = None,
        places: Optional[PlacesClient] = None,
        finder: Optional[RestaurantFinder] = None,
        transport: Optional[TransportCalculator] = None,
        mosques: Optional[MosqueFinder] = None,
        enforcer: Optional[ActivityOrderEnforcer] = None,
        limiters: Optional[PipelineLimiters] = None,
        events: Optional[StructuredLogger] = None,
        deadline_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        client: Optional[GoogleMapsClient] = None,
    ) -> None:
        client = client or GoogleMapsClient()
        self.limiters = limiters or PipelineLimiters.from_config()
        self.geocoder = geocoder or Geocoder(client)
        self.places = places or PlacesClient(client)
        self.finder = finder or RestaurantFinder(self.places, limiter=self.limiters.restaurant)
        self.transport = transport or TransportCalculator(DirectionsClient(client))
        self.mosques = mosques or MosqueFinder(self.places, limiter=self.limiters.mosque)
        self.enforcer = enforcer or ActivityOrderEnforcer()
        self.meals = MealPlanner(self.finder, self.geocoder)
        self.events = events or StructuredLogger()
        self.deadline_seconds = (
            config.PIPELINE_DEADLINE_SECONDS if deadline_seconds is None else deadline_seconds
        )
        self._clock = clock
        self._deadline_at: Optional[float] = None
        self._estimates_only = TransportCalculator(directions=None)

    # ── public API ────────────────────────────────────────────────────────

    def run(self, days: list[Day], prefs: TripPreferences) -> list[Day]:
        """Enrich and order *days* in place; returns the same list."""
        run_id = f"run_{uuid.uuid4().hex[:10]}"
        self._deadline_at = self._clock() + self.deadline_seconds
        logger.info("Enriching %d day(s) for %s (run %s)", len(days), prefs.destination, run_id)
        try:
            self._enrich(days, prefs, run_id)
        except Exception:
            logger.exception("Enrichment run %s failed; returning days as they stand", run_id)
        finally:
            self.events.close(run_id)
        return days

    def _enrich(self, days: list[Day], prefs: TripPreferences, run_id: str) -> None:
        self.events.log(run_id, "pipeline_start", {
            "days": len(days),
            "destination": prefs.destination,
            "budget": prefs.budget,
            "halal": prefs.dietary.halal,
        })

        exclusions = RestaurantExclusions()
        for i, day in enumerate(days):
            with self.events.stage(run_id, f"day_{day.day}") as stage:
                days[i], exclusions = self.process_day(day, prefs, exclusions)
                stage["activities"] = len(days[i].activities)

        with self.events.stage(run_id, "normalize"):
            before = [[id(a) for a in day.activities] for day in days]
            self.enforcer.normalize(days)
            for day, order in zip(days, before):
                if [id(a) for a in day.activities] != order:
                    self._link_transport(day, prefs)

        self.events.log(run_id, "pipeline_end", {
            "days": len(days),
            "activities": sum(len(d.activities) for d in days),
            "out_of_time": self._out_of_time(),
        })

    def run_dicts(self, raw_days: list[dict], prefs: dict) -> list[dict]:
        """
        camelCase wire payload in, camelCase wire payload out.

        Raises ValueError for unusable preferences (no destination, unknown
        budget). Malformed days are logged and passed through untouched.
        """
        check = validate_preferences(prefs)
        if not check:
            raise ValueError("; ".join(check.errors))

        days: list[Day] = []
        for raw in raw_days:
            result = validate_day(raw)
            if not result:
                logger.warning("Day %r: %s", raw.get("day"), "; ".join(result.errors))
            days.append(Day.from_dict(raw))

        enriched = self.run(days, TripPreferences.from_dict(prefs))
        return [day.to_dict() for day in enriched]

    def process_day(
        self,
        day: Day,
        prefs: TripPreferences,
        exclusions: RestaurantExclusions,
    ) -> tuple[Day, RestaurantExclusions]:
        """
        Enrich one day. Returns the day and the exclusion accumulator to hand
        to the next day. Never raises; on failure the raw activities are kept.
        """
        if not day.activities:
            logger.warning("Day %d has no activities, skipping enrichment", day.day)
            return day, exclusions

        raw_activities = list(day.activities)
        try:
            self._locate_activities(day, prefs)

            if self._out_of_time():
                logger.warning("Day %d: deadline exceeded, skipping meal search", day.day)
            else:
                non_meals = [a for a in day.activities if not is_meal(a)]
                meal_times = determine_meal_times(non_meals)
                logger.info(
                    "Day %d meal times: breakfast=%s lunch=%s dinner=%s",
                    day.day, meal_times.breakfast, meal_times.lunch, meal_times.dinner,
                )
                inserted = self.meals.insert_meals_for_day(
                    day.activities, day.day, prefs, meal_times, exclusions
                )
                day.activities = inserted.activities
                exclusions = exclusions.merged(inserted.used)

            if self._wants_mosques(prefs):
                day.activities = self.mosques.insert_for_day(day.activities, day.day)

            self._link_transport(day, prefs)
        except Exception:
            logger.exception("Day %d enrichment failed; keeping raw activities", day.day)
            day.activities = raw_activities

        return day, exclusions

    # ── steps ─────────────────────────────────────────────────────────────

    def _locate_activities(self, day: Day, prefs: TripPreferences) -> None:
        geocode = self.geocoder.available
        photos = self.places.available
        if not geocode:
            logger.warning("Day %d: geocoding unavailable, skipping", day.day)

        for activity in day.activities:
            check = validate_activity(activity.to_dict())
            if not check:
                logger.debug("Day %d %r: %s", day.day, activity.title, "; ".join(check.errors))
            if not activity.location.strip():
                continue
            if self._out_of_time():
                return

            if geocode and activity.coordinates is None:
                self.limiters.geocode.wait()
                activity.coordinates = self.geocoder.resolve(activity.location, prefs.destination)

            if photos and activity.photo_url is None and not is_meal(activity):
                self.limiters.geocode.wait()
                url, place_id = self.places.find_photo(activity.location, prefs.destination)
                if url:
                    activity.photo_url = url
                    activity.place_id = activity.place_id or place_id

    def _link_transport(self, day: Day, prefs: TripPreferences) -> None:
        calculator = self._estimates_only if self._out_of_time() else self.transport
        country = country_code_for(prefs.destination)
        activities = day.activities
        for current, following in zip(activities, activities[1:]):
            if current.coordinates is None or following.coordinates is None:
                current.transport_to_next = None
                continue
            self.limiters.transport.wait()
            current.transport_to_next = calculator.compute(
                current.coordinates, following.coordinates, prefs.city_name, country
            )
        if activities:
            activities[-1].transport_to_next = None

    # ── internals ─────────────────────────────────────────────────────────

    def _wants_mosques(self, prefs: TripPreferences) -> bool:
        return (
            prefs.dietary.halal
            and config.ENABLE_MOSQUE_ENRICHMENT
            and not self._out_of_time()
        )

    def _out_of_time(self) -> bool:
        return self._deadline_at is not None and self._clock() > self._deadline_at
