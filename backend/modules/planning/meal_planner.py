"""
modules/planning/meal_planner.py
----------------------------------
Meal-time scheduling and meal insertion for one day.

determine_meal_times() is a pure function of the day's activities:

  empty day                 → 08:00 / 12:30 / 19:00
  breakfast   arrival day   → none
              first ≥ 09:00 → 08:00
              first ≥ 08:00 → first − 30 min
              otherwise     → none
  departure day             → lunch 14:00; dinner 19:00 unless the
                              departure is ≤ 14:00 (too early) or in
                              [18:00, 20:00) (no time)
  lunch       a gap spanning 11:00–14:00 → 12:30
              else the first activity starting in [11:00, 14:00] with
              ≥ 60 min to its successor → midpoint of that gap
              else 12:30
  dinner      last < 18:00 → 19:00
              last ≤ 20:00 → last + 30 min
              later        → max(last + 30 min, 20:30)

MealPlanner.insert_meals_for_day() searches restaurants for each slot and
inserts a meal Activity per slot that found at least one restaurant. A meal
the day already plans is backed with the restaurants found instead.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from modules.errors import MalformedUpstreamInputError
from modules.planning.activity_classifier import (
    ActivityRole,
    classify_activity,
    is_meal,
    meal_type_of,
)
from modules.planning.clock import to_hhmm, to_minutes
from modules.tool_usage.geocoding_tool import Geocoder
from modules.tool_usage.restaurant_tool import RestaurantFinder
from schemas.itinerary import MEAL_TYPES, Activity, Coordinates, Restaurant, RestaurantExclusions
from schemas.preferences import TripPreferences

logger = logging.getLogger(__name__)

# ── Scheduling constants (minutes from midnight) ──────────────────────────────
DEFAULT_BREAKFAST: int = 8 * 60
DEFAULT_LUNCH:     int = 12 * 60 + 30
DEFAULT_DINNER:    int = 19 * 60
LUNCH_WINDOW_START: int = 11 * 60
LUNCH_WINDOW_END:   int = 14 * 60
DEPARTURE_LUNCH:    int = 14 * 60
DINNER_EARLY_LIMIT: int = 18 * 60
DINNER_LATE_LIMIT:  int = 20 * 60
LATEST_DINNER_FLOOR: int = 20 * 60 + 30

_MEAL_ICONS: dict[str, str] = {"breakfast": "🍳", "lunch": "🍜", "dinner": "🍱"}
_PRICE_TEXT: dict[int, str] = {1: "$", 2: "$$", 3: "$$$", 4: "$$$$"}


@dataclass(frozen=True)
class MealTimes:
    breakfast: Optional[str] = None
    lunch: Optional[str] = None
    dinner: Optional[str] = None

    def get(self, meal_type: str) -> Optional[str]:
        return getattr(self, meal_type)


def departure_day_dinner(departure_minutes: int) -> Optional[int]:
    """Dinner slot on a departure day, or None when it is skipped."""
    if departure_minutes <= DEPARTURE_LUNCH:
        return None
    if DINNER_EARLY_LIMIT <= departure_minutes < DINNER_LATE_LIMIT:
        return None
    return DEFAULT_DINNER


def _breakfast(first_minutes: int) -> Optional[int]:
    if first_minutes >= 9 * 60:
        return DEFAULT_BREAKFAST
    if first_minutes >= 8 * 60:
        return first_minutes - 30
    return None


def _lunch(times: list[int]) -> int:
    pairs = list(zip(times, times[1:]))
    if any(cur <= LUNCH_WINDOW_START and nxt >= LUNCH_WINDOW_END for cur, nxt in pairs):
        return DEFAULT_LUNCH
    for cur, nxt in pairs:
        gap = nxt - cur
        if LUNCH_WINDOW_START <= cur <= LUNCH_WINDOW_END and gap >= 60:
            return cur + gap // 2
    return DEFAULT_LUNCH


def _dinner(last_minutes: int) -> int:
    if last_minutes < DINNER_EARLY_LIMIT:
        return DEFAULT_DINNER
    if last_minutes <= DINNER_LATE_LIMIT:
        return last_minutes + 30
    return max(last_minutes + 30, LATEST_DINNER_FLOOR)


def determine_meal_times(activities: list[Activity]) -> MealTimes:
    """Candidate breakfast / lunch / dinner clock-times for a day (pure)."""
    if not activities:
        return MealTimes(
            breakfast=to_hhmm(DEFAULT_BREAKFAST),
            lunch=to_hhmm(DEFAULT_LUNCH),
            dinner=to_hhmm(DEFAULT_DINNER),
        )

    first, last = activities[0], activities[-1]
    times = [to_minutes(a.time) for a in activities]
    first_minutes, last_minutes = times[0], times[-1]

    arrival_day = classify_activity(first) is ActivityRole.ARRIVAL
    departure_day = classify_activity(last) is ActivityRole.DEPARTURE

    breakfast = None if arrival_day else _breakfast(first_minutes)

    if departure_day:
        dinner = departure_day_dinner(last_minutes)
        return MealTimes(
            breakfast=to_hhmm(breakfast) if breakfast is not None else None,
            lunch=to_hhmm(DEPARTURE_LUNCH),
            dinner=to_hhmm(dinner) if dinner is not None else None,
        )

    return MealTimes(
        breakfast=to_hhmm(breakfast) if breakfast is not None else None,
        lunch=to_hhmm(_lunch(times)),
        dinner=to_hhmm(_dinner(last_minutes)),
    )


def _describe(top: Restaurant) -> str:
    price = _PRICE_TEXT.get(top.price_level, "$$")
    return f"{', '.join(top.cuisine)} • {price} • {top.distance}"


def create_meal_activity(meal_type: str, time: str, restaurants: list[Restaurant]) -> Activity:
    top = restaurants[0]
    return Activity(
        id=f"meal-{meal_type}-{top.place_id}",
        time=time,
        type="meal",
        meal_type=meal_type,
        title=f"{meal_type.capitalize()} at {top.name}",
        location=top.vicinity,
        description=_describe(top),
        coordinates=top.coordinates,
        restaurant_options=list(restaurants),
        icon=_MEAL_ICONS[meal_type],
    )


def attach_restaurants(meal: Activity, meal_type: str, restaurants: list[Restaurant]) -> Activity:
    """Back an already-planned meal with restaurants; its time and title stay."""
    top = restaurants[0]
    return replace(
        meal,
        meal_type=meal_type,
        restaurant_options=list(restaurants),
        coordinates=meal.coordinates or top.coordinates,
        description=meal.description or _describe(top),
        icon=meal.icon or _MEAL_ICONS[meal_type],
    )


def find_insert_position(activities: list[Activity], time: str) -> int:
    """Index of the first activity strictly later than *time*."""
    target = to_minutes(time)
    for i, activity in enumerate(activities):
        if to_minutes(activity.time) > target:
            return i
    return len(activities)


@dataclass
class MealInsertResult:
    activities: list[Activity]
    used: RestaurantExclusions = field(default_factory=RestaurantExclusions)


class MealPlanner:
    """Inserts restaurant-backed meal activities into one day."""

    def __init__(self, finder: RestaurantFinder, geocoder: Optional[Geocoder] = None) -> None:
        self.finder = finder
        self.geocoder = geocoder

    def insert_meals_for_day(
        self,
        activities: list[Activity],
        day_number: int,
        prefs: TripPreferences,
        meal_times: MealTimes,
        exclusions: Optional[RestaurantExclusions] = None,
    ) -> MealInsertResult:
        """
        Search and insert breakfast / lunch / dinner for one day.

        Slot anchors come from the non-meal activities: breakfast near the
        first, lunch near the middle, dinner near the last. A meal the day
        already plans is searched at its own time and place and gets the
        restaurants attached; it is left alone once it has restaurant options.
        """
        exclusions = exclusions or RestaurantExclusions()
        used = RestaurantExclusions()
        result = list(activities)

        planned = [a for a in activities if is_meal(a)]
        backed = {meal_type_of(a) for a in planned if a.restaurant_options}
        unbacked: dict[str, Activity] = {}
        for meal in planned:
            meal_type = meal_type_of(meal)
            if meal_type and meal_type not in backed:
                unbacked.setdefault(meal_type, meal)

        non_meals = [a for a in activities if not is_meal(a)]
        if not non_meals and not unbacked:
            return MealInsertResult(activities=result, used=used)

        anchors: dict[str, Activity] = {}
        if non_meals:
            anchors = {
                "breakfast": non_meals[0],
                "lunch":     non_meals[len(non_meals) // 2],
                "dinner":    non_meals[-1],
            }
        used_today: list[str] = []
        meals: list[Activity] = []

        for meal_type in MEAL_TYPES:
            if meal_type in backed:
                logger.debug("Day %d: %s already has restaurants, not searching", day_number, meal_type)
                continue
            existing = unbacked.get(meal_type)
            time = existing.time if existing is not None else meal_times.get(meal_type)
            if not time:
                continue

            try:
                location = self._slot_location(existing, anchors.get(meal_type), prefs.destination)
            except MalformedUpstreamInputError as exc:
                logger.warning("Day %d: %s, skipping %s", day_number, exc, meal_type)
                continue
            if location is None:
                logger.warning("Day %d: no location for %s, skipping", day_number, meal_type)
                continue

            restaurants = self.finder.search(
                location,
                meal_type,
                prefs.budget,
                prefs.dietary,
                prefs.interests,
                exclude_place_ids=used_today + exclusions.for_meal(meal_type),
                city_name=prefs.city_name,
            )
            if not restaurants:
                continue

            if existing is not None:
                idx = next(i for i, a in enumerate(result) if a is existing)
                result[idx] = attach_restaurants(existing, meal_type, restaurants)
            else:
                meals.append(create_meal_activity(meal_type, time, restaurants))
            ids = [r.place_id for r in restaurants]
            used_today.extend(ids)
            getattr(used, meal_type).extend(ids)

        for meal in meals:
            result.insert(find_insert_position(result, meal.time), meal)

        return MealInsertResult(activities=result, used=used)

    def _slot_location(
        self,
        existing: Optional[Activity],
        anchor: Optional[Activity],
        destination: str,
    ) -> Optional[Coordinates]:
        if existing is not None and existing.coordinates is not None:
            return existing.coordinates
        if anchor is None:
            return None
        return self._anchor_location(anchor, destination)

    def _anchor_location(self, anchor: Activity, destination: str) -> Optional[Coordinates]:
        if anchor.coordinates is not None:
            return anchor.coordinates
        if not anchor.location.strip():
            raise MalformedUpstreamInputError(f"activity {anchor.title!r} has no location")
        if self.geocoder is None:
            return None
        coords = self.geocoder.resolve(anchor.location, destination)
        if coords is not None:
            anchor.coordinates = coords
        return coords
