"""
modules/tool_usage/restaurant_tool.py
---------------------------------------
Real restaurant discovery for meal slots, backed by Google Places.

Search is a chain of SearchStrategy levels tried strictly in sequence, each
widening the radius and relaxing rating / budget:

    level  radius   min rating  budget
      1     2 km      4.0       strict
      2     5 km      4.0       strict
      3    10 km      3.5       strict
      4    10 km      3.5       any
      5    15 km      3.0       any
      6    20 km      any       any

Results accumulate (deduplicated by place_id) and the chain stops as soon as
RESTAURANT_MAX_OPTIONS unique restaurants are collected. If the chain is
exhausted first, one Text Search by city name is tried. Never returns
placeholders: fewer than three (or zero) real restaurants is a valid answer.

Exclusions (ids already used today, or for this meal type on earlier days)
are removed at every level, including the text-search fallback.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Iterable, Optional
from urllib.parse import quote

import config
from modules.errors import EnrichmentError, ServiceUnavailableError
from modules.pipeline.rate_limiter import NoDelayRateLimiter, RateLimiter
from modules.tool_usage.distance_tool import distance_m, format_away
from modules.tool_usage.places_tool import PlacesClient, first_photo_reference, place_coordinates
from schemas.itinerary import Coordinates, Restaurant
from schemas.preferences import DietaryPreferences

logger = logging.getLogger(__name__)


# ── Strategy chain ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SearchStrategy:
    level: int
    radius_m: int
    min_rating: float
    strict_budget: bool
    description: str


SEARCH_STRATEGIES: tuple[SearchStrategy, ...] = (
    SearchStrategy(1,  2_000, 4.0, True,  "Primary (2km, 4.0+, strict budget)"),
    SearchStrategy(2,  5_000, 4.0, True,  "Fallback 1 (5km, 4.0+, strict budget)"),
    SearchStrategy(3, 10_000, 3.5, True,  "Fallback 2 (10km, 3.5+, strict budget)"),
    SearchStrategy(4, 10_000, 3.5, False, "Fallback 3 (10km, 3.5+, any budget)"),
    SearchStrategy(5, 15_000, 3.0, False, "Fallback 4 (15km, 3.0+, any budget)"),
    SearchStrategy(6, 20_000, 0.0, False, "Ultimate fallback (20km, any rating, any budget)"),
)

# ── Budget level → accepted Google price_level values ─────────────────────────
BUDGET_PRICE_LEVELS: dict[str, tuple[int, ...]] = {
    "low":    (1, 2),   # $ and $$
    "medium": (2, 3),   # $$ and $$$
    "high":   (3, 4),   # $$$ and $$$$
}

# ── Halal exclusions (places serving alcohol) ─────────────────────────────────
NON_HALAL_TYPES: frozenset[str] = frozenset({
    "bar", "pub", "night_club", "nightclub", "wine_bar",
    "cocktail_bar", "brewery", "liquor_store",
})
NON_HALAL_KEYWORDS: tuple[str, ...] = (
    "bar", "pub", "tavern", "ale house", "wine", "cocktail", "brewery",
    "beer garden", "whisky", "whiskey", "gin", "vodka", "liquor",
)

# ── Google type / name fragment → display cuisine ─────────────────────────────
_CUISINE_MAP: dict[str, str] = {
    "japanese_restaurant":      "Japanese",
    "italian_restaurant":       "Italian",
    "chinese_restaurant":       "Chinese",
    "french_restaurant":        "French",
    "indian_restaurant":        "Indian",
    "thai_restaurant":          "Thai",
    "korean_restaurant":        "Korean",
    "mexican_restaurant":       "Mexican",
    "vietnamese_restaurant":    "Vietnamese",
    "american_restaurant":      "American",
    "mediterranean_restaurant": "Mediterranean",
    "cafe":                     "Cafe",
    "bakery":                   "Bakery",
    "bar":                      "Bar",
    "fast_food_restaurant":     "Fast Food",
    "ramen":                    "Ramen",
    "sushi":                    "Sushi",
    "pizza":                    "Pizza",
    "burger":                   "Burger",
}

_MEAL_EXTRA_KEYWORDS: dict[str, tuple[str, ...]] = {
    "breakfast": ("cafe", "coffee", "bakery"),
    "lunch":     ("casual dining", "quick lunch"),
    "dinner":    ("fine dining", "dinner restaurant"),
}

_WALKING_M_PER_MIN: float = 80.0


# ── Pure helpers ──────────────────────────────────────────────────────────────

def build_search_keywords(
    meal_type: str, dietary: DietaryPreferences, interests: Iterable[str]
) -> str:
    """Keyword string for Nearby Search: meal, dietary synonyms, interests, meal extras."""
    interests = list(interests or [])
    keywords: list[str] = [meal_type]
    if dietary.halal:
        keywords += ["halal", "muslim", "islamic", "muslim-friendly"]
    if dietary.vegetarian:
        keywords += ["vegetarian", "veg"]
    if dietary.vegan:
        keywords += ["vegan", "plant-based"]
    if "Food" in interests:
        keywords += ["local cuisine", "authentic"]
    if "Culture" in interests:
        keywords.append("traditional")
    keywords += list(_MEAL_EXTRA_KEYWORDS.get(meal_type, ()))
    return " ".join(keywords)


def _has_non_halal_type(place: dict) -> bool:
    return any(str(t).lower() in NON_HALAL_TYPES for t in (place.get("types") or []))


def passes_dietary(place: dict, dietary: DietaryPreferences) -> bool:
    types = [str(t).lower() for t in (place.get("types") or [])]
    name = (place.get("name") or "").lower()
    vicinity = (place.get("vicinity") or "").lower()

    if dietary.halal:
        if _has_non_halal_type(place):
            return False
        if any(k in name for k in NON_HALAL_KEYWORDS):
            return False

    if dietary.nut_allergy:
        if "nut" in name or "almond" in name or "peanut" in vicinity:
            return False

    if dietary.seafood_allergy:
        if (
            "seafood_restaurant" in types
            or "seafood" in name
            or "sushi" in name
            or "fish" in name
        ):
            return False

    return True


def passes_budget(place: dict, budget_level: str) -> bool:
    price_level = place.get("price_level")
    if not price_level:
        return True
    return price_level in BUDGET_PRICE_LEVELS.get(budget_level, ())


def rank_score(place: dict, origin: Coordinates, radius_m: float) -> float:
    """rating×0.4 + ln(max(reviews,1))×0.3 + proximity×0.3"""
    coords = place_coordinates(place) or origin
    dist = distance_m(origin, coords)
    rating = float(place.get("rating") or 0.0)
    reviews = int(place.get("user_ratings_total") or 0)
    return (
        rating * 0.4
        + math.log(max(reviews, 1)) * 0.3
        + ((radius_m - dist) / radius_m) * 0.3
    )


def extract_cuisine(types: Iterable[str], name: str) -> list[str]:
    detected: list[str] = []
    for t in types or []:
        cuisine = _CUISINE_MAP.get(t)
        if cuisine and cuisine not in detected:
            detected.append(cuisine)
    lowered = (name or "").lower()
    for key, cuisine in _CUISINE_MAP.items():
        if key.replace("_restaurant", "") in lowered and cuisine not in detected:
            detected.append(cuisine)
    return detected or ["Restaurant"]


def detect_badges(place: dict) -> list[str]:
    text = f"{place.get('name', '')} {place.get('vicinity', '')}".lower()
    badges: list[str] = []
    if "halal" in text or "muslim" in text:
        badges.append("halal")
    if "vegetarian" in text or "vegan" in text:
        badges.append("vegetarian")
    if "michelin" in text:
        badges.append("michelin")
    if float(place.get("rating") or 0) >= 4.7 and int(place.get("user_ratings_total") or 0) > 1000:
        badges.append("highly-rated")
    return badges


def _merge_unique(into: list[Restaurant], found: Iterable[Restaurant]) -> None:
    seen = {r.place_id for r in into}
    for r in found:
        if r.place_id not in seen:
            into.append(r)
            seen.add(r.place_id)


# ── RestaurantFinder ──────────────────────────────────────────────────────────

class RestaurantFinder:
    """Progressive-fallback restaurant search; see module docstring."""

    def __init__(
        self,
        places: Optional[PlacesClient] = None,
        limiter: Optional[RateLimiter] = None,
        strategies: tuple[SearchStrategy, ...] = SEARCH_STRATEGIES,
        max_results: Optional[int] = None,
    ) -> None:
        self.places = places or PlacesClient()
        self.limiter = limiter or NoDelayRateLimiter()
        self.strategies = strategies
        self.max_results = max_results or config.RESTAURANT_MAX_OPTIONS

    @property
    def available(self) -> bool:
        return self.places.available

    def search(
        self,
        location: Coordinates,
        meal_type: str,
        budget_level: str,
        dietary: DietaryPreferences,
        interests: Iterable[str] = (),
        exclude_place_ids: Iterable[str] = (),
        city_name: str = "",
    ) -> list[Restaurant]:
        """Return up to max_results real restaurants, best first."""
        if not self.available:
            logger.warning("No Google API key available - cannot search for restaurants")
            return []

        excluded = frozenset(exclude_place_ids or ())
        keywords = build_search_keywords(meal_type, dietary, interests)
        found: list[Restaurant] = []

        for strategy in self.strategies:
            self.limiter.wait()
            try:
                level_results = self._search_level(
                    strategy, location, keywords, budget_level, dietary, excluded
                )
            except ServiceUnavailableError as exc:
                logger.warning("Restaurant search unavailable: %s", exc)
                return found[: self.max_results]
            except EnrichmentError as exc:
                logger.warning("Restaurant search level %d failed: %s", strategy.level, exc)
                level_results = []

            _merge_unique(found, level_results)
            if self._enough(found):
                logger.info(
                    "Found %d %s restaurants at level %d", len(found), meal_type, strategy.level
                )
                return found[: self.max_results]

        if city_name:
            logger.info("Trying text search for %s in %s", meal_type, city_name)
            try:
                _merge_unique(
                    found,
                    self._text_search(location, meal_type, city_name, dietary, excluded),
                )
            except EnrichmentError as exc:
                logger.warning("Restaurant text search failed: %s", exc)

        if not found:
            logger.warning("No restaurants found for %s", meal_type)
        return found[: self.max_results]

    def _enough(self, found: list[Restaurant]) -> bool:
        return len(found) >= self.max_results

    def _search_level(
        self,
        strategy: SearchStrategy,
        location: Coordinates,
        keywords: str,
        budget_level: str,
        dietary: DietaryPreferences,
        excluded: frozenset[str],
    ) -> list[Restaurant]:
        places = self.places.nearby(location, strategy.radius_m, "restaurant", keywords)
        candidates = [
            p for p in places
            if float(p.get("rating") or 0.0) >= strategy.min_rating
            and passes_dietary(p, dietary)
            and p.get("place_id") not in excluded
            and p.get("place_id")
        ]
        if strategy.strict_budget:
            candidates = [p for p in candidates if passes_budget(p, budget_level)]

        candidates.sort(key=lambda p: rank_score(p, location, strategy.radius_m), reverse=True)
        top = candidates[: config.RESTAURANT_LEVEL_TOP_N]
        return [self.enrich(p, location) for p in top]

    def _text_search(
        self,
        location: Coordinates,
        meal_type: str,
        city_name: str,
        dietary: DietaryPreferences,
        excluded: frozenset[str],
    ) -> list[Restaurant]:
        prefix = "halal " if dietary.halal else ""
        query = f"{prefix}{meal_type} restaurant in {city_name}"
        places = [
            p for p in self.places.text_search(query, "restaurant")
            if p.get("place_id") and p.get("place_id") not in excluded
        ]
        if not places:
            logger.info("Text search returned no results for %r", query)
            return []

        filtered = [p for p in places if passes_dietary(p, dietary)]
        if not filtered and dietary.halal:
            # Relaxed: name keywords dropped, alcohol-serving place types still out
            logger.info("No halal results from text search, relaxing name filter")
            relaxed = replace(dietary, halal=False)
            filtered = [
                p for p in places
                if passes_dietary(p, relaxed) and not _has_non_halal_type(p)
            ]

        return [self.enrich(p, location) for p in filtered[: self.max_results]]

    def enrich(self, place: dict, origin: Coordinates) -> Restaurant:
        coords = place_coordinates(place) or origin
        dist = distance_m(origin, coords)
        ref = first_photo_reference(place)
        open_now = (place.get("opening_hours") or {}).get("open_now") is not False
        place_id = place["place_id"]
        name = place.get("name", "")
        return Restaurant(
            place_id=place_id,
            name=name,
            vicinity=place.get("vicinity") or "",
            rating=float(place.get("rating") or 0.0),
            user_ratings_total=int(place.get("user_ratings_total") or 0),
            price_level=int(place.get("price_level") or 2),
            cuisine=tuple(extract_cuisine(place.get("types") or [], name)),
            open_now=open_now,
            distance=format_away(dist),
            walking_time=f"{math.ceil(dist / _WALKING_M_PER_MIN)} min walk",
            badges=tuple(detect_badges(place)),
            coordinates=coords,
            photo_url=self.places.photo_url(ref, config.RESTAURANT_PHOTO_MAX_WIDTH) if ref else None,
            google_maps_url=(
                "https://www.google.com/maps/search/?api=1"
                f"&query={quote(name)}&query_place_id={place_id}"
            ),
        )
