"""
modules/tool_usage/stub_responses.py
--------------------------------------
Google-shaped canned responses used when USE_STUB_GOOGLE=true.

respond(url, params) returns exactly the JSON body the real endpoint would,
restricted to the fields the enrichment tools read. Results are deterministic
for a given query so offline runs and demos are reproducible:

  geocode        known landmarks from _KNOWN_PLACES; anything else is placed
                 at a stable md5-derived offset around the city centre
  nearby search  eight restaurants around the requested location (one of
                 them a cocktail bar, so halal filtering is visible), or
                 mosques for type=mosque
  text search    three restaurants / one photo match
  directions     one leg whose duration follows the requested mode's speed
"""

from __future__ import annotations
import hashlib
import math
from typing import Any

from google_places_client import (
    DIRECTIONS_URL,
    GEOCODE_URL,
    NEARBY_SEARCH_URL,
    TEXT_SEARCH_URL,
)
from modules.tool_usage.distance_tool import haversine_km

# Tokyo Station
_DEFAULT_CENTRE: tuple[float, float] = (35.6812, 139.7671)

_KNOWN_PLACES: dict[str, tuple[float, float]] = {
    "narita airport":       (35.7720, 140.3929),
    "haneda airport":       (35.5494, 139.7798),
    "senso-ji":             (35.7148, 139.7967),
    "shibuya crossing":     (35.6595, 139.7005),
    "tokyo tower":          (35.6586, 139.7454),
    "meiji jingu":          (35.6764, 139.6993),
    "tokyo":                (35.6762, 139.6503),
    "eiffel tower":         (48.8584, 2.2945),
    "louvre museum":        (48.8606, 2.3376),
    "paris":                (48.8566, 2.3522),
    "petronas towers":      (3.1579, 101.7116),
    "kuala lumpur":         (3.1390, 101.6869),
    "dutch square":         (2.1944, 102.2490),
    "melaka":               (2.1896, 102.2501),
}

# (name, types, rating, reviews, price_level)
_RESTAURANT_TEMPLATES: tuple[tuple[str, list[str], float, int, int], ...] = (
    ("Sakura {meal} House",     ["japanese_restaurant", "restaurant"], 4.6, 1850, 2),
    ("Harbour Cocktail Bar",    ["bar", "restaurant"],                 4.8, 2300, 3),
    ("Nasi Kandar Halal Corner", ["restaurant"],                       4.4,  640, 1),
    ("Green Leaf Vegetarian",   ["vegetarian_restaurant", "restaurant"], 4.3, 410, 2),
    ("Old Town Cafe",           ["cafe", "restaurant"],                4.2,  980, 1),
    ("Trattoria Roma",          ["italian_restaurant", "restaurant"],  4.5, 1210, 3),
    ("Blue Fin Seafood Grill",  ["seafood_restaurant", "restaurant"],  4.1,  530, 3),
    ("Spice Route Kitchen",     ["indian_restaurant", "restaurant"],   3.8,  220, 2),
)

_MOSQUE_TEMPLATES: tuple[tuple[str, float], ...] = (
    ("Masjid Al-Noor", 4.7),
    ("Central Mosque", 4.6),
    ("Masjid Jamek", 4.5),
)

_MODE_SPEEDS_KMH: dict[str, float] = {
    "walking": 5.0,
    "bicycling": 15.0,
    "transit": 30.0,
    "driving": 40.0,
}


def _digest(text: str) -> int:
    return int(hashlib.md5(text.lower().encode("utf-8")).hexdigest(), 16)


def _offset(text: str, spread_deg: float = 0.05) -> tuple[float, float]:
    """Stable pseudo-random (dlat, dlng) within ±spread_deg for *text*."""
    h = _digest(text)
    dlat = ((h & 0xFFFF) / 0xFFFF - 0.5) * 2 * spread_deg
    dlng = (((h >> 16) & 0xFFFF) / 0xFFFF - 0.5) * 2 * spread_deg
    return dlat, dlng


def _parse_latlng(value: str) -> tuple[float, float]:
    try:
        lat, lng = str(value).split(",", 1)
        return float(lat), float(lng)
    except ValueError:
        return _DEFAULT_CENTRE


def _geometry(lat: float, lng: float) -> dict:
    return {"location": {"lat": round(lat, 6), "lng": round(lng, 6)}}


# ── Geocoding ─────────────────────────────────────────────────────────────────

def _geocode(params: dict) -> dict:
    address = str(params.get("address", "")).strip()
    if not address:
        return {"status": "INVALID_REQUEST", "results": []}

    lowered = address.lower()
    for name, (lat, lng) in _KNOWN_PLACES.items():
        if lowered.startswith(name):
            return {"status": "OK", "results": [{"geometry": _geometry(lat, lng)}]}

    centre = _DEFAULT_CENTRE
    for name, coords in _KNOWN_PLACES.items():
        if name in lowered:
            centre = coords
            break
    dlat, dlng = _offset(address)
    return {
        "status": "OK",
        "results": [{"geometry": _geometry(centre[0] + dlat, centre[1] + dlng)}],
    }


# ── Places ────────────────────────────────────────────────────────────────────

def _restaurant(i: int, meal: str, lat: float, lng: float, radius_m: float) -> dict:
    name, types, rating, reviews, price = _RESTAURANT_TEMPLATES[i]
    name = name.format(meal=meal.capitalize() if meal else "Dining")
    # ring the results around the location, inside the search radius
    dist_deg = min(radius_m, 1_500.0) / 111_000.0 * (0.2 + 0.1 * i)
    angle = i * (2 * math.pi / len(_RESTAURANT_TEMPLATES))
    return {
        "place_id": f"stub-{meal or 'dining'}-{i}",
        "name": name,
        "vicinity": f"{i + 1}-{i + 3} Market Street",
        "rating": rating,
        "user_ratings_total": reviews,
        "price_level": price,
        "types": types + ["food", "point_of_interest", "establishment"],
        "geometry": _geometry(lat + dist_deg * math.cos(angle), lng + dist_deg * math.sin(angle)),
        "opening_hours": {"open_now": True},
        "photos": [{"photo_reference": f"stub-photo-{meal or 'dining'}-{i}"}],
    }


def _meal_from_keyword(keyword: str) -> str:
    for meal in ("breakfast", "lunch", "dinner"):
        if meal in keyword.lower():
            return meal
    return ""


def _nearby(params: dict) -> dict:
    lat, lng = _parse_latlng(params.get("location", ""))
    radius = float(params.get("radius", 2000) or 2000)
    if params.get("type") == "mosque":
        results = [
            {
                "place_id": f"stub-mosque-{i}",
                "name": name,
                "vicinity": f"{10 + i} Jalan Masjid",
                "rating": rating,
                "types": ["mosque", "place_of_worship", "establishment"],
                "geometry": _geometry(lat + 0.003 * (i + 1), lng - 0.002 * (i + 1)),
            }
            for i, (name, rating) in enumerate(_MOSQUE_TEMPLATES)
        ]
        return {"status": "OK", "results": results}

    meal = _meal_from_keyword(str(params.get("keyword", "")))
    results = [_restaurant(i, meal, lat, lng, radius) for i in range(len(_RESTAURANT_TEMPLATES))]
    return {"status": "OK", "results": results}


def _text_search(params: dict) -> dict:
    query = str(params.get("query", "")).strip()
    if not query:
        return {"status": "INVALID_REQUEST", "results": []}

    geo = _geocode({"address": query})["results"][0]["geometry"]["location"]
    if "restaurant" in query.lower():
        meal = _meal_from_keyword(query)
        results = []
        for i in (0, 2, 4):
            place = _restaurant(i, meal, geo["lat"], geo["lng"], 2_000)
            place["place_id"] = f"stub-text-{meal or 'dining'}-{i}"
            place["formatted_address"] = place.pop("vicinity")
            results.append(place)
        return {"status": "OK", "results": results}

    return {
        "status": "OK",
        "results": [{
            "place_id": f"stub-place-{_digest(query) % 10**8}",
            "name": query.split(",")[0],
            "formatted_address": query,
            "geometry": _geometry(geo["lat"], geo["lng"]),
            "photos": [{"photo_reference": f"stub-photo-{_digest(query) % 10**8}"}],
        }],
    }


# ── Directions ────────────────────────────────────────────────────────────────

def _directions(params: dict) -> dict:
    o_lat, o_lng = _parse_latlng(params.get("origin", ""))
    d_lat, d_lng = _parse_latlng(params.get("destination", ""))
    mode = str(params.get("mode", "driving"))
    km = haversine_km(o_lat, o_lng, d_lat, d_lng) * 1.3  # road factor
    seconds = int(math.ceil(km / _MODE_SPEEDS_KMH.get(mode, 40.0) * 3600))
    minutes = max(1, math.ceil(seconds / 60))

    steps: list[dict[str, Any]] = []
    if mode == "transit":
        steps.append({
            "travel_mode": "TRANSIT",
            "transit_details": {
                "line": {
                    "name": "Metro Line 1",
                    "short_name": "M1",
                    "vehicle": {"name": "Subway", "type": "SUBWAY"},
                },
            },
        })

    leg = {
        "duration": {"text": f"{minutes} min" if minutes == 1 else f"{minutes} mins", "value": seconds},
        "distance": {"text": f"{km:.1f} km", "value": int(km * 1000)},
        "steps": steps,
    }
    return {"status": "OK", "routes": [{"legs": [leg]}]}


_HANDLERS = {
    GEOCODE_URL: _geocode,
    NEARBY_SEARCH_URL: _nearby,
    TEXT_SEARCH_URL: _text_search,
    DIRECTIONS_URL: _directions,
}


def respond(url: str, params: dict) -> dict:
    handler = _HANDLERS.get(url)
    if handler is None:
        return {"status": "INVALID_REQUEST", "error_message": f"no stub for {url}"}
    return handler(dict(params))
