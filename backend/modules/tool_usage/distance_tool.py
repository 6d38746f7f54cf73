"""
modules/tool_usage/distance_tool.py
-------------------------------------
Great-circle distances and speed-based travel-time estimates.
No external HTTP calls are made.
"""

from __future__ import annotations
import math

from schemas.itinerary import Coordinates

# ---------------------------------------------------------------------------
# Pure maths
# ---------------------------------------------------------------------------

_EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points (Haversine formula) in km."""
    r = _EARTH_RADIUS_KM
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    return 2 * r * math.asin(math.sqrt(a))


def distance_m(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two Coordinates in metres."""
    return haversine_km(a.lat, a.lng, b.lat, b.lng) * 1000.0


def minutes_at_speed(metres: float, speed_kmh: float) -> int:
    """Travel time in whole minutes (rounded up) at a constant speed."""
    return math.ceil((metres / (speed_kmh * 1000.0)) * 60.0)


def format_km(metres: float) -> str:
    """1234.0 → '1.2 km'"""
    return f"{metres / 1000.0:.1f} km"


def format_away(metres: float) -> str:
    """Distance text shown on restaurant cards: '450 m away' / '1.2 km away'."""
    if metres >= 1000:
        return f"{metres / 1000.0:.1f} km away"
    return f"{round(metres)} m away"
