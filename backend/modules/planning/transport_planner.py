"""
modules/planning/transport_planner.py
---------------------------------------
Infers how a traveller gets from one activity to the next and estimates the
leg's duration, distance and cost.

Mode heuristic (great-circle distance d):
  d < 800 m              → walking
  800 m ≤ d < 20 km      → transit in a transit-rich city, else taxi
  d ≥ 20 km              → driving

Estimates: constant average speed per mode; cost from per-country fare
tables. When a DirectionsClient is available it is tried first and its leg
text supersedes the estimate (transit lines refine mode name + icon).
compute() never raises.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Optional

from modules.errors import EnrichmentError
from modules.tool_usage.directions_tool import DirectionsClient, RouteLeg
from modules.tool_usage.distance_tool import distance_m, format_km, minutes_at_speed
from schemas.itinerary import Coordinates, TransportationDetails

logger = logging.getLogger(__name__)


# ── Thresholds (metres) ───────────────────────────────────────────────────────
WALKING_MAX_M: float = 800.0
URBAN_MAX_M:   float = 20_000.0

# ── Average speeds (km/h) ─────────────────────────────────────────────────────
_SPEEDS_KMH: dict[str, float] = {
    "walking": 5.0,
    "transit": 30.0,
    "taxi":    40.0,
    "driving": 50.0,
}

TRANSPORT_ICONS: dict[str, str] = {
    "walking": "🚶",
    "transit": "🚇",
    "bus":     "🚌",
    "taxi":    "🚕",
    "driving": "🚗",
    "bicycle": "🚴",
    "ferry":   "⛴️",
    "flight":  "✈️",
    "train":   "🚄",
}

_MODE_NAMES: dict[str, str] = {
    "walking": "Walk",
    "transit": "Public Transit",
    "taxi":    "Taxi",
    "driving": "Drive",
    "bicycle": "Bicycle",
    "ferry":   "Ferry",
    "flight":  "Flight",
    "train":   "Train",
}

TRANSIT_CITIES: tuple[str, ...] = (
    "Tokyo", "Paris", "London", "New York", "Singapore",
    "Hong Kong", "Seoul", "Bangkok", "Kuala Lumpur", "Dubai",
    "Barcelona", "Madrid", "Berlin", "Rome", "Milan",
)

# Flat single-ride public transport fares
TRANSIT_FARES: dict[str, str] = {
    "JP": "¥200-400",
    "FR": "€1.90",
    "GB": "£2.50",
    "US": "$2.75",
    "SG": "S$1.50",
    "MY": "RM2-4",
    "TH": "฿15-45",
    "AE": "AED3-7",
    "HK": "HK$10",
    "KR": "₩1,350",
    "ES": "€2.40",
    "DE": "€3.00",
    "IT": "€1.50",
    "default": "$2-5",
}


@dataclass(frozen=True)
class TaxiFare:
    base: float
    per_km: float
    currency: str


TAXI_FARES: dict[str, TaxiFare] = {
    "JP": TaxiFare(500, 80, "¥"),
    "FR": TaxiFare(7, 1.5, "€"),
    "GB": TaxiFare(3, 2, "£"),
    "US": TaxiFare(3, 2, "$"),
    "SG": TaxiFare(3.5, 0.55, "S$"),
    "MY": TaxiFare(4, 0.8, "RM"),
    "TH": TaxiFare(35, 7, "฿"),
    "AE": TaxiFare(12, 1.8, "AED"),
    "default": TaxiFare(5, 1.5, "$"),
}

# Destination substring → ISO country code
_COUNTRY_CODES: dict[str, str] = {
    "Tokyo": "JP", "Japan": "JP", "Osaka": "JP", "Kyoto": "JP",
    "Paris": "FR", "France": "FR", "Lyon": "FR",
    "London": "GB", "UK": "GB", "United Kingdom": "GB",
    "New York": "US", "USA": "US", "Los Angeles": "US", "San Francisco": "US",
    "Singapore": "SG",
    "Kuala Lumpur": "MY", "Malaysia": "MY", "Penang": "MY",
    "Bangkok": "TH", "Thailand": "TH", "Phuket": "TH", "Chiang Mai": "TH",
    "Dubai": "AE", "UAE": "AE", "Abu Dhabi": "AE",
    "Hong Kong": "HK",
    "Seoul": "KR", "Korea": "KR", "South Korea": "KR",
    "Istanbul": "TR", "Turkey": "TR",
    "Barcelona": "ES", "Spain": "ES", "Madrid": "ES",
    "Berlin": "DE", "Germany": "DE", "Munich": "DE",
    "Rome": "IT", "Italy": "IT", "Milan": "IT",
}


# ── Pure helpers ──────────────────────────────────────────────────────────────

def country_code_for(destination: str) -> str:
    """'Paris, France' → 'FR'; unknown → 'default'."""
    dest = (destination or "").lower()
    for key, code in _COUNTRY_CODES.items():
        if key.lower() in dest:
            return code
    return "default"


def is_transit_city(city_name: str) -> bool:
    name = (city_name or "").lower()
    return any(city.lower() in name for city in TRANSIT_CITIES)


def choose_mode(metres: float, city_name: str) -> str:
    if metres < WALKING_MAX_M:
        return "walking"
    if metres < URBAN_MAX_M:
        return "transit" if is_transit_city(city_name) else "taxi"
    return "driving"


def estimate_minutes(metres: float, mode: str) -> int:
    return minutes_at_speed(metres, _SPEEDS_KMH.get(mode, _SPEEDS_KMH["taxi"]))


def estimate_cost(mode: str, metres: float, country_code: str) -> str:
    if mode == "walking":
        return "Free"
    if mode == "transit":
        return TRANSIT_FARES.get(country_code, TRANSIT_FARES["default"])
    if mode in ("taxi", "driving"):
        fare = TAXI_FARES.get(country_code, TAXI_FARES["default"])
        total = fare.base + (metres / 1000.0) * fare.per_km
        return f"~{fare.currency}{math.ceil(total)}"
    return "N/A"


def mode_icon(mode: str) -> str:
    return TRANSPORT_ICONS.get(mode, TRANSPORT_ICONS["transit"])


def mode_name(mode: str) -> str:
    return _MODE_NAMES.get(mode, "Transport")


# ── TransportCalculator ───────────────────────────────────────────────────────

class TransportCalculator:
    """Builds TransportationDetails for one leg; see module docstring."""

    def __init__(self, directions: Optional[DirectionsClient] = None) -> None:
        self.directions = directions

    def compute(
        self,
        origin: Coordinates,
        destination: Coordinates,
        city_name: str,
        country_code: str = "default",
    ) -> TransportationDetails:
        try:
            metres = distance_m(origin, destination)
            mode = choose_mode(metres, city_name)
            estimate = TransportationDetails(
                mode=mode,
                duration=f"{estimate_minutes(metres, mode)} min",
                distance=format_km(metres),
                cost=estimate_cost(mode, metres, country_code),
                mode_name=mode_name(mode),
                icon=mode_icon(mode),
            )
        except Exception:
            logger.exception("Transport estimate failed; using rough fallback")
            return self._rough_fallback(origin, destination, country_code)

        refined = self._from_directions(origin, destination, estimate, country_code)
        return refined or estimate

    def _from_directions(
        self,
        origin: Coordinates,
        destination: Coordinates,
        estimate: TransportationDetails,
        country_code: str,
    ) -> Optional[TransportationDetails]:
        if self.directions is None or not self.directions.available:
            return None
        try:
            leg = self.directions.route(origin, destination, estimate.mode)
        except EnrichmentError as exc:
            logger.debug("Directions lookup failed (%s); using estimate", exc)
            return None
        except Exception:
            logger.exception("Directions lookup raised unexpectedly; using estimate")
            return None
        return self._apply_leg(leg, estimate, country_code)

    @staticmethod
    def _apply_leg(
        leg: RouteLeg, estimate: TransportationDetails, country_code: str
    ) -> TransportationDetails:
        name, icon = estimate.mode_name, estimate.icon
        line = leg.first_transit_line
        if estimate.mode == "transit" and line is not None:
            if line.short_name:
                name = f"{line.vehicle_name} {line.short_name}".strip()
            elif line.name:
                name = line.name
            vehicle = line.vehicle_type.lower()
            if vehicle == "bus":
                icon = TRANSPORT_ICONS["bus"]
            elif vehicle in ("train", "heavy_rail"):
                icon = TRANSPORT_ICONS["train"]
            elif vehicle == "ferry":
                icon = TRANSPORT_ICONS["ferry"]

        cost = estimate.cost
        if leg.distance_m:
            cost = estimate_cost(estimate.mode, leg.distance_m, country_code)

        return TransportationDetails(
            mode=estimate.mode,
            duration=leg.duration_text,
            distance=leg.distance_text,
            cost=cost,
            mode_name=name,
            icon=icon,
        )

    @staticmethod
    def _rough_fallback(
        origin: Coordinates, destination: Coordinates, country_code: str
    ) -> TransportationDetails:
        try:
            metres = distance_m(origin, destination)
        except Exception:
            metres = 0.0
        mode = "walking" if metres < 1000 else "taxi"
        return TransportationDetails(
            mode=mode,
            duration=f"~{estimate_minutes(metres, mode)} min",
            distance=format_km(metres),
            cost=estimate_cost(mode, metres, country_code),
            mode_name=mode_name(mode),
            icon=mode_icon(mode),
        )
