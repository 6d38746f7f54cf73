"""
modules/tool_usage/directions_tool.py
---------------------------------------
Route lookup backed by the Google Directions API.

Endpoint:
    GET https://maps.googleapis.com/maps/api/directions/json
        ?origin=lat,lng&destination=lat,lng&mode=walking|transit|driving

Response fields read:
    routes[0].legs[0].duration.text / .value   → duration_text / duration_s
    routes[0].legs[0].distance.text / .value   → distance_text / distance_m
    routes[0].legs[0].steps[].travel_mode == "TRANSIT"
        .transit_details.line.{name, short_name, vehicle.{name, type}}
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Optional

from google_places_client import DIRECTIONS_URL, GoogleMapsClient, status_results
from modules.errors import UpstreamError
from schemas.itinerary import Coordinates

logger = logging.getLogger(__name__)

# Directions API has no taxi mode
_API_MODES: dict[str, str] = {
    "walking": "walking",
    "transit": "transit",
    "taxi":    "driving",
    "driving": "driving",
    "bicycle": "bicycling",
}


@dataclass
class TransitLine:
    name: str = ""
    short_name: str = ""
    vehicle_name: str = ""
    vehicle_type: str = ""     # BUS | SUBWAY | TRAIN | HEAVY_RAIL | FERRY ...


@dataclass
class RouteLeg:
    duration_text: str
    distance_text: str
    duration_s: int = 0
    distance_m: int = 0
    transit_lines: list[TransitLine] = field(default_factory=list)

    @property
    def first_transit_line(self) -> Optional[TransitLine]:
        return self.transit_lines[0] if self.transit_lines else None


def _parse_leg(route: dict) -> RouteLeg:
    try:
        leg = route["legs"][0]
        lines: list[TransitLine] = []
        for step in leg.get("steps") or []:
            if step.get("travel_mode") != "TRANSIT":
                continue
            line = (step.get("transit_details") or {}).get("line")
            if not line:
                continue
            vehicle = line.get("vehicle") or {}
            lines.append(TransitLine(
                name=line.get("name", ""),
                short_name=line.get("short_name", ""),
                vehicle_name=vehicle.get("name", ""),
                vehicle_type=vehicle.get("type", ""),
            ))
        return RouteLeg(
            duration_text=leg["duration"]["text"],
            distance_text=leg["distance"]["text"],
            duration_s=int(leg["duration"].get("value", 0)),
            distance_m=int(leg["distance"].get("value", 0)),
            transit_lines=lines,
        )
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise UpstreamError(f"Directions returned a malformed leg: {exc}") from exc


class DirectionsClient:
    """Returns the first leg of the first route between two points."""

    def __init__(self, client: Optional[GoogleMapsClient] = None) -> None:
        self.client = client or GoogleMapsClient()

    @property
    def available(self) -> bool:
        return self.client.available

    def route(self, origin: Coordinates, destination: Coordinates, mode: str) -> RouteLeg:
        """Raises the modules.errors taxonomy on any failure."""
        params = {
            "origin": f"{origin.lat},{origin.lng}",
            "destination": f"{destination.lat},{destination.lng}",
            "mode": _API_MODES.get(mode, "driving"),
        }
        data = self.client.get_json(DIRECTIONS_URL, params)
        routes = status_results(data, f"directions {mode}", key="routes")
        return _parse_leg(routes[0])
