"""
modules/tool_usage/geocoding_tool.py
--------------------------------------
Free-text location → coordinates via the Google Geocoding API.

Fails softly: zero results, quota errors, denied requests and network errors
all return None and are logged. No retries.
"""

from __future__ import annotations
import logging
from typing import Optional

from google_places_client import GEOCODE_URL, GoogleMapsClient, status_results
from modules.errors import (
    EnrichmentError,
    NotFoundError,
    QuotaExceededError,
    ServiceUnavailableError,
)
from schemas.itinerary import Coordinates

logger = logging.getLogger(__name__)


def build_query(location_name: str, context: Optional[str] = None) -> str:
    """'Dutch Square' + 'Melaka, Malaysia' → 'Dutch Square, Melaka, Malaysia'"""
    return f"{location_name}, {context}" if context else location_name


class Geocoder:
    """Resolves location names to Coordinates."""

    def __init__(self, client: Optional[GoogleMapsClient] = None) -> None:
        self.client = client or GoogleMapsClient()

    @property
    def available(self) -> bool:
        return self.client.available

    def resolve(self, location_name: str, context: Optional[str] = None) -> Optional[Coordinates]:
        """Return the first geocoding match for *location_name*, or None."""
        if not location_name or not location_name.strip():
            logger.warning("Geocoding skipped: empty location name")
            return None

        query = build_query(location_name.strip(), context)
        try:
            data = self.client.get_json(GEOCODE_URL, {"address": query})
            results = status_results(data, f"geocode {query!r}")
            loc = results[0]["geometry"]["location"]
            coords = Coordinates(lat=float(loc["lat"]), lng=float(loc["lng"]))
        except QuotaExceededError:
            logger.error("Geocoding quota exceeded while resolving %r", query)
            return None
        except NotFoundError:
            logger.warning("Geocoding found no results for %r", query)
            return None
        except ServiceUnavailableError as exc:
            logger.warning("Geocoding unavailable: %s", exc)
            return None
        except EnrichmentError as exc:
            logger.warning("Geocoding failed for %r: %s", query, exc)
            return None
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.warning("Geocoding returned a malformed result for %r: %s", query, exc)
            return None

        logger.debug("Geocoded %r -> %.5f, %.5f", query, coords.lat, coords.lng)
        return coords
