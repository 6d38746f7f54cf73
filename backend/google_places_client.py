"""
google_places_client.py
-----------------------
Thin HTTP layer over the Google Maps Platform JSON web services used by the
enrichment tools (Geocoding, Places Nearby/Text Search, Place Photo,
Directions).

Every call goes through GoogleMapsClient.get_json(), which:
  - answers from modules/tool_usage/stub_responses.py in stub mode,
  - raises ServiceUnavailableError when no API key is configured,
  - wraps network errors, non-2xx replies and non-JSON bodies in UpstreamError.

status_results() maps the Google "status" field onto the error taxonomy.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlencode

import requests

import config
from modules.errors import (
    NotFoundError,
    QuotaExceededError,
    ServiceUnavailableError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
NEARBY_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
TEXT_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"
PHOTO_URL = "https://maps.googleapis.com/maps/api/place/photo"
DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"

_QUOTA_STATUSES = frozenset({"OVER_QUERY_LIMIT", "OVER_DAILY_LIMIT"})
_EMPTY_STATUSES = frozenset({"ZERO_RESULTS", "NOT_FOUND"})


class GoogleMapsClient:
    """Shared GET-JSON client; one instance is handed to every Google tool."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        stub: Optional[bool] = None,
    ) -> None:
        self.api_key = config.GOOGLE_MAPS_API_KEY if api_key is None else api_key
        self.timeout = config.GOOGLE_REQUEST_TIMEOUT if timeout is None else timeout
        self.stub = config.USE_STUB_GOOGLE if stub is None else stub

    @property
    def available(self) -> bool:
        return self.stub or bool(self.api_key)

    def get_json(self, url: str, params: dict) -> dict:
        if self.stub:
            from modules.tool_usage.stub_responses import respond
            return respond(url, params)

        if not self.api_key:
            raise ServiceUnavailableError(
                "GOOGLE_MAPS_API_KEY is not set. "
                "Set USE_STUB_GOOGLE=true for offline runs, or "
                "export GOOGLE_MAPS_API_KEY=AIza... for live data."
            )

        try:
            res = requests.get(
                url, params={**params, "key": self.api_key}, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise UpstreamError(f"Google request to {url} failed: {exc}") from exc

        if not res.ok:
            raise UpstreamError(f"Google HTTP {res.status_code} from {url}: {res.text[:300]}")

        try:
            data = res.json()
        except ValueError as exc:
            raise UpstreamError(f"Google returned a non-JSON body from {url}") from exc

        if not isinstance(data, dict):
            raise UpstreamError(f"Google returned an unexpected body from {url}")
        return data

    def photo_url(self, photo_reference: str, max_width: int) -> str:
        params = {"maxwidth": max_width, "photo_reference": photo_reference}
        if self.api_key:
            params["key"] = self.api_key
        return f"{PHOTO_URL}?{urlencode(params)}"


def status_results(data: dict, what: str, key: str = "results") -> list[dict]:
    """
    Return data[key] for an OK response, otherwise raise:
      ZERO_RESULTS / NOT_FOUND      → NotFoundError
      OVER_QUERY_LIMIT / DAILY      → QuotaExceededError
      REQUEST_DENIED                → ServiceUnavailableError
      anything else                 → UpstreamError
    """
    status = data.get("status", "UNKNOWN")
    if status == "OK":
        results = data.get(key) or []
        if not isinstance(results, list):
            raise UpstreamError(f"{what}: '{key}' is not a list")
        if not results:
            raise NotFoundError(f"{what}: no results")
        return results
    if status in _EMPTY_STATUSES:
        raise NotFoundError(f"{what}: no results ({status})")
    if status in _QUOTA_STATUSES:
        raise QuotaExceededError(f"{what}: quota exceeded ({status})")
    if status == "REQUEST_DENIED":
        raise ServiceUnavailableError(
            f"{what}: request denied: {data.get('error_message', 'check API key permissions')}"
        )
    raise UpstreamError(f"{what}: status={status!r} {data.get('error_message', '')}".rstrip())
