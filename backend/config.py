"""
config.py
---------
Central configuration for the itinerary enrichment engine.
All secrets loaded from environment variables, never hard-coded.
"""

import os
from pathlib import Path

# Load .env from the backend directory (if it exists) so env vars in that file
# are picked up by os.getenv() below.  Won't override vars already set in the shell.
from dotenv import load_dotenv

_env_path = Path(__file__).parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=False)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# ── Google Maps Platform ──────────────────────────────────────────────────────
# Obtain at: https://console.cloud.google.com/apis/credentials
# Enable:  Geocoding API + Places API + Directions API
# Set env: GOOGLE_MAPS_API_KEY=AIza...
# GOOGLE_PLACES_API_KEY is accepted as a fallback name.
GOOGLE_MAPS_API_KEY: str = os.getenv(
    "GOOGLE_MAPS_API_KEY", os.getenv("GOOGLE_PLACES_API_KEY", "")
)

# Stub mode: every Google call is answered from Google-shaped stub responses
# (modules/tool_usage/stub_responses.py). No network, no key needed.
USE_STUB_GOOGLE: bool = _flag("USE_STUB_GOOGLE", "false")

# Timeout in seconds for every Google HTTP call
GOOGLE_REQUEST_TIMEOUT: float = float(os.getenv("GOOGLE_REQUEST_TIMEOUT", "10"))

# Photo widths (px) requested from the Places Photo endpoint
ACTIVITY_PHOTO_MAX_WIDTH:   int = int(os.getenv("ACTIVITY_PHOTO_MAX_WIDTH",   "800"))
RESTAURANT_PHOTO_MAX_WIDTH: int = int(os.getenv("RESTAURANT_PHOTO_MAX_WIDTH", "400"))

# ── Rate limiting (milliseconds between sequential calls) ─────────────────────
GEOCODE_DELAY_MS:          int = int(os.getenv("GEOCODE_DELAY_MS",          "150"))
TRANSPORT_DELAY_MS:        int = int(os.getenv("TRANSPORT_DELAY_MS",        "50"))
RESTAURANT_LEVEL_DELAY_MS: int = int(os.getenv("RESTAURANT_LEVEL_DELAY_MS", "100"))
MOSQUE_DELAY_MS:           int = int(os.getenv("MOSQUE_DELAY_MS",           "300"))

# ── Pipeline ──────────────────────────────────────────────────────────────────
# Once exceeded, no further external lookups are made; ordering still runs.
PIPELINE_DEADLINE_SECONDS: float = float(os.getenv("PIPELINE_DEADLINE_SECONDS", "120"))

# Mosque insertion after lunch/dinner for halal travellers
ENABLE_MOSQUE_ENRICHMENT: bool = _flag("ENABLE_MOSQUE_ENRICHMENT", "true")

# ── Restaurant search ─────────────────────────────────────────────────────────
RESTAURANT_MAX_OPTIONS: int = int(os.getenv("RESTAURANT_MAX_OPTIONS", "3"))
# Candidates kept per fallback level before enrichment
RESTAURANT_LEVEL_TOP_N: int = int(os.getenv("RESTAURANT_LEVEL_TOP_N", "5"))

# ── Observability ─────────────────────────────────────────────────────────────
# Structured JSONL event log (one file per run). Empty → logs/ next to backend/.
ENABLE_STRUCTURED_LOGS: bool = _flag("ENABLE_STRUCTURED_LOGS", "false")
LOGS_DIR: str = os.getenv("LOGS_DIR", "")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
