"""
main.py
--------
Itinerary enrichment entry point.

Reads a raw itinerary JSON file of the shape

    {
      "prefs": {"destination": "Tokyo, Japan", "budget": "medium",
                "interests": ["Food"], "dietaryPreferences": {"halal": true}},
      "days":  [{"day": 1, "activities": [{"time": "10:00", "title": "...",
                                           "location": "..."}]}]
    }

runs the enrichment pipeline over it and prints a human-readable schedule
followed by the enriched days as JSON.

Run:
  python main.py data/sample_itinerary.json
  python main.py data/sample_itinerary.json --json        # JSON only
  python main.py data/sample_itinerary.json --out out.json

Notes:
  - With no GOOGLE_MAPS_API_KEY and USE_STUB_GOOGLE unset, every Google step
    is skipped; meal slots stay empty and transport legs are estimates.
  - USE_STUB_GOOGLE=true answers every Google call from canned responses.
"""

from __future__ import annotations
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import config
from modules.pipeline.enrichment_pipeline import EnrichmentPipeline


def run_enrichment(
    raw_days: list[dict],
    prefs: dict,
    pipeline: Optional[EnrichmentPipeline] = None,
) -> list[dict]:
    """
    Enrich camelCase day dicts. Raises ValueError for unusable preferences;
    every other failure degrades the affected fields instead of raising.
    """
    pipeline = pipeline or EnrichmentPipeline()
    return pipeline.run_dicts(raw_days, prefs)


# ═══════════════════════════════════════════════════════════════════════════
# FORMATTED ITINERARY PRINTER
# ═══════════════════════════════════════════════════════════════════════════

def _print_itinerary(destination: str, days: list[dict]) -> None:
    """Print a day-by-day schedule with meal options and transport legs."""
    width = 60
    print()
    print("═" * width)
    print(f"  YOUR ITINERARY  -  {destination}  ({len(days)} day(s))")
    print("═" * width)

    for day in days:
        print(f"\n  Day {day['day']}")
        print("  " + "─" * (width - 2))

        activities = day.get("activities") or []
        if not activities:
            print("    (no activities)")
            continue

        for activity in activities:
            icon = activity.get("icon") or " "
            print(f"    {activity['time']}  {icon} {activity['title'][:44]}")
            for option in activity.get("restaurantOptions", [])[1:]:
                print(f"             or {option['name']} ({option.get('distance', '')})")
            leg = activity.get("transportToNext")
            if leg:
                print(
                    f"             ↓ {leg['icon']} {leg['modeName']}  "
                    f"{leg['duration']} · {leg['distance']} · {leg['cost']}"
                )

    print()
    print("═" * width)
    print()


if __name__ == "__main__":
    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    _args = [a for a in sys.argv[1:] if not a.startswith("--")]
    _json_only = "--json" in sys.argv
    _out_path: Optional[str] = None
    if "--out" in sys.argv:
        _out_idx = sys.argv.index("--out")
        if _out_idx + 1 >= len(sys.argv):
            print("Usage: python main.py <itinerary.json> [--json] [--out <path>]")
            sys.exit(1)
        _out_path = sys.argv[_out_idx + 1]
        _args = [a for a in _args if a != _out_path]

    if not _args:
        print("Usage: python main.py <itinerary.json> [--json] [--out <path>]")
        sys.exit(1)

    try:
        _payload = json.loads(Path(_args[0]).read_text(encoding="utf-8"))
        _prefs = _payload["prefs"]
        _raw_days = _payload["days"]
    except (OSError, ValueError, KeyError) as exc:
        print(f"Cannot read itinerary from {_args[0]}: {exc}")
        sys.exit(1)

    try:
        enriched = run_enrichment(_raw_days, _prefs)
    except ValueError as exc:
        print(f"Invalid preferences: {exc}")
        sys.exit(2)

    if not _json_only:
        _print_itinerary(_prefs.get("destination", ""), enriched)

    _output = json.dumps({"days": enriched}, indent=2, ensure_ascii=False)
    if _out_path:
        Path(_out_path).write_text(_output, encoding="utf-8")
        print(f"Enriched itinerary written to {_out_path}")
    else:
        print(_output)
