"""
modules/planning/clock.py
---------------------------
HH:MM ↔ minutes-from-midnight helpers. All scheduling arithmetic works on
plain ints; nothing here touches the wall clock.
"""

from __future__ import annotations

_LAST_MINUTE = 23 * 60 + 59


def to_minutes(hhmm: str) -> int:
    """'09:30' → 570. Unparseable input → 0."""
    try:
        hours, minutes = str(hhmm).strip().split(":")[:2]
        return int(hours) * 60 + int(minutes)
    except (ValueError, AttributeError):
        return 0


def to_hhmm(minutes: int) -> str:
    """570 → '09:30' (clamped to [00:00, 23:59])."""
    minutes = max(0, min(int(minutes), _LAST_MINUTE))
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
