"""
modules/planning/activity_order.py
------------------------------------
Repositions and re-times activities so each day reads in a schedulable order.

  Day 1      arrival first (its own clock time kept), everything after it
             pushed forward so nothing starts before or at the same minute
  Last day   duplicate airport activities dropped, checkout → departure at
             the end, departure fixed at 18:00 and checkout 3 h earlier,
             everything else re-slotted into the morning/afternoon
  Otherwise  ascending time sort

normalize() runs once per itinerary after all enrichment. It never raises.
"""

from __future__ import annotations
import logging
from typing import Optional

from modules.planning.activity_classifier import (
    ActivityRole,
    classify_activity,
    is_duplicate_airport_activity,
    meal_type_of,
)
from modules.planning.clock import to_hhmm, to_minutes
from modules.planning.meal_planner import DEFAULT_BREAKFAST, DEPARTURE_LUNCH, departure_day_dinner
from schemas.itinerary import Activity, Day

logger = logging.getLogger(__name__)

# ── Day 1 gaps (minutes) ──────────────────────────────────────────────────────
_DAY1_GAPS: dict[ActivityRole, int] = {
    ActivityRole.CHECK_IN: 90,
    ActivityRole.MEAL:     60,
    ActivityRole.MOSQUE:   30,
}
_DAY1_DEFAULT_GAP = 90

# ── Last day (minutes from midnight) ──────────────────────────────────────────
DEPARTURE_TIME:        int = 18 * 60
CHECKOUT_LEAD:         int = 180
LAST_DAY_START:        int = 9 * 60
LUNCH_BLOCK_START:     int = 12 * 60
LUNCH_BLOCK_END:       int = 13 * 60 + 30
ACTIVITY_SLOT:         int = 90
MOSQUE_SLOT:           int = 45
BEFORE_CHECKOUT_MARGIN: int = 30
MEAL_BEFORE_CHECKOUT:  int = 60
DINNER_AFTER_LUNCH:    int = 30


def _by_time(activities: list[Activity]) -> list[Activity]:
    return sorted(activities, key=lambda a: to_minutes(a.time))


def _find(activities: list[Activity], role: ActivityRole) -> Optional[int]:
    for i, activity in enumerate(activities):
        if classify_activity(activity) is role:
            return i
    return None


# ── Day 1 ─────────────────────────────────────────────────────────────────────

def order_first_day(activities: list[Activity]) -> list[Activity]:
    idx = _find(activities, ActivityRole.ARRIVAL)
    if idx is None:
        logger.info("Day 1: no arrival activity, sorting by time")
        return _by_time(activities)

    arrival = activities[idx]
    if idx > 0:
        logger.info("Day 1: moving arrival %r from position %d to first", arrival.title, idx)

    rest = _by_time(activities[:idx] + activities[idx + 1:])
    cursor = to_minutes(arrival.time)
    for activity in rest:
        start = to_minutes(activity.time)
        if start <= cursor:
            role = classify_activity(activity)
            cursor += _DAY1_GAPS.get(role, _DAY1_DEFAULT_GAP)
            activity.time = to_hhmm(cursor)
            logger.debug("Day 1: %r pushed to %s", activity.title, activity.time)
        else:
            cursor = start
    return [arrival] + rest


# ── Last day ──────────────────────────────────────────────────────────────────

def _skip_blocked(cursor: int, dinner: Optional[int]) -> int:
    if LUNCH_BLOCK_START <= cursor < LUNCH_BLOCK_END:
        cursor = LUNCH_BLOCK_END
    if dinner is not None and dinner - 30 <= cursor < dinner + 60:
        cursor = dinner + 60
    return cursor


def order_last_day(activities: list[Activity]) -> list[Activity]:
    dep_idx = _find(activities, ActivityRole.DEPARTURE)
    if dep_idx is None:
        logger.info("Last day: no departure activity, sorting by time")
        return _by_time(activities)

    departure = activities[dep_idx]
    kept: list[Activity] = []
    for activity in activities:
        if activity is not departure and is_duplicate_airport_activity(activity):
            logger.info("Last day: dropping duplicate airport activity %r", activity.title)
            continue
        kept.append(activity)

    if kept[-1] is not departure:
        logger.info("Last day: moving departure %r to the end", departure.title)
    body = [a for a in kept if a is not departure]

    co_idx = _find(body, ActivityRole.CHECK_OUT)
    checkout = body.pop(co_idx) if co_idx is not None else None

    departure.time = to_hhmm(DEPARTURE_TIME)
    limit = DEPARTURE_TIME
    if checkout is not None:
        limit = DEPARTURE_TIME - CHECKOUT_LEAD
        checkout.time = to_hhmm(limit)

    dinner = departure_day_dinner(DEPARTURE_TIME)
    slots = {"breakfast": DEFAULT_BREAKFAST, "lunch": DEPARTURE_LUNCH, "dinner": dinner}

    others: list[Activity] = []
    for activity in body:
        if classify_activity(activity) is not ActivityRole.MEAL:
            others.append(activity)
            continue
        meal_type = meal_type_of(activity)
        slot = slots.get(meal_type or "")
        if slot is None and meal_type == "dinner":
            # skipped dinner: its own slot between lunch and checkout
            latest = min(to_minutes(activity.time), limit - BEFORE_CHECKOUT_MARGIN)
            slot = max(DEPARTURE_LUNCH + DINNER_AFTER_LUNCH, latest)
        elif slot is None:
            slot = min(to_minutes(activity.time), limit - MEAL_BEFORE_CHECKOUT)
        activity.time = to_hhmm(slot)

    cursor = LAST_DAY_START
    for activity in _by_time(others):
        cursor = _skip_blocked(cursor, dinner)
        if cursor > limit - BEFORE_CHECKOUT_MARGIN:
            activity.time = to_hhmm(min(to_minutes(activity.time), limit - BEFORE_CHECKOUT_MARGIN))
            logger.debug("Last day: no room for %r, kept at %s", activity.title, activity.time)
            continue
        activity.time = to_hhmm(cursor)
        is_mosque = classify_activity(activity) is ActivityRole.MOSQUE
        cursor += MOSQUE_SLOT if is_mosque else ACTIVITY_SLOT

    if checkout is not None:
        body.append(checkout)
    return _by_time(body) + [departure]


# ── Itinerary ─────────────────────────────────────────────────────────────────

class ActivityOrderEnforcer:
    """Applies the day-1 / last-day / middle-day ordering rules."""

    def normalize(self, days: list[Day]) -> list[Day]:
        if not days:
            return days

        last = len(days) - 1
        for i, day in enumerate(days):
            try:
                if i == 0:
                    day.activities = order_first_day(day.activities)
                elif i == last:
                    day.activities = order_last_day(day.activities)
                else:
                    day.activities = _by_time(day.activities)
            except Exception:
                logger.exception("Day %s: ordering failed, leaving activities as-is", day.day)
                continue

            if logger.isEnabledFor(logging.DEBUG):
                for n, activity in enumerate(day.activities, 1):
                    logger.debug("Day %s  %d. %s  %s", day.day, n, activity.time, activity.title)
        return days
