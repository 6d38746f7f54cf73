"""
modules/planning/activity_classifier.py
-----------------------------------------
Single source of truth for "what kind of activity is this?".

Every call site (meal scheduling, day-1 / last-day ordering, meal insertion)
asks classify_activity() for one ActivityRole instead of re-running its own
substring checks.

Precedence (first match wins):
  1. Explicit type
       meal / mealType set / restaurantOptions present → MEAL
       mosque                                          → MOSQUE
       checkout                                        → CHECK_OUT
       departure                                       → DEPARTURE
       arrival                                         → ARRIVAL
       airport   → DEPARTURE if the title says depart/leave/fly, else ARRIVAL
       hotel     → CHECK_OUT if the title says check-out, else CHECK_IN
  2. Title keywords
       breakfast/lunch/dinner/brunch/snack/eat at/...  → MEAL
       check-out / check out / checkout                → CHECK_OUT
       depart / departure / airport + leave|fly        → DEPARTURE
       arrive at / arrival / airport + arrive          → ARRIVAL
       check-in / check in / transfer to hotel         → CHECK_IN
  3. OTHER

"Arrive at the airport and transfer to hotel" is therefore an ARRIVAL, and a
bare "Transfer to hotel" is a CHECK_IN; no activity carries both roles.
"""

from __future__ import annotations
from enum import Enum

from schemas.itinerary import Activity


class ActivityRole(str, Enum):
    ARRIVAL = "arrival"
    DEPARTURE = "departure"
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    MEAL = "meal"
    MOSQUE = "mosque"
    OTHER = "other"


_MEAL_KEYWORDS: tuple[str, ...] = (
    "breakfast", "lunch", "dinner", "brunch", "snack",
    "eat at", "dine at", "meal at", "food at",
)
_CHECKOUT_KEYWORDS: tuple[str, ...] = ("check-out", "check out", "checkout")
_CHECKIN_KEYWORDS: tuple[str, ...] = ("check-in", "check in", "transfer to hotel")

_TYPE_ROLES: dict[str, ActivityRole] = {
    "meal":      ActivityRole.MEAL,
    "mosque":    ActivityRole.MOSQUE,
    "checkout":  ActivityRole.CHECK_OUT,
    "departure": ActivityRole.DEPARTURE,
    "arrival":   ActivityRole.ARRIVAL,
}


def _says_departure(title: str) -> bool:
    return "depart" in title or ("airport" in title and ("leave" in title or "fly" in title))


def _says_arrival(title: str) -> bool:
    return (
        "arrive at" in title
        or "arrival" in title
        or ("airport" in title and "arrive" in title)
    )


def classify_activity(activity: Activity) -> ActivityRole:
    """Return the single role of *activity*. Never raises."""
    title = (activity.title or "").lower()
    kind = (activity.type or "").lower()

    if kind == "meal" or activity.meal_type or activity.restaurant_options:
        return ActivityRole.MEAL
    if kind in _TYPE_ROLES:
        return _TYPE_ROLES[kind]
    if kind == "airport":
        return ActivityRole.DEPARTURE if _says_departure(title) else ActivityRole.ARRIVAL
    if kind == "hotel":
        if any(k in title for k in _CHECKOUT_KEYWORDS):
            return ActivityRole.CHECK_OUT
        return ActivityRole.CHECK_IN

    if any(k in title for k in _MEAL_KEYWORDS):
        return ActivityRole.MEAL
    if any(k in title for k in _CHECKOUT_KEYWORDS):
        return ActivityRole.CHECK_OUT
    if _says_departure(title):
        return ActivityRole.DEPARTURE
    if _says_arrival(title):
        return ActivityRole.ARRIVAL
    if any(k in title for k in _CHECKIN_KEYWORDS):
        return ActivityRole.CHECK_IN
    return ActivityRole.OTHER


def is_meal(activity: Activity) -> bool:
    return classify_activity(activity) is ActivityRole.MEAL


def meal_type_of(activity: Activity) -> str | None:
    """breakfast | lunch | dinner for a meal activity, from mealType or its title."""
    if activity.meal_type:
        return activity.meal_type
    title = (activity.title or "").lower()
    for meal in ("breakfast", "lunch", "dinner"):
        if meal in title:
            return meal
    if "brunch" in title:
        return "breakfast"
    return None


def is_duplicate_airport_activity(activity: Activity) -> bool:
    """Airport-worded leftovers on the last day ("Transfer to airport", ...)."""
    title = (activity.title or "").lower()
    return (
        ("airport" in title and "depart" not in title)
        or ("transfer" in title and "airport" in title)
        or ("travel" in title and "airport" in title)
        or "head to airport" in title
        or "go to airport" in title
    )
