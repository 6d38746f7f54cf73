"""Unit tests for activity role classification and the HH:MM helpers."""

import pytest

from modules.planning.activity_classifier import (
    ActivityRole,
    classify_activity,
    is_duplicate_airport_activity,
    meal_type_of,
)
from modules.planning.clock import to_hhmm, to_minutes
from schemas.itinerary import Activity


@pytest.mark.parametrize(
    ("title", "kind", "expected"),
    [
        ("Arrive at Narita Airport", "airport", ActivityRole.ARRIVAL),
        ("Fly home from Narita airport", "airport", ActivityRole.DEPARTURE),
        ("Arrive at the airport and transfer to hotel", None, ActivityRole.ARRIVAL),
        ("Transfer to hotel", None, ActivityRole.CHECK_IN),
        ("Check in at Hotel Gracery", None, ActivityRole.CHECK_IN),
        ("Hotel Gracery", "hotel", ActivityRole.CHECK_IN),
        ("Check out from Hotel Gracery", "hotel", ActivityRole.CHECK_OUT),
        ("Hotel checkout and luggage drop", "hotel", ActivityRole.CHECK_OUT),
        ("Depart from Haneda Airport", None, ActivityRole.DEPARTURE),
        ("Hotel check-out", None, ActivityRole.CHECK_OUT),
        ("Leave bags", "checkout", ActivityRole.CHECK_OUT),
        ("Lunch at Ichiran", None, ActivityRole.MEAL),
        ("Ichiran", "meal", ActivityRole.MEAL),
        ("Nearby Mosque: Tokyo Camii", "mosque", ActivityRole.MOSQUE),
        ("Meiji Jingu Shrine", None, ActivityRole.OTHER),
        ("", None, ActivityRole.OTHER),
    ],
)
def test_classify_activity(title, kind, expected) -> None:
    assert classify_activity(Activity(time="10:00", title=title, type=kind)) is expected


def test_meal_type_field_wins_over_title() -> None:
    a = Activity(time="12:00", title="Ramen stop", meal_type="lunch")
    assert classify_activity(a) is ActivityRole.MEAL
    assert meal_type_of(a) == "lunch"


def test_restaurant_options_make_a_meal() -> None:
    from schemas.itinerary import Restaurant

    a = Activity(time="12:00", title="Somewhere", restaurant_options=[Restaurant("p1", "Place")])
    assert classify_activity(a) is ActivityRole.MEAL


def test_meal_type_from_title() -> None:
    assert meal_type_of(Activity(time="10:00", title="Brunch at Bills")) == "breakfast"
    assert meal_type_of(Activity(time="19:00", title="Dinner cruise")) == "dinner"
    assert meal_type_of(Activity(time="15:00", title="Snack stop")) is None


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Transfer to airport", True),
        ("Travel to Haneda Airport", True),
        ("Head to airport", True),
        ("Airport lounge", True),
        ("Depart from Haneda Airport", False),
        ("Tsukiji Outer Market", False),
    ],
)
def test_is_duplicate_airport_activity(title, expected) -> None:
    assert is_duplicate_airport_activity(Activity(time="12:00", title=title)) is expected


def test_clock_round_trip_and_clamping() -> None:
    assert to_minutes("09:30") == 570
    assert to_minutes("7:05") == 425
    assert to_minutes("not a time") == 0
    assert to_hhmm(570) == "09:30"
    assert to_hhmm(-15) == "00:00"
    assert to_hhmm(24 * 60 + 30) == "23:59"
