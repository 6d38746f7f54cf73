"""Unit tests for meal-time scheduling and meal insertion."""

from conftest import TOKYO, FakeGeocoder, FakePlaces, activity, make_place

from modules.planning.meal_planner import (
    MealPlanner,
    MealTimes,
    create_meal_activity,
    determine_meal_times,
    find_insert_position,
)
from modules.tool_usage.restaurant_tool import RestaurantFinder
from schemas.itinerary import Restaurant, RestaurantExclusions


# ── determine_meal_times ─────────────────────────────────────────────────────

def test_empty_day_gets_default_times() -> None:
    assert determine_meal_times([]) == MealTimes("08:00", "12:30", "19:00")


def test_arrival_day_has_no_breakfast() -> None:
    times = determine_meal_times([
        activity("10:00", "Arrive at Narita Airport", type="airport"),
        activity("16:00", "Tokyo Tower"),
    ])
    assert times.breakfast is None
    assert times.lunch == "12:30"      # 10:00 → 16:00 spans the lunch window
    assert times.dinner == "19:00"


def test_breakfast_rules() -> None:
    assert determine_meal_times([activity("09:30", "Museum")]).breakfast == "08:00"
    assert determine_meal_times([activity("08:20", "Museum")]).breakfast == "07:50"
    assert determine_meal_times([activity("07:00", "Sunrise hike")]).breakfast is None


def test_lunch_at_midpoint_of_first_gap_in_window() -> None:
    times = determine_meal_times([
        activity("09:00", "Museum"),
        activity("12:00", "Park"),
        activity("13:30", "Shrine"),
        activity("16:00", "Tower"),
    ])
    assert times.lunch == "12:45"


def test_lunch_defaults_when_no_gap_fits() -> None:
    times = determine_meal_times([
        activity("11:00", "A"),
        activity("11:30", "B"),
        activity("12:00", "C"),
    ])
    assert times.lunch == "12:30"


def test_dinner_rules() -> None:
    assert determine_meal_times([activity("17:00", "Tower")]).dinner == "19:00"
    assert determine_meal_times([activity("18:30", "Tower")]).dinner == "19:00"
    assert determine_meal_times([activity("20:00", "Show")]).dinner == "20:30"
    assert determine_meal_times([activity("21:00", "Show")]).dinner == "21:30"


def test_departure_day_rules() -> None:
    def times_for(departure: str) -> MealTimes:
        return determine_meal_times([
            activity("09:30", "Museum"),
            activity(departure, "Depart from Haneda Airport", type="departure"),
        ])

    early = times_for("12:00")
    assert (early.breakfast, early.lunch, early.dinner) == ("08:00", "14:00", None)
    assert times_for("19:00").dinner is None
    assert times_for("16:00").dinner == "19:00"
    assert times_for("21:00").dinner == "19:00"


# ── insertion helpers ────────────────────────────────────────────────────────

def test_find_insert_position_goes_after_equal_times() -> None:
    acts = [activity("09:00", "A"), activity("12:30", "B"), activity("15:00", "C")]
    assert find_insert_position(acts, "08:00") == 0
    assert find_insert_position(acts, "12:30") == 2
    assert find_insert_position(acts, "18:00") == 3


def test_create_meal_activity_uses_top_restaurant() -> None:
    top = Restaurant(
        "p1", "Ichiran", vicinity="Shibuya", price_level=3,
        cuisine=("Japanese", "Ramen"), distance="450 m away", coordinates=TOKYO,
    )
    meal = create_meal_activity("lunch", "12:30", [top, Restaurant("p2", "Afuri")])
    assert meal.title == "Lunch at Ichiran"
    assert meal.type == "meal"
    assert meal.meal_type == "lunch"
    assert meal.location == "Shibuya"
    assert meal.description == "Japanese, Ramen • $$$ • 450 m away"
    assert meal.icon == "🍜"
    assert meal.coordinates == TOKYO
    assert [r.place_id for r in meal.restaurant_options] == ["p1", "p2"]


# ── MealPlanner.insert_meals_for_day ─────────────────────────────────────────

def _five_places() -> list[dict]:
    return [
        make_place(f"p{i}", f"Place {i}", rating=4.9 - i * 0.1, reviews=2000 - i * 100)
        for i in range(5)
    ]


def _day() -> list:
    return [
        activity("09:30", "Museum", coordinates=TOKYO),
        activity("13:00", "Park", coordinates=TOKYO),
        activity("17:00", "Tower", coordinates=TOKYO),
    ]


def test_meals_never_reuse_a_restaurant_within_the_day(prefs) -> None:
    places = FakePlaces(nearby_by_radius={2000: _five_places()})
    planner = MealPlanner(RestaurantFinder(places))

    result = planner.insert_meals_for_day(
        _day(), 1, prefs, MealTimes("08:00", "12:30", "19:00")
    )

    titles = [a.title for a in result.activities]
    assert titles == ["Breakfast at Place 0", "Museum", "Lunch at Place 3", "Park", "Tower"]
    breakfast, lunch = result.activities[0], result.activities[2]
    assert [r.place_id for r in breakfast.restaurant_options] == ["p0", "p1", "p2"]
    assert [r.place_id for r in lunch.restaurant_options] == ["p3", "p4"]
    assert result.used.breakfast == ["p0", "p1", "p2"]
    assert result.used.lunch == ["p3", "p4"]
    assert result.used.dinner == []


def test_cross_day_exclusions_apply_per_meal_type(prefs) -> None:
    places = FakePlaces(nearby_by_radius={2000: _five_places()})
    planner = MealPlanner(RestaurantFinder(places))
    exclusions = RestaurantExclusions(breakfast=["p0", "p1"])

    result = planner.insert_meals_for_day(
        _day(), 2, prefs, MealTimes(breakfast="08:00"), exclusions
    )

    breakfast = result.activities[0]
    assert [r.place_id for r in breakfast.restaurant_options] == ["p2", "p3", "p4"]


def test_meal_with_restaurants_is_not_searched_again(prefs) -> None:
    places = FakePlaces(nearby_by_radius={2000: _five_places()})
    planner = MealPlanner(RestaurantFinder(places))
    lunch = activity(
        "12:30", "Lunch at Ichiran", type="meal", meal_type="lunch",
        restaurant_options=[Restaurant("r1", "Ichiran")],
    )

    result = planner.insert_meals_for_day(
        _day() + [lunch], 1, prefs, MealTimes(lunch="12:30", dinner="19:00")
    )

    keywords = [call[3] for call in places.nearby_calls]
    assert not any(k.startswith("lunch") for k in keywords)
    assert any(k.startswith("dinner") for k in keywords)
    assert sum(1 for a in result.activities if a.title.startswith("Lunch")) == 1
    assert result.used.lunch == []


def test_planned_meals_are_backed_with_restaurants(prefs) -> None:
    places = FakePlaces(nearby_by_radius={2000: _five_places()})
    planner = MealPlanner(RestaurantFinder(places))
    breakfast = activity("08:00", "Breakfast at hotel", type="meal", coordinates=TOKYO)
    lunch = activity("12:30", "Lunch at Local Restaurant", type="meal", location="Asakusa")
    acts = [breakfast, activity("09:30", "Museum", coordinates=TOKYO), lunch]

    result = planner.insert_meals_for_day(acts, 1, prefs, MealTimes(lunch="13:00"))

    assert [(a.time, a.title) for a in result.activities] == [
        ("08:00", "Breakfast at hotel"),
        ("09:30", "Museum"),
        ("12:30", "Lunch at Local Restaurant"),
    ]
    backed_breakfast, _, backed_lunch = result.activities
    assert backed_breakfast.meal_type == "breakfast"
    assert [r.place_id for r in backed_breakfast.restaurant_options] == ["p0", "p1", "p2"]
    assert [r.place_id for r in backed_lunch.restaurant_options] == ["p3", "p4"]
    assert backed_lunch.coordinates == TOKYO
    assert backed_lunch.location == "Asakusa"
    assert backed_lunch.description == "Restaurant • $$ • 0 m away"
    assert backed_lunch.icon == "🍜"
    assert result.used.breakfast == ["p0", "p1", "p2"]
    # the incoming activities are not mutated
    assert breakfast.restaurant_options == [] and lunch.coordinates is None


def test_anchor_is_geocoded_when_it_has_no_coordinates(prefs) -> None:
    places = FakePlaces(nearby_by_radius={2000: _five_places()})
    geocoder = FakeGeocoder({"Museum": TOKYO})
    planner = MealPlanner(RestaurantFinder(places), geocoder)

    result = planner.insert_meals_for_day(
        [activity("09:30", "Museum")], 1, prefs, MealTimes(breakfast="08:00")
    )

    assert geocoder.calls == [("Museum", "Tokyo, Japan")]
    assert result.activities[0].title == "Breakfast at Place 0"


def test_slot_without_location_is_skipped(prefs) -> None:
    places = FakePlaces(nearby_by_radius={2000: _five_places()})
    planner = MealPlanner(RestaurantFinder(places), FakeGeocoder())

    result = planner.insert_meals_for_day(
        [activity("09:30", "Somewhere vague")], 1, prefs, MealTimes("08:00", "12:30", "19:00")
    )

    assert [a.title for a in result.activities] == ["Somewhere vague"]
    assert places.nearby_calls == []


def test_no_restaurants_means_no_meal_activity(prefs) -> None:
    planner = MealPlanner(RestaurantFinder(FakePlaces()))
    result = planner.insert_meals_for_day(
        _day(), 1, prefs, MealTimes("08:00", "12:30", "19:00")
    )
    assert [a.title for a in result.activities] == ["Museum", "Park", "Tower"]


def test_anchor_without_location_text_is_not_geocoded(prefs) -> None:
    places = FakePlaces(nearby_by_radius={2000: _five_places()})
    geocoder = FakeGeocoder()
    planner = MealPlanner(RestaurantFinder(places), geocoder)

    result = planner.insert_meals_for_day(
        [activity("09:30", "Free time", location="")], 1, prefs, MealTimes(breakfast="08:00")
    )

    assert [a.title for a in result.activities] == ["Free time"]
    assert geocoder.calls == []
