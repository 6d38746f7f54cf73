"""Unit tests for MosqueFinder: placement after meals, widening, per-day dedupe."""

from conftest import TOKYO, CountingLimiter, FakePlaces, activity, make_place

from modules.errors import ServiceUnavailableError
from modules.tool_usage.mosque_tool import MosqueFinder


def _mosque(place_id: str, name: str, rating: float = 4.6) -> dict:
    return make_place(
        place_id, name, lat=TOKYO.lat + 0.004, lng=TOKYO.lng,
        rating=rating, types=["mosque", "place_of_worship"], vicinity="1-19 Oyama-cho",
    )


def _meals() -> list:
    return [
        activity("08:00", "Breakfast at Cafe", type="meal", meal_type="breakfast", coordinates=TOKYO),
        activity("12:30", "Lunch at Ichiran", type="meal", meal_type="lunch", coordinates=TOKYO),
        activity("15:00", "Tokyo Tower", coordinates=TOKYO),
        activity("19:00", "Dinner at Sushi Dai", type="meal", meal_type="dinner", coordinates=TOKYO),
    ]


def test_one_mosque_after_each_lunch_and_dinner() -> None:
    places = FakePlaces(mosques_by_radius={2000: [_mosque("m1", "Tokyo Camii"), _mosque("m2", "Masjid Otsuka")]})
    limiter = CountingLimiter()

    result = MosqueFinder(places, limiter).insert_for_day(_meals(), 1)

    assert [(a.time, a.title) for a in result] == [
        ("08:00", "Breakfast at Cafe"),
        ("12:30", "Lunch at Ichiran"),
        ("12:30", "Nearby Mosque: Tokyo Camii"),
        ("15:00", "Tokyo Tower"),
        ("19:00", "Dinner at Sushi Dai"),
        ("19:00", "Nearby Mosque: Masjid Otsuka"),
    ]
    assert limiter.waits == 2
    assert all(call[2] == "mosque" for call in places.nearby_calls)


def test_mosque_activity_fields() -> None:
    places = FakePlaces(mosques_by_radius={2000: [_mosque("m1", "Tokyo Camii", rating=4.8)]})

    result = MosqueFinder(places).insert_for_day(_meals()[1:2], 1)

    mosque = result[1]
    assert mosque.type == "mosque"
    assert mosque.icon == "🕌"
    assert mosque.place_id == "m1"
    assert mosque.location == "1-19 Oyama-cho"
    assert mosque.extra == {"distance": "0.4 km", "walkingTime": "6 min walk", "rating": 4.8}
    assert mosque.photo_url == "https://photos.test/ref-m1?w=400"


def test_radius_widens_until_a_mosque_is_found() -> None:
    places = FakePlaces(mosques_by_radius={6000: [_mosque("m1", "Tokyo Camii")]})

    result = MosqueFinder(places).insert_for_day(_meals()[1:2], 1)

    assert [call[1] for call in places.nearby_calls] == [2000, 4000, 6000]
    assert result[-1].title == "Nearby Mosque: Tokyo Camii"


def test_same_mosque_is_not_added_twice_in_a_day() -> None:
    places = FakePlaces(mosques_by_radius={r: [_mosque("m1", "Tokyo Camii")] for r in range(2000, 10001, 2000)})

    result = MosqueFinder(places).insert_for_day(_meals(), 1)

    assert [a.title for a in result].count("Nearby Mosque: Tokyo Camii") == 1
    # dinner search walked every radius up to the 10 km cap
    assert [call[1] for call in places.nearby_calls] == [2000, 2000, 4000, 6000, 8000, 10000]


def test_meal_without_coordinates_is_skipped() -> None:
    places = FakePlaces(mosques_by_radius={2000: [_mosque("m1", "Tokyo Camii")]})
    lunch = activity("12:30", "Lunch somewhere", type="meal", meal_type="lunch")

    result = MosqueFinder(places).insert_for_day([lunch], 1)

    assert result == [lunch]
    assert places.nearby_calls == []


def test_no_key_leaves_day_untouched() -> None:
    places = FakePlaces(available=False)
    acts = _meals()
    assert MosqueFinder(places).insert_for_day(acts, 1) == acts
    assert places.nearby_calls == []


def test_service_unavailable_stops_further_searches() -> None:
    class DeniedPlaces(FakePlaces):
        def nearby(self, location, radius_m, place_type="restaurant", keyword=""):
            super().nearby(location, radius_m, place_type, keyword)
            raise ServiceUnavailableError("request denied")

    places = DeniedPlaces()

    result = MosqueFinder(places).insert_for_day(_meals(), 1)

    assert [a.title for a in result] == [a.title for a in _meals()]
    assert len(places.nearby_calls) == 1
