"""Unit tests for RestaurantFinder's fallback chain, filters and enrichment."""

import pytest
from conftest import TOKYO, CountingLimiter, FakePlaces, make_place

from modules.tool_usage.restaurant_tool import (
    SEARCH_STRATEGIES,
    RestaurantFinder,
    build_search_keywords,
    detect_badges,
    extract_cuisine,
    passes_budget,
    passes_dietary,
)
from schemas.preferences import DietaryPreferences

HALAL = DietaryPreferences(halal=True)
NONE = DietaryPreferences()
ALL_RADII = sorted({s.radius_m for s in SEARCH_STRATEGIES})


def _search(finder, dietary=NONE, budget="medium", exclude=(), city="Tokyo", meal="lunch"):
    return finder.search(TOKYO, meal, budget, dietary, (), exclude_place_ids=exclude, city_name=city)


# ── filters ──────────────────────────────────────────────────────────────────

def test_cocktail_bar_is_never_returned_to_halal_travellers() -> None:
    bar = make_place("bar1", "Sunset Cocktail Bar", rating=4.8, reviews=5000, types=["bar"])
    others = [make_place(f"r{i}", f"Halal Ramen {i}", rating=4.2) for i in range(2)]
    places = FakePlaces(
        nearby_by_radius={r: [bar] + others for r in ALL_RADII},
        text_results=[bar],
    )

    results = _search(RestaurantFinder(places), dietary=HALAL)

    assert "bar1" not in [r.place_id for r in results]
    assert [r.place_id for r in results] == ["r0", "r1"]


@pytest.mark.parametrize(
    ("place", "dietary", "expected"),
    [
        (make_place("a", "The Red Lion Pub"), HALAL, False),
        (make_place("b", "Quiet Place", types=["night_club"]), HALAL, False),
        (make_place("c", "Nasi Lemak House"), HALAL, True),
        (make_place("d", "Almond Bakery"), DietaryPreferences(nut_allergy=True), False),
        (make_place("e", "Cafe", vicinity="Peanut Lane"), DietaryPreferences(nut_allergy=True), False),
        (make_place("f", "Sushi Dai"), DietaryPreferences(seafood_allergy=True), False),
        (make_place("g", "Grill", types=["seafood_restaurant"]), DietaryPreferences(seafood_allergy=True), False),
        (make_place("h", "Sushi Dai"), NONE, True),
    ],
)
def test_passes_dietary(place, dietary, expected) -> None:
    assert passes_dietary(place, dietary) is expected


def test_passes_budget() -> None:
    assert passes_budget(make_place("a", "A", price_level=1), "low")
    assert not passes_budget(make_place("a", "A", price_level=4), "low")
    assert passes_budget(make_place("a", "A", price_level=3), "high")
    assert passes_budget(make_place("a", "A", price_level=None), "low")


def test_keywords_combine_meal_dietary_and_interests() -> None:
    keywords = build_search_keywords(
        "breakfast", DietaryPreferences(halal=True, vegan=True), ["Food", "Culture"]
    )
    assert keywords == (
        "breakfast halal muslim islamic muslim-friendly vegan plant-based "
        "local cuisine authentic traditional cafe coffee bakery"
    )


# ── fallback chain ───────────────────────────────────────────────────────────

def test_stops_at_first_level_with_three_results() -> None:
    nearby = [make_place(f"p{i}", f"Place {i}", rating=4.8 - i * 0.1) for i in range(4)]
    places = FakePlaces(nearby_by_radius={2000: nearby})

    results = _search(RestaurantFinder(places))

    assert [r.place_id for r in results] == ["p0", "p1", "p2"]
    assert [call[1] for call in places.nearby_calls] == [2000]
    assert places.text_calls == []


def test_widens_until_three_unique_results() -> None:
    a = make_place("a", "A", rating=4.5)
    b = make_place("b", "B", rating=4.4)
    c = make_place("c", "C", rating=3.6)
    places = FakePlaces(nearby_by_radius={2000: [a], 5000: [a, b], 10000: [c]})

    results = _search(RestaurantFinder(places))

    assert [r.place_id for r in results] == ["a", "b", "c"]
    assert [call[1] for call in places.nearby_calls] == [2000, 5000, 10000]


def test_low_rated_place_only_accepted_at_last_level() -> None:
    low = make_place("low", "Low", rating=2.5)
    places = FakePlaces(nearby_by_radius={2000: [low], 20000: [low]})

    results = _search(RestaurantFinder(places), city="")

    assert [r.place_id for r in results] == ["low"]
    assert [call[1] for call in places.nearby_calls] == [2000, 5000, 10000, 10000, 15000, 20000]


def test_budget_is_relaxed_from_level_four() -> None:
    pricey = make_place("lux", "Lux", rating=4.6, price_level=4)
    places = FakePlaces(nearby_by_radius={2000: [pricey], 10000: [pricey]})
    limiter = CountingLimiter()

    results = RestaurantFinder(places, limiter=limiter).search(
        TOKYO, "dinner", "low", NONE, exclude_place_ids=(), city_name=""
    )

    assert [r.place_id for r in results] == ["lux"]
    assert limiter.waits == len(SEARCH_STRATEGIES)


def test_excluded_ids_are_skipped_everywhere() -> None:
    nearby = [make_place(f"p{i}", f"Place {i}") for i in range(3)]
    places = FakePlaces(
        nearby_by_radius={r: nearby for r in ALL_RADII},
        text_results=[make_place("p0", "Place 0"), make_place("t1", "Text One")],
    )

    results = _search(RestaurantFinder(places), exclude=["p0", "p1"])

    assert [r.place_id for r in results] == ["p2", "t1"]


def test_text_search_fallback_relaxes_name_filter_but_not_bar_types() -> None:
    # "Ginza" trips the "gin" name keyword
    text = [
        make_place("g1", "Ginza Kitchen"),
        make_place("b1", "Skyline Bar", types=["bar"]),
    ]
    places = FakePlaces(text_results=text)

    results = _search(RestaurantFinder(places), dietary=HALAL, meal="dinner")

    assert places.text_calls == ["halal dinner restaurant in Tokyo"]
    assert [r.place_id for r in results] == ["g1"]


def test_no_api_key_returns_nothing() -> None:
    places = FakePlaces(available=False)
    assert _search(RestaurantFinder(places)) == []
    assert places.nearby_calls == []


def test_never_more_than_three() -> None:
    nearby = [make_place(f"p{i}", f"Place {i}") for i in range(8)]
    places = FakePlaces(nearby_by_radius={r: nearby for r in ALL_RADII})
    assert len(_search(RestaurantFinder(places))) == 3


# ── enrichment ───────────────────────────────────────────────────────────────

def test_enrich_builds_display_fields() -> None:
    place = make_place(
        "p1", "Halal Sushi Grill", lat=TOKYO.lat + 0.004, lng=TOKYO.lng,
        rating=4.8, reviews=1500, price_level=None, types=["japanese_restaurant", "restaurant"],
    )
    place["opening_hours"] = {"open_now": False}

    r = RestaurantFinder(FakePlaces()).enrich(place, TOKYO)

    assert r.distance == "445 m away"
    assert r.walking_time == "6 min walk"
    assert r.price_level == 2
    assert r.open_now is False
    assert r.cuisine == ("Japanese", "Sushi")
    assert r.badges == ("halal", "highly-rated")
    assert r.photo_url == "https://photos.test/ref-p1?w=400"
    assert r.google_maps_url.endswith("query_place_id=p1")


def test_extract_cuisine_default() -> None:
    assert extract_cuisine(["restaurant"], "Joe's") == ["Restaurant"]


def test_detect_badges_vegetarian_and_michelin() -> None:
    assert detect_badges(make_place("x", "Michelin Vegan Table", rating=4.0)) == [
        "vegetarian", "michelin",
    ]
