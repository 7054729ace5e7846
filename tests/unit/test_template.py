"""Unit tests for the template itinerary generator."""

from datetime import date

from tripgen.adapters.catalogs import catalog_activities, catalog_restaurants
from tripgen.models.listings import RestaurantEntry
from tripgen.models.trip import TripRequest
from tripgen.orchestration.template import (
    build_template_day,
    build_template_itinerary,
    meal_prices,
)


def rome_sources() -> tuple[list, list]:
    return catalog_activities("Rome").value, catalog_restaurants("Rome").value


class TestMealPrices:
    def test_tiers(self) -> None:
        assert meal_prices("€") == (15, 20)
        assert meal_prices("€€€") == (45, 55)
        assert meal_prices("€€€€") == (80, 100)
        assert meal_prices("€€") == (25, 35)
        assert meal_prices(None) == (25, 35)


class TestBuildTemplateDay:
    """Test the fixed daily schedule."""

    def test_four_slots(self, rome_request: TripRequest) -> None:
        activities, restaurants = rome_sources()

        day = build_template_day(1, rome_request, activities, restaurants)

        assert day.day == 1
        assert day.date == date(2026, 5, 1)
        assert day.title == "Day 1 in Rome"
        assert [a.time for a in day.activities] == ["9:00 AM", "1:00 PM", "3:00 PM", "7:00 PM"]
        assert day.activities[0].title == "Colosseum & Roman Forum"
        assert day.activities[2].title == activities[1].title

    def test_meals_use_distinct_restaurants(self, rome_request: TripRequest) -> None:
        activities, restaurants = rome_sources()

        day = build_template_day(2, rome_request, activities, restaurants)
        lunch, dinner = day.activities[1], day.activities[3]

        assert lunch.title == restaurants[2].name
        assert dinner.title == restaurants[3].name
        assert lunch.category == dinner.category == "restaurant"
        # Pizzarium is €, Armando is €€€
        assert lunch.price == 15
        assert dinner.price == 55

    def test_meals_carry_directory_data(self, rome_request: TripRequest) -> None:
        activities, restaurants = rome_sources()

        lunch = build_template_day(1, rome_request, activities, restaurants).activities[1]

        assert lunch.from_directory
        assert lunch.rating == restaurants[0].rating
        assert lunch.cuisine == restaurants[0].cuisine

    def test_cafe_for_food_interest(self, rome_request: TripRequest) -> None:
        activities, restaurants = rome_sources()
        request = rome_request.model_copy(update={"interests": ["Culture", "FOOD"]})

        day = build_template_day(1, request, activities, restaurants)

        assert len(day.activities) == 5
        cafe = day.activities[0]
        assert cafe.time == "8:30 AM"
        assert cafe.category == "cafe"
        assert cafe.price == 5

    def test_no_cafe_without_food_interest(self, rome_request: TripRequest) -> None:
        activities, restaurants = rome_sources()
        request = rome_request.model_copy(update={"interests": ["Culture"]})

        day = build_template_day(1, request, activities, restaurants)

        assert all(a.category != "cafe" for a in day.activities)

    def test_single_restaurant_serves_both_meals(self, rome_request: TripRequest) -> None:
        activities, _ = rome_sources()
        only = [RestaurantEntry(name="Solo Trattoria")]

        day = build_template_day(1, rome_request, activities, only)

        assert day.activities[1].title == day.activities[3].title == "Solo Trattoria"
        assert not day.activities[1].from_directory

    def test_currency_is_stamped(self, rome_request: TripRequest) -> None:
        activities, restaurants = rome_sources()

        day = build_template_day(1, rome_request, activities, restaurants, currency="USD")

        assert {a.currency for a in day.activities} == {"USD"}


class TestBuildTemplateItinerary:
    def test_covers_every_day(self, rome_request: TripRequest) -> None:
        activities, restaurants = rome_sources()

        days = build_template_itinerary(rome_request, activities, restaurants)

        assert [d.day for d in days] == [1, 2, 3]
        assert [d.date for d in days] == [date(2026, 5, 1), date(2026, 5, 2), date(2026, 5, 3)]

    def test_tail_only(self, rome_request: TripRequest) -> None:
        activities, restaurants = rome_sources()

        days = build_template_itinerary(rome_request, activities, restaurants, first_day=3)

        assert [d.day for d in days] == [3]
        assert days[0].activities[0].title == activities[2].title
