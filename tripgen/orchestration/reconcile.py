"""Restaurant reconciler - merges directory data into meal entries."""

from tripgen.models.itinerary import ActivityItem, DayPlan
from tripgen.models.listings import RestaurantEntry

MEAL_CATEGORIES = {"restaurant", "meal"}
MEAL_WORDS = ("breakfast", "lunch", "dinner", "restaurant")


def is_meal(item: ActivityItem) -> bool:
    """Meal entries are tagged restaurant/meal or mention a meal in the title."""
    if item.category.lower() in MEAL_CATEGORIES:
        return True
    title = item.title.lower()
    return any(word in title for word in MEAL_WORDS)


def match_restaurant(
    item: ActivityItem,
    day_index: int,
    restaurants: list[RestaurantEntry],
) -> RestaurantEntry:
    """Find the restaurant for a meal entry.

    Exact name match, then substring either way, then positional assignment
    using the template rule (lunch i*2, dinner i*2+1, otherwise i).
    """
    title = item.title.strip().lower()

    for restaurant in restaurants:
        if restaurant.name.lower() == title:
            return restaurant

    if title:
        for restaurant in restaurants:
            name = restaurant.name.lower()
            if name and (name in title or title in name):
                return restaurant

    count = len(restaurants)
    if "lunch" in title:
        return restaurants[(day_index * 2) % count]
    if "dinner" in title:
        return restaurants[(day_index * 2 + 1) % count]
    return restaurants[day_index % count]


def merge_restaurant(item: ActivityItem, restaurant: RestaurantEntry) -> ActivityItem:
    """Copy directory metadata onto a meal entry.

    Only restaurants with a listing URL or rating are merged; anything else
    leaves the entry as produced.
    """
    if not restaurant.url and restaurant.rating is None:
        return item

    cuisine = restaurant.cuisine or item.cuisine
    price_range = restaurant.price_range or item.price_range
    return item.model_copy(
        update={
            "title": restaurant.name,
            "category": "restaurant",
            "description": item.description or f"{cuisine} cuisine - {price_range}",
            "from_directory": True,
            "directory_url": restaurant.url,
            "rating": restaurant.rating,
            "review_count": restaurant.review_count,
            "cuisine": cuisine,
            "price_range": price_range,
            "address": restaurant.address or item.address,
        }
    )


def reconcile_restaurants(
    days: list[DayPlan],
    restaurants: list[RestaurantEntry],
) -> list[DayPlan]:
    """Attach restaurant data to every meal entry.

    Pure: returns new DayPlan objects and leaves the input untouched.
    Running it again on its own output is a no-op.
    """
    if not restaurants:
        return days

    reconciled = []
    for day in days:
        day_index = day.day - 1
        activities = [
            merge_restaurant(item, match_restaurant(item, day_index, restaurants))
            if is_meal(item)
            else item
            for item in day.activities
        ]
        reconciled.append(day.model_copy(update={"activities": activities}))
    return reconciled
