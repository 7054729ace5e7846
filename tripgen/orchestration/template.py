"""Template itinerary generator.

Used for every day when the generative provider fails, and for the missing
tail days when it returns too few.
"""

from tripgen.models.itinerary import ActivityItem, DayPlan
from tripgen.models.listings import ActivityEntry, RestaurantEntry
from tripgen.models.trip import TripRequest

# (lunch, dinner) prices by price tier
MEAL_PRICES: dict[str, tuple[float, float]] = {
    "€": (15, 20),
    "€€€": (45, 55),
    "€€€€": (80, 100),
}
DEFAULT_MEAL_PRICES = (25.0, 35.0)

FOOD_INTERESTS = {"food", "culinary"}


def meal_prices(price_range: str | None) -> tuple[float, float]:
    return MEAL_PRICES.get(price_range or "", DEFAULT_MEAL_PRICES)


def activity_item(time_label: str, entry: ActivityEntry, currency: str) -> ActivityItem:
    """Schedule a catalog activity at a time slot."""
    return ActivityItem(
        time=time_label,
        title=entry.title,
        description=entry.description,
        category=entry.category,
        price=entry.price,
        currency=currency,
        skip_the_line=entry.skip_the_line,
        skip_the_line_price=entry.skip_the_line_price,
        duration=entry.duration,
        tips=entry.tips,
    )


def meal_item(
    time_label: str,
    restaurant: RestaurantEntry,
    price: float,
    duration: str,
    tips: str,
    currency: str,
) -> ActivityItem:
    """Schedule a meal at a restaurant, carrying directory data when present."""
    item = ActivityItem(
        time=time_label,
        title=restaurant.name,
        description=f"{restaurant.cuisine} cuisine - {restaurant.price_range}",
        category="restaurant",
        price=price,
        currency=currency,
        duration=duration,
        tips=tips,
        cuisine=restaurant.cuisine,
        price_range=restaurant.price_range,
        address=restaurant.address,
    )
    if restaurant.url or restaurant.rating is not None:
        item.from_directory = True
        item.directory_url = restaurant.url
        item.rating = restaurant.rating
        item.review_count = restaurant.review_count
    return item


def build_template_day(
    day_number: int,
    request: TripRequest,
    activities: list[ActivityEntry],
    restaurants: list[RestaurantEntry],
    currency: str = "EUR",
) -> DayPlan:
    """Build one day: optional cafe, morning activity, lunch, afternoon activity, dinner.

    Activities cycle by day index; lunch and dinner use restaurants at
    (i*2) and (i*2+1) modulo the catalog size, so they differ whenever the
    catalog has more than one entry.

    Args:
        day_number: 1-based trip day
        request: Trip request (destination, dates, interests)
        activities: Activity source to cycle through
        restaurants: Restaurant source to cycle through
        currency: Trip currency stamped on every item

    Returns:
        DayPlan stamped with its day number and date
    """
    i = day_number - 1
    items: list[ActivityItem] = []

    if FOOD_INTERESTS & {interest.lower() for interest in request.interests}:
        items.append(
            ActivityItem(
                time="8:30 AM",
                title="Morning Coffee & Pastry",
                description=f"Start the day at a neighborhood café in {request.destination}",
                category="cafe",
                price=5,
                currency=currency,
                duration="30 min",
                tips="Ask the barista for their specialty",
                price_range="€",
            )
        )

    if activities:
        items.append(activity_item("9:00 AM", activities[i % len(activities)], currency))

    if restaurants:
        lunch = restaurants[(i * 2) % len(restaurants)]
        items.append(
            meal_item(
                "1:00 PM",
                lunch,
                meal_prices(lunch.price_range)[0],
                "1-1.5 hours",
                "Reservations recommended",
                currency,
            )
        )

    if activities:
        items.append(activity_item("3:00 PM", activities[(i + 1) % len(activities)], currency))

    if restaurants:
        dinner = restaurants[(i * 2 + 1) % len(restaurants)]
        items.append(
            meal_item(
                "7:00 PM",
                dinner,
                meal_prices(dinner.price_range)[1],
                "2 hours",
                "Try local specialties",
                currency,
            )
        )

    return DayPlan(
        day=day_number,
        date=request.day_date(day_number),
        title=f"Day {day_number} in {request.destination}",
        activities=items,
    )


def build_template_itinerary(
    request: TripRequest,
    activities: list[ActivityEntry],
    restaurants: list[RestaurantEntry],
    currency: str = "EUR",
    first_day: int = 1,
) -> list[DayPlan]:
    """Build template days from first_day through the last trip day."""
    return [
        build_template_day(day, request, activities, restaurants, currency)
        for day in range(first_day, request.trip_days + 1)
    ]
