"""Itinerary models - the document written to the trip record."""

from datetime import date
from typing import Annotated

from pydantic import BaseModel, Field

from tripgen.models.common import Skipped
from tripgen.models.flights import FlightResult
from tripgen.models.listings import ActivityEntry, HotelEntry, RestaurantEntry, TransportOption


class ActivityItem(BaseModel):
    """Single scheduled entry in a day plan."""

    time: str  # "9:00 AM"
    title: str
    description: str = ""
    category: str = "attraction"
    price: Annotated[float, Field(ge=0)] = 0.0
    currency: str = "EUR"
    skip_the_line: bool = False
    skip_the_line_price: float | None = None
    duration: str | None = None
    tips: str | None = None
    is_local_experience: bool = False
    # Populated when merged with a restaurant directory entry
    from_directory: bool = False
    directory_url: str | None = None
    rating: float | None = None
    review_count: int | None = None
    cuisine: str | None = None
    price_range: str | None = None
    address: str | None = None


class DayPlan(BaseModel):
    """Plan for one calendar day of the trip."""

    day: Annotated[int, Field(ge=1)]
    date: date
    title: str
    activities: list[ActivityItem] = Field(default_factory=list)


class Itinerary(BaseModel):
    """Complete generated itinerary."""

    flights: FlightResult
    hotels: list[HotelEntry] | Skipped
    activities: list[ActivityEntry]
    restaurants: list[RestaurantEntry]
    transportation: list[TransportOption]
    day_by_day_itinerary: list[DayPlan]
    estimated_daily_expenses: int
