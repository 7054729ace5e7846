"""Flight models - fare options and the skipped/populated result union."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from tripgen.models.common import FlightDataSource, Skipped, TimeOfDay


class FlightLeg(BaseModel):
    """One direction of a round trip."""

    airline: str
    airline_code: str
    flight_number: str
    departure_time: str  # "09:15 AM"
    arrival_time: str
    duration: str  # "2h 30m"
    stops: Annotated[int, Field(ge=0)] = 0
    origin: str
    destination: str


class FlightOption(BaseModel):
    """Priced round-trip fare option (per-person price)."""

    id: str
    price: Annotated[float, Field(ge=0)]
    currency: str
    outbound: FlightLeg
    inbound: FlightLeg
    cabin_bag_included: bool = True
    checked_bag_included: bool = False
    checked_bag_price: float | None = None
    booking_url: str
    time_of_day: TimeOfDay | None = None
    matches_preference: bool = False
    is_best_price: bool = False


class FlightOffers(BaseModel):
    """Populated flight result."""

    skipped: Literal[False] = False
    options: list[FlightOption]
    best_price: float
    data_source: FlightDataSource
    preferred_time: TimeOfDay = TimeOfDay.any


# Exactly one of the two shapes; never a mix
FlightResult = Skipped | FlightOffers
