"""Normalized listing models - provider-agnostic activity, restaurant, lodging and transit shapes."""

from typing import Annotated

from pydantic import BaseModel, Field

from tripgen.models.common import ListingDataSource


class ActivityEntry(BaseModel):
    """Bookable activity or experience."""

    title: str
    category: str = "attraction"
    price: Annotated[float, Field(ge=0)] = 0.0
    currency: str = "EUR"
    rating: float | None = None
    review_count: int = 0
    duration: str | None = None
    description: str = ""
    booking_url: str | None = None
    image: str | None = None
    skip_the_line: bool = False
    skip_the_line_price: float | None = None
    tips: str | None = None
    data_source: ListingDataSource = ListingDataSource.fallback


class RestaurantEntry(BaseModel):
    """Dining directory listing."""

    name: str
    cuisine: str = "Local"
    price_range: str = "€€"
    rating: float | None = None
    review_count: int = 0
    address: str | None = None
    url: str | None = None
    data_source: ListingDataSource = ListingDataSource.fallback


class HotelEntry(BaseModel):
    """Lodging option (nightly price)."""

    name: str
    stars: Annotated[int, Field(ge=1, le=5)]
    price: Annotated[float, Field(ge=0)]
    currency: str = "EUR"
    description: str = ""
    data_source: ListingDataSource = ListingDataSource.fallback


class TransitMode(BaseModel):
    """Single public transport mode with fares."""

    mode: str
    description: str
    single_ticket_price: float | None = None
    day_pass_price: float | None = None


class TransportOption(BaseModel):
    """Local transportation guidance entry."""

    type: str  # "public_transport", "rideshare", "taxi"
    provider: str
    description: str
    options: list[TransitMode] = Field(default_factory=list)
    estimated_price: str | None = None
    features: list[str] = Field(default_factory=list)
