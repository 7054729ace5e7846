"""Models package - re-exports for convenience."""

from tripgen.models.common import (
    FlightDataSource,
    ListingDataSource,
    Provenance,
    Skipped,
    TimeOfDay,
    TripStatus,
)
from tripgen.models.flights import FlightLeg, FlightOffers, FlightOption, FlightResult
from tripgen.models.itinerary import ActivityItem, DayPlan, Itinerary
from tripgen.models.listings import (
    ActivityEntry,
    HotelEntry,
    RestaurantEntry,
    TransitMode,
    TransportOption,
)
from tripgen.models.trip import TripRequest

__all__ = [
    # Common
    "TripStatus",
    "FlightDataSource",
    "ListingDataSource",
    "TimeOfDay",
    "Provenance",
    "Skipped",
    # Trip
    "TripRequest",
    # Flights
    "FlightLeg",
    "FlightOption",
    "FlightOffers",
    "FlightResult",
    # Listings
    "ActivityEntry",
    "RestaurantEntry",
    "HotelEntry",
    "TransitMode",
    "TransportOption",
    # Itinerary
    "ActivityItem",
    "DayPlan",
    "Itinerary",
]
