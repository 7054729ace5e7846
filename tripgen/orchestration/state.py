"""Generation state for one pipeline run."""

import random
from dataclasses import dataclass, field
from uuid import UUID

from tripgen.models.common import Skipped
from tripgen.models.flights import FlightResult
from tripgen.models.itinerary import DayPlan
from tripgen.models.listings import ActivityEntry, HotelEntry, RestaurantEntry, TransportOption
from tripgen.models.trip import TripRequest


@dataclass
class GenerationState:
    """State carried through the pipeline stages.

    Stage outputs are filled in order; the orchestrator assembles the
    Itinerary from them at the end.
    """

    trip_id: UUID
    generation: int
    request: TripRequest
    rng: random.Random = field(default_factory=random.Random)

    # Acquisition outputs
    flights: FlightResult | None = None
    hotels: list[HotelEntry] | Skipped | None = None
    activities: list[ActivityEntry] = field(default_factory=list)
    restaurants: list[RestaurantEntry] = field(default_factory=list)
    transportation: list[TransportOption] = field(default_factory=list)

    # Narrative and post-passes
    days: list[DayPlan] = field(default_factory=list)
    estimated_daily_expenses: int = 0

    # Per-stage source tag ("live", "fallback", "skipped") for diagnostics
    sources: dict[str, str] = field(default_factory=dict)

    @property
    def trip_days(self) -> int:
        return self.request.trip_days
