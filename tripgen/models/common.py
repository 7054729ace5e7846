"""Common types and enums shared across all models."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel


class TripStatus(str, Enum):
    """Trip record lifecycle status."""

    pending = "pending"
    generating = "generating"
    completed = "completed"
    failed = "failed"


class FlightDataSource(str, Enum):
    """Origin of a flight result."""

    live_provider = "live-provider"
    synthesized = "synthesized"


class ListingDataSource(str, Enum):
    """Origin of an activity, restaurant or lodging entry."""

    live_provider = "live-provider"
    fallback = "fallback"


class TimeOfDay(str, Enum):
    """Preferred departure time-of-day for flights."""

    any = "any"
    morning = "morning"
    afternoon = "afternoon"
    evening = "evening"
    night = "night"


class Provenance(BaseModel):
    """Provenance metadata for provider and catalog results."""

    source: str  # e.g. "provider.duffel", "catalog.activities"
    ref_id: str | None = None
    source_url: str | None = None
    fetched_at: datetime


class Skipped(BaseModel):
    """Stage result when the traveler opted out (e.g. already booked)."""

    skipped: Literal[True] = True
    reason: str = "already_booked"
