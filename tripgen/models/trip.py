"""Trip request model - caller-owned input to the generation pipeline."""

import math
from datetime import date, datetime, time, timedelta
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from tripgen.models.common import TimeOfDay


class TripRequest(BaseModel):
    """Trip parameters, immutable for the duration of a generation run."""

    destination: Annotated[str, Field(min_length=1)]
    origin: str | None = None
    start_date: datetime
    end_date: datetime
    travelers: Annotated[int, Field(ge=1)] = 1
    budget: Annotated[float, Field(ge=0)]
    interests: list[str] = Field(default_factory=list)
    local_experiences: list[str] = Field(default_factory=list)
    skip_flights: bool = False
    skip_hotel: bool = False
    preferred_flight_time: TimeOfDay = TimeOfDay.any
    arrival_time: time | None = None
    departure_time: time | None = None
    traveler_ages: list[Annotated[int, Field(ge=0, le=120)]] | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("destination")
    @classmethod
    def validate_destination_not_blank(cls, v: str) -> str:
        """Reject whitespace-only destinations."""
        if not v.strip():
            raise ValueError("destination must not be blank")
        return v.strip()

    @field_validator("end_date")
    @classmethod
    def validate_end_after_start(cls, v: datetime, info: ValidationInfo) -> datetime:
        """Ensure end > start so every trip spans at least one day."""
        start = info.data.get("start_date")
        if start is None:
            return v
        if (start.tzinfo is None) != (v.tzinfo is None):
            raise ValueError("start_date and end_date must both include a timezone or both omit it")
        if v <= start:
            raise ValueError("end_date must be after start_date")
        return v

    @property
    def trip_days(self) -> int:
        """Calendar-day span of the trip (ceil of the elapsed days)."""
        elapsed = (self.end_date - self.start_date).total_seconds()
        return max(1, math.ceil(elapsed / 86400))

    def day_date(self, day_number: int) -> date:
        """Date of the 1-based trip day."""
        return self.start_date.date() + timedelta(days=day_number - 1)
