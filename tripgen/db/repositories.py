"""Repository protocol interfaces for trip records."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from tripgen.models.common import TripStatus
from tripgen.models.itinerary import Itinerary
from tripgen.models.trip import TripRequest


@dataclass
class TripRecord:
    """Trip data record."""

    trip_id: UUID
    request: dict[str, Any]
    status: TripStatus
    itinerary: dict[str, Any] | None
    generation: int
    regeneration_count: int
    created_at: datetime
    updated_at: datetime


class TripRepository(Protocol):
    """Repository for trip record operations."""

    async def create_trip(self, request: TripRequest) -> UUID:
        """Create a trip in pending status with generation 0.

        Args:
            request: Validated trip request

        Returns:
            Trip ID
        """
        ...

    async def get_trip(self, trip_id: UUID) -> TripRecord | None:
        """Get trip by ID."""
        ...

    async def begin_generation(self, trip_id: UUID) -> int:
        """Mark the trip generating and issue a new generation token.

        Returns:
            The new token (previous token + 1)

        Raises:
            TripNotFoundError: Unknown trip
        """
        ...

    async def mark_regeneration(self, trip_id: UUID) -> int:
        """Count one regeneration request.

        Returns:
            The updated regeneration count

        Raises:
            TripNotFoundError: Unknown trip
        """
        ...

    async def commit_generation(
        self,
        trip_id: UUID,
        generation: int,
        *,
        status: TripStatus,
        itinerary: Itinerary | None,
    ) -> bool:
        """Write the terminal state of one generation run.

        The write happens only if generation is still the latest token.

        Returns:
            True if written, False if the run was stale (nothing written)
        """
        ...
