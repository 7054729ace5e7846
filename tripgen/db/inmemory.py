"""In-memory implementation of the trip repository."""

import asyncio
import copy
import uuid
from datetime import UTC, datetime

from tripgen.db.repositories import TripRecord
from tripgen.models.common import TripStatus
from tripgen.models.itinerary import Itinerary
from tripgen.models.trip import TripRequest
from tripgen.orchestration.errors import TripNotFoundError


class InMemoryTripRepository:
    """In-memory implementation of TripRepository."""

    def __init__(self) -> None:
        self._trips: dict[uuid.UUID, TripRecord] = {}
        self._lock = asyncio.Lock()

    async def create_trip(self, request: TripRequest) -> uuid.UUID:
        """Create a new trip."""
        trip_id = uuid.uuid4()
        now = datetime.now(UTC)
        async with self._lock:
            self._trips[trip_id] = TripRecord(
                trip_id=trip_id,
                request=request.model_dump(mode="json"),
                status=TripStatus.pending,
                itinerary=None,
                generation=0,
                regeneration_count=0,
                created_at=now,
                updated_at=now,
            )
        return trip_id

    async def get_trip(self, trip_id: uuid.UUID) -> TripRecord | None:
        """Get a copy of the trip record."""
        record = self._trips.get(trip_id)
        return copy.deepcopy(record) if record else None

    async def begin_generation(self, trip_id: uuid.UUID) -> int:
        """Issue a new generation token."""
        async with self._lock:
            record = self._require(trip_id)
            record.generation += 1
            record.status = TripStatus.generating
            record.updated_at = datetime.now(UTC)
            return record.generation

    async def mark_regeneration(self, trip_id: uuid.UUID) -> int:
        """Count one regeneration request."""
        async with self._lock:
            record = self._require(trip_id)
            record.regeneration_count += 1
            record.updated_at = datetime.now(UTC)
            return record.regeneration_count

    async def commit_generation(
        self,
        trip_id: uuid.UUID,
        generation: int,
        *,
        status: TripStatus,
        itinerary: Itinerary | None,
    ) -> bool:
        """Conditionally write the terminal state."""
        async with self._lock:
            record = self._trips.get(trip_id)
            if record is None or record.generation != generation:
                return False
            record.status = status
            record.itinerary = itinerary.model_dump(mode="json") if itinerary else None
            record.updated_at = datetime.now(UTC)
            return True

    def _require(self, trip_id: uuid.UUID) -> TripRecord:
        record = self._trips.get(trip_id)
        if record is None:
            raise TripNotFoundError(f"trip {trip_id} not found")
        return record
