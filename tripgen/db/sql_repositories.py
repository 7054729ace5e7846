"""SQL implementation of the trip repository."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tripgen.db.models import Trip
from tripgen.db.repositories import TripRecord
from tripgen.models.common import TripStatus
from tripgen.models.itinerary import Itinerary
from tripgen.models.trip import TripRequest
from tripgen.orchestration.errors import TripNotFoundError


def _to_record(trip: Trip) -> TripRecord:
    return TripRecord(
        trip_id=trip.trip_id,
        request=trip.request,
        status=TripStatus(trip.status),
        itinerary=trip.itinerary,
        generation=trip.generation,
        regeneration_count=trip.regeneration_count,
        created_at=trip.created_at,
        updated_at=trip.updated_at,
    )


class SqlTripRepository:
    """SQL implementation of TripRepository.

    Each operation runs in its own session so background generation runs
    never share a session with request handlers.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create_trip(self, request: TripRequest) -> uuid.UUID:
        """Create a new trip."""
        trip = Trip(
            trip_id=uuid.uuid4(),
            request=request.model_dump(mode="json"),
            status=TripStatus.pending.value,
            generation=0,
            regeneration_count=0,
        )
        async with self._session_factory() as session:
            session.add(trip)
            await session.commit()
        return trip.trip_id

    async def get_trip(self, trip_id: uuid.UUID) -> TripRecord | None:
        """Get trip by ID."""
        async with self._session_factory() as session:
            trip = await session.get(Trip, trip_id)
            return _to_record(trip) if trip else None

    async def begin_generation(self, trip_id: uuid.UUID) -> int:
        """Increment the generation token and mark the trip generating."""
        async with self._session_factory() as session:
            result = await session.execute(
                update(Trip)
                .where(Trip.trip_id == trip_id)
                .values(
                    generation=Trip.generation + 1,
                    status=TripStatus.generating.value,
                    updated_at=datetime.now(UTC),
                )
            )
            if result.rowcount == 0:
                await session.rollback()
                raise TripNotFoundError(f"trip {trip_id} not found")

            generation = await session.scalar(
                select(Trip.generation).where(Trip.trip_id == trip_id)
            )
            await session.commit()
            return int(generation or 0)

    async def mark_regeneration(self, trip_id: uuid.UUID) -> int:
        """Increment the regeneration counter."""
        async with self._session_factory() as session:
            result = await session.execute(
                update(Trip)
                .where(Trip.trip_id == trip_id)
                .values(
                    regeneration_count=Trip.regeneration_count + 1,
                    updated_at=datetime.now(UTC),
                )
            )
            if result.rowcount == 0:
                await session.rollback()
                raise TripNotFoundError(f"trip {trip_id} not found")

            count = await session.scalar(
                select(Trip.regeneration_count).where(Trip.trip_id == trip_id)
            )
            await session.commit()
            return int(count or 0)

    async def commit_generation(
        self,
        trip_id: uuid.UUID,
        generation: int,
        *,
        status: TripStatus,
        itinerary: Itinerary | None,
    ) -> bool:
        """Conditional terminal write guarded by the generation token."""
        async with self._session_factory() as session:
            result = await session.execute(
                update(Trip)
                .where(Trip.trip_id == trip_id, Trip.generation == generation)
                .values(
                    status=status.value,
                    itinerary=itinerary.model_dump(mode="json") if itinerary else None,
                    updated_at=datetime.now(UTC),
                )
            )
            await session.commit()
            return result.rowcount == 1
