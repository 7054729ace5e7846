"""Trip endpoints - create, regenerate, and fetch itineraries."""

from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from tripgen.api.deps import get_pipeline, get_repository
from tripgen.db.repositories import TripRepository
from tripgen.models.common import TripStatus
from tripgen.models.trip import TripRequest
from tripgen.orchestration.errors import TripNotFoundError
from tripgen.orchestration.pipeline import ItineraryPipeline, dispatch_generation

router = APIRouter(prefix="/trips", tags=["trips"])

MAX_REGENERATIONS = 1


class GenerationResponse(BaseModel):
    """Response for POST /trips and POST /trips/{trip_id}/regenerate."""

    trip_id: str
    status: TripStatus
    generation: int


class TripResponse(BaseModel):
    """Response for GET /trips/{trip_id}."""

    trip_id: str
    status: TripStatus
    generation: int
    regeneration_count: int
    request: dict[str, Any]
    itinerary: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime


@router.post("", response_model=GenerationResponse, status_code=status.HTTP_202_ACCEPTED)
async def create_trip(
    body: TripRequest,
    repository: Annotated[TripRepository, Depends(get_repository)],
    pipeline: Annotated[ItineraryPipeline, Depends(get_pipeline)],
) -> GenerationResponse:
    """Create a trip and start itinerary generation in the background.

    Args:
        body: Trip request
        repository: Trip repository
        pipeline: Itinerary pipeline

    Returns:
        Trip ID, generating status and the generation token
    """
    trip_id = await repository.create_trip(body)
    generation, _ = await dispatch_generation(pipeline, trip_id, body)

    return GenerationResponse(
        trip_id=str(trip_id), status=TripStatus.generating, generation=generation
    )


@router.post(
    "/{trip_id}/regenerate",
    response_model=GenerationResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def regenerate_trip(
    trip_id: UUID,
    repository: Annotated[TripRepository, Depends(get_repository)],
    pipeline: Annotated[ItineraryPipeline, Depends(get_pipeline)],
) -> GenerationResponse:
    """Replace a trip's itinerary with a fresh run (allowed once per trip).

    Raises:
        HTTPException: 404 for unknown trips, 409 once the regeneration is used
    """
    record = await repository.get_trip(trip_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")

    if record.regeneration_count >= MAX_REGENERATIONS:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Trip was already regenerated"
        )

    try:
        # Counter is the source of truth under concurrent requests
        count = await repository.mark_regeneration(trip_id)
        if count > MAX_REGENERATIONS:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail="Trip was already regenerated"
            )
        request = TripRequest.model_validate(record.request)
        generation, _ = await dispatch_generation(pipeline, trip_id, request)
    except TripNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found") from e

    return GenerationResponse(
        trip_id=str(trip_id), status=TripStatus.generating, generation=generation
    )


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: UUID,
    repository: Annotated[TripRepository, Depends(get_repository)],
) -> TripResponse:
    """Get trip status and itinerary (null unless completed)."""
    record = await repository.get_trip(trip_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")

    return TripResponse(
        trip_id=str(record.trip_id),
        status=record.status,
        generation=record.generation,
        regeneration_count=record.regeneration_count,
        request=record.request,
        itinerary=record.itinerary if record.status == TripStatus.completed else None,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )
