"""FastAPI dependencies resolved from application state."""

from fastapi import Request

from tripgen.db.repositories import TripRepository
from tripgen.orchestration.pipeline import ItineraryPipeline


def get_repository(request: Request) -> TripRepository:
    """Trip repository configured at startup."""
    return request.app.state.repository


def get_pipeline(request: Request) -> ItineraryPipeline:
    """Itinerary pipeline configured at startup."""
    return request.app.state.pipeline
