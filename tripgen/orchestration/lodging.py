"""Lodging acquisition stage (catalog only)."""

from tripgen.adapters.catalogs import catalog_hotels
from tripgen.models.common import Skipped
from tripgen.models.listings import HotelEntry
from tripgen.orchestration.state import GenerationState


async def acquire_lodging(state: GenerationState) -> list[HotelEntry] | Skipped:
    """Return curated stays for the destination, or Skipped when already booked."""
    if state.request.skip_hotel:
        state.sources["lodging"] = "skipped"
        return Skipped()

    state.sources["lodging"] = "fallback"
    return catalog_hotels(state.request.destination).value
