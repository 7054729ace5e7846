"""Restaurant acquisition stage: live directory with catalog fallback."""

import logging

import httpx

from tripgen.adapters.catalogs import catalog_restaurants
from tripgen.adapters.runner import ProviderOk, ProviderRunner, StageContext
from tripgen.adapters.tripadvisor import search_restaurants
from tripgen.config import ProviderConfig
from tripgen.models.listings import RestaurantEntry
from tripgen.orchestration.state import GenerationState

logger = logging.getLogger(__name__)


async def acquire_restaurants(
    state: GenerationState,
    config: ProviderConfig,
    runner: ProviderRunner,
    client: httpx.AsyncClient | None = None,
) -> list[RestaurantEntry]:
    """Restaurant stage.

    Tries the live directory when configured; any failure resolves to the
    static catalog for the destination.
    """
    destination = state.request.destination

    if config.live_restaurants:
        ctx = StageContext(str(state.trip_id), state.generation, "restaurants")
        result = await runner.run(
            ctx,
            "tripadvisor",
            lambda: search_restaurants(
                destination,
                api_key=config.tripadvisor_api_key or "",
                base_url=config.tripadvisor_base_url,
                client=client,
            ),
            timeout_ms=config.provider_timeout_ms,
        )
        if isinstance(result, ProviderOk):
            state.sources["restaurants"] = "live"
            return result.value
        reason = result.reason
    else:
        reason = "unavailable"

    logger.info(f"Restaurants falling back to catalog for {destination} ({reason})")
    runner.metrics.inc_fallback("restaurants")
    state.sources["restaurants"] = "fallback"
    return catalog_restaurants(destination).value
