"""Activity acquisition stage: live directory with catalog fallback."""

import logging

import httpx

from tripgen.adapters.catalogs import catalog_activities
from tripgen.adapters.runner import ProviderOk, ProviderRunner, StageContext
from tripgen.adapters.viator import search_activities
from tripgen.config import ProviderConfig
from tripgen.models.listings import ActivityEntry
from tripgen.orchestration.state import GenerationState

logger = logging.getLogger(__name__)


async def acquire_activities(
    state: GenerationState,
    config: ProviderConfig,
    runner: ProviderRunner,
    client: httpx.AsyncClient | None = None,
) -> list[ActivityEntry]:
    """Activity stage.

    Tries the live provider when configured. Errors, empty results and a
    missing credential all resolve to the static catalog.
    """
    destination = state.request.destination

    if config.live_activities:
        ctx = StageContext(str(state.trip_id), state.generation, "activities")
        result = await runner.run(
            ctx,
            "viator",
            lambda: search_activities(
                destination,
                api_key=config.viator_api_key or "",
                base_url=config.viator_base_url,
                currency=config.currency,
                client=client,
            ),
            timeout_ms=config.provider_timeout_ms,
        )
        if isinstance(result, ProviderOk):
            state.sources["activities"] = "live"
            return result.value
        reason = result.reason
    else:
        reason = "unavailable"

    logger.info(f"Activities falling back to catalog for {destination} ({reason})")
    runner.metrics.inc_fallback("activities")
    state.sources["activities"] = "fallback"
    return catalog_activities(destination).value
