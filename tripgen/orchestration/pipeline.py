"""Itinerary pipeline orchestrator.

Runs the stages for one trip and commits exactly one terminal state:
- Acquisitions (flights, lodging, activities, restaurants, transportation) run
  concurrently; each resolves its own failures through its fallback
- Narrative, restaurant reconciliation and cost estimation follow in order
- The final write is conditional on the run's generation token, so a slow
  stale run never overwrites a newer one
"""

import asyncio
import logging
import random
import time
from collections.abc import Awaitable
from typing import TypeVar
from uuid import UUID

import httpx

from tripgen.adapters.catalogs import catalog_activities
from tripgen.adapters.runner import ProviderMetrics, ProviderRunner, StageContext, StageLogger
from tripgen.config import ProviderConfig
from tripgen.db.repositories import TripRepository
from tripgen.llm.client import NarrativeClient, get_narrative_client
from tripgen.models.common import TripStatus
from tripgen.models.itinerary import Itinerary
from tripgen.models.trip import TripRequest
from tripgen.orchestration.activities import acquire_activities
from tripgen.orchestration.costs import estimate_daily_expenses
from tripgen.orchestration.errors import GenerationError, TripValidationError
from tripgen.orchestration.flights import acquire_flights
from tripgen.orchestration.lodging import acquire_lodging
from tripgen.orchestration.narrative import generate_narrative
from tripgen.orchestration.reconcile import reconcile_restaurants
from tripgen.orchestration.restaurants import acquire_restaurants
from tripgen.orchestration.state import GenerationState
from tripgen.orchestration.transport import acquire_transportation

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Strong references to in-flight background runs
_background_tasks: set[asyncio.Task[None]] = set()


def validate_request(request: TripRequest) -> None:
    """Checks that cannot be expressed on the request model itself.

    Raises:
        TripValidationError: Origin missing while flights are not skipped
    """
    if not request.skip_flights and not (request.origin and request.origin.strip()):
        raise TripValidationError("origin is required when flights are not skipped")


class ItineraryPipeline:
    """Generates and commits itineraries for trip records."""

    def __init__(
        self,
        config: ProviderConfig,
        repository: TripRepository,
        *,
        narrative_client: NarrativeClient | None = None,
        http_client: httpx.AsyncClient | None = None,
        metrics: ProviderMetrics | None = None,
        stage_logger: StageLogger | None = None,
        rng_seed: int | None = None,
    ) -> None:
        """Initialize pipeline.

        Args:
            config: Explicit provider wiring (credentials, flags, timeouts)
            repository: Trip record persistence
            narrative_client: Generative client (defaults from config)
            http_client: Shared httpx client for provider adapters (optional)
            metrics: Metrics recorder (optional, defaults to no-op)
            stage_logger: Structured logger (optional, defaults to no-op)
            rng_seed: Seed for synthesized price jitter (None = nondeterministic)
        """
        self.config = config
        self.repository = repository
        self._narrative_client = narrative_client or get_narrative_client(config)
        self._http_client = http_client
        self._metrics = metrics or ProviderMetrics()
        self._stage_logger = stage_logger or StageLogger()
        self._rng_seed = rng_seed
        self._runner = ProviderRunner(
            timeout_ms=config.provider_timeout_ms,
            metrics=self._metrics,
            logger=self._stage_logger,
        )

    async def run(self, trip_id: UUID, generation: int, request: TripRequest) -> Itinerary | None:
        """Generate and commit an itinerary for one generation token.

        Args:
            trip_id: Trip record ID
            generation: Token issued by begin_generation for this run
            request: Trip request

        Returns:
            The committed Itinerary, or None when the run was stale

        Raises:
            GenerationError: Any unexpected failure; the trip is marked failed first
        """
        state = GenerationState(
            trip_id=trip_id,
            generation=generation,
            request=request,
            rng=random.Random(self._rng_seed),
        )

        try:
            itinerary = await self.generate(state)
            committed = await self.repository.commit_generation(
                trip_id, generation, status=TripStatus.completed, itinerary=itinerary
            )
        except Exception as e:
            logger.error(f"Itinerary generation failed for trip {trip_id}: {e}", exc_info=True)
            await self._mark_failed(trip_id, generation)
            self._metrics.inc_run(TripStatus.failed.value)
            raise GenerationError(f"generation {generation} failed for trip {trip_id}") from e

        if not committed:
            logger.info(f"Discarding stale generation {generation} for trip {trip_id}")
            self._metrics.inc_run("stale")
            return None

        self._metrics.inc_run(TripStatus.completed.value)
        return itinerary

    async def generate(self, state: GenerationState) -> Itinerary:
        """Run all stages and assemble the itinerary (no persistence)."""
        request = state.request
        validate_request(request)

        (
            state.flights,
            state.hotels,
            state.activities,
            state.restaurants,
            state.transportation,
        ) = await asyncio.gather(
            self._timed(
                state,
                "flights",
                acquire_flights(state, self.config, self._runner, self._http_client),
            ),
            self._timed(state, "lodging", acquire_lodging(state)),
            self._timed(
                state,
                "activities",
                acquire_activities(state, self.config, self._runner, self._http_client),
            ),
            self._timed(
                state,
                "restaurants",
                acquire_restaurants(state, self.config, self._runner, self._http_client),
            ),
            self._timed(state, "transportation", acquire_transportation(state)),
        )

        # Template days draw activities from the catalog and meals from the acquired restaurants
        template_activities = catalog_activities(request.destination).value
        days = await self._timed(
            state,
            "narrative",
            generate_narrative(
                state,
                self.config,
                self._narrative_client,
                self._runner,
                template_activities,
                state.restaurants,
            ),
        )
        state.days = reconcile_restaurants(days, state.restaurants)
        state.estimated_daily_expenses = estimate_daily_expenses(request.budget)

        return Itinerary(
            flights=state.flights,
            hotels=state.hotels,
            activities=state.activities,
            restaurants=state.restaurants,
            transportation=state.transportation,
            day_by_day_itinerary=state.days,
            estimated_daily_expenses=state.estimated_daily_expenses,
        )

    async def _timed(self, state: GenerationState, stage: str, coro: Awaitable[T]) -> T:
        ctx = StageContext(str(state.trip_id), state.generation, stage)
        start_time = time.monotonic()
        try:
            result = await coro
        except Exception as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            self._stage_logger.log_stage(ctx, "error", elapsed_ms, reason=type(e).__name__)
            raise
        elapsed_ms = (time.monotonic() - start_time) * 1000
        self._stage_logger.log_stage(ctx, state.sources.get(stage, "live"), elapsed_ms)
        return result

    async def _mark_failed(self, trip_id: UUID, generation: int) -> None:
        try:
            await self.repository.commit_generation(
                trip_id, generation, status=TripStatus.failed, itinerary=None
            )
        except Exception:
            logger.error(f"Could not mark trip {trip_id} failed", exc_info=True)


async def _run_in_background(
    pipeline: ItineraryPipeline, trip_id: UUID, generation: int, request: TripRequest
) -> None:
    try:
        await pipeline.run(trip_id, generation, request)
    except GenerationError:
        logger.warning(f"Background generation {generation} for trip {trip_id} ended as failed")


async def dispatch_generation(
    pipeline: ItineraryPipeline, trip_id: UUID, request: TripRequest
) -> tuple[int, asyncio.Task[None]]:
    """Issue a generation token and start the pipeline as a background task.

    Returns:
        (generation token, background task)

    Raises:
        TripNotFoundError: Unknown trip
    """
    generation = await pipeline.repository.begin_generation(trip_id)
    task = asyncio.create_task(_run_in_background(pipeline, trip_id, generation, request))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return generation, task
