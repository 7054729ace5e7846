"""FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tripgen.api.routes.health import router as health_router
from tripgen.api.routes.metrics import router as metrics_router
from tripgen.api.routes.trips import router as trips_router
from tripgen.config import ProviderConfig, get_settings
from tripgen.db.engine import create_schema, create_session_factory, get_async_engine
from tripgen.db.sql_repositories import SqlTripRepository
from tripgen.orchestration.pipeline import ItineraryPipeline
from tripgen.utils.logging import StructuredStageLogger
from tripgen.utils.metrics import PrometheusProviderMetrics


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Wire the repository and pipeline for the process lifetime."""
    settings = get_settings()
    engine = get_async_engine()
    await create_schema(engine)

    repository = SqlTripRepository(create_session_factory(engine))
    app.state.repository = repository
    app.state.pipeline = ItineraryPipeline(
        ProviderConfig.from_settings(settings),
        repository,
        metrics=PrometheusProviderMetrics(),
        stage_logger=StructuredStageLogger(),
        rng_seed=settings.rng_seed,
    )
    yield
    await engine.dispose()


app = FastAPI(title="Trip Itinerary API", version="0.1.0", lifespan=lifespan)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(trips_router, tags=["trips"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Trip Itinerary API", "version": "0.1.0"}
