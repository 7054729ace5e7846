"""Provider runner with hard timeouts, metrics, and structured logging.

Each live provider call goes through ProviderRunner.run(), which:
- Enforces a hard timeout per call (asyncio.wait_for)
- Maps every failure to a ProviderErr reason instead of raising
- Records latency/error metrics and one structured log line

There are no retries here. A failed call degrades the stage to its fallback.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

import httpx
from pydantic import ValidationError

from tripgen.models.common import Provenance
from tripgen.orchestration.errors import ProviderError

T = TypeVar("T")


@dataclass
class ProviderOk(Generic[T]):
    """Successful provider (or catalog) result with provenance metadata."""

    value: T
    provenance: Provenance


@dataclass
class ProviderErr:
    """Failed provider call.

    reason is one of: timeout, http_<status>, network, schema, empty,
    unavailable, error.
    """

    reason: str
    detail: str = ""


ProviderResult = ProviderOk[T] | ProviderErr


@dataclass(frozen=True)
class StageContext:
    """Context for stage execution with tracing."""

    trip_id: str | None
    generation: int | None
    stage: str


# Metrics interface (implemented by tripgen.utils.metrics)
class ProviderMetrics:
    """Interface for provider and pipeline metrics."""

    def record_latency(self, provider: str, outcome: str, latency_ms: float) -> None:
        """Record provider call latency."""
        pass

    def inc_error(self, provider: str, reason: str) -> None:
        """Increment provider error counter."""
        pass

    def inc_fallback(self, stage: str) -> None:
        """Increment stage fallback counter."""
        pass

    def inc_run(self, status: str) -> None:
        """Increment generation run counter."""
        pass


# Logging interface (implemented by tripgen.utils.logging)
class StageLogger:
    """Interface for structured stage logging."""

    def log_provider(
        self,
        ctx: StageContext,
        provider: str,
        outcome: str,
        latency_ms: float,
        reason: str | None = None,
    ) -> None:
        """Log one provider call."""
        pass

    def log_stage(
        self,
        ctx: StageContext,
        outcome: str,
        latency_ms: float,
        reason: str | None = None,
    ) -> None:
        """Log the outcome of one pipeline stage."""
        pass


def classify_error(exc: BaseException) -> ProviderErr:
    """Map an adapter exception to a ProviderErr reason."""
    if isinstance(exc, ProviderError):
        return ProviderErr(reason=exc.reason, detail=exc.detail)
    if isinstance(exc, TimeoutError | httpx.TimeoutException):
        return ProviderErr(reason="timeout", detail=str(exc))
    if isinstance(exc, httpx.HTTPStatusError):
        return ProviderErr(
            reason=f"http_{exc.response.status_code}",
            detail=exc.response.text[:200],
        )
    if isinstance(exc, httpx.TransportError):
        return ProviderErr(reason="network", detail=str(exc))
    if isinstance(exc, ValidationError):
        return ProviderErr(reason="schema", detail=f"{exc.error_count()} validation errors")
    return ProviderErr(reason="error", detail=f"{type(exc).__name__}: {exc}")


class ProviderRunner:
    """Executes provider coroutines and returns ProviderResult values."""

    def __init__(
        self,
        timeout_ms: int = 8000,
        metrics: ProviderMetrics | None = None,
        logger: StageLogger | None = None,
    ) -> None:
        """Initialize runner.

        Args:
            timeout_ms: Default hard timeout per provider call
            metrics: Metrics recorder (optional, defaults to no-op)
            logger: Structured logger (optional, defaults to no-op)
        """
        self._timeout_ms = timeout_ms
        self._metrics = metrics or ProviderMetrics()
        self._logger = logger or StageLogger()

    async def run(
        self,
        ctx: StageContext,
        provider: str,
        fn: Callable[[], Awaitable[ProviderOk[T]]],
        *,
        timeout_ms: int | None = None,
    ) -> ProviderResult[T]:
        """Run one provider call.

        Args:
            ctx: Stage context with trip_id/generation
            provider: Provider name used for metrics and logs
            fn: Zero-argument coroutine factory performing the call
            timeout_ms: Override for the default hard timeout

        Returns:
            ProviderOk on success, ProviderErr on any failure
        """
        timeout_sec = (timeout_ms or self._timeout_ms) / 1000
        start_time = time.monotonic()

        try:
            result = await asyncio.wait_for(fn(), timeout=timeout_sec)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            err = classify_error(e)
            self._metrics.record_latency(provider, "error", elapsed_ms)
            self._metrics.inc_error(provider, err.reason)
            self._logger.log_provider(ctx, provider, "error", elapsed_ms, reason=err.reason)
            return err

        elapsed_ms = (time.monotonic() - start_time) * 1000
        self._metrics.record_latency(provider, "success", elapsed_ms)
        self._logger.log_provider(ctx, provider, "success", elapsed_ms)
        return result

    @property
    def metrics(self) -> ProviderMetrics:
        return self._metrics

    @property
    def logger(self) -> StageLogger:
        return self._logger
