"""Structured logging for pipeline stages and provider calls."""

import logging
from typing import Any

from tripgen.adapters.runner import StageContext

logger = logging.getLogger(__name__)


class StructuredStageLogger:
    """Structured logger for pipeline stages."""

    def _base(self, ctx: StageContext) -> dict[str, Any]:
        return {
            "trip_id": ctx.trip_id,
            "generation": ctx.generation,
            "stage": ctx.stage,
        }

    def log_provider(
        self,
        ctx: StageContext,
        provider: str,
        outcome: str,
        latency_ms: float,
        reason: str | None = None,
    ) -> None:
        """Log one provider call with structured data."""
        log_data = self._base(ctx)
        log_data.update(
            {
                "provider": provider,
                "outcome": outcome,
                "latency_ms": round(latency_ms, 2),
            }
        )
        if reason:
            log_data["reason"] = reason

        log_msg = f"Provider call: {provider} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})

    def log_stage(
        self,
        ctx: StageContext,
        outcome: str,
        latency_ms: float,
        reason: str | None = None,
    ) -> None:
        """Log a stage outcome (live, fallback, skipped, error)."""
        log_data = self._base(ctx)
        log_data.update({"outcome": outcome, "latency_ms": round(latency_ms, 2)})
        if reason:
            log_data["reason"] = reason

        log_msg = f"Stage {ctx.stage}: {outcome}"

        if outcome == "error":
            logger.warning(log_msg, extra={"structured": log_data})
        else:
            logger.info(log_msg, extra={"structured": log_data})
