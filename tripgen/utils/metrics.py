"""Prometheus metrics for provider calls and pipeline runs."""

from prometheus_client import Counter, Histogram

# Provider call metrics
provider_latency_ms = Histogram(
    "provider_latency_ms",
    "Provider call latency in milliseconds",
    ["provider", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000, 16000, 32000, 60000],
)

provider_errors_total = Counter(
    "provider_errors_total",
    "Total provider call errors",
    ["provider", "reason"],
)

# Pipeline metrics
stage_fallbacks_total = Counter(
    "stage_fallbacks_total",
    "Total stages that degraded to their fallback",
    ["stage"],
)

generation_runs_total = Counter(
    "generation_runs_total",
    "Total itinerary generation runs by terminal status",
    ["status"],
)


class PrometheusProviderMetrics:
    """Prometheus-based provider and pipeline metrics implementation."""

    def record_latency(self, provider: str, outcome: str, latency_ms: float) -> None:
        """Record provider call latency."""
        provider_latency_ms.labels(provider=provider, outcome=outcome).observe(latency_ms)

    def inc_error(self, provider: str, reason: str) -> None:
        """Increment provider error counter."""
        provider_errors_total.labels(provider=provider, reason=reason).inc()

    def inc_fallback(self, stage: str) -> None:
        """Increment stage fallback counter."""
        stage_fallbacks_total.labels(stage=stage).inc()

    def inc_run(self, status: str) -> None:
        """Increment generation run counter."""
        generation_runs_total.labels(status=status).inc()
