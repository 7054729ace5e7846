"""Provenance helpers for provider adapters and static catalogs."""

from datetime import UTC, datetime

from tripgen.models.common import Provenance


def provenance_for_catalog(source: str, ref_id: str | None = None) -> Provenance:
    """Create provenance for catalog-backed stage results.

    Args:
        source: Source identifier (e.g., "catalog.activities")
        ref_id: Optional catalog key (e.g., "rome" or "generic")

    Returns:
        Provenance with source=stage-specific string, fetched_at=now(UTC)
    """
    return Provenance(
        source=source,
        ref_id=f"{source}/{ref_id}" if ref_id else source,
        source_url=f"catalog://{source}/{ref_id}" if ref_id else f"catalog://{source}",
        fetched_at=datetime.now(UTC),
    )


def provenance_for_http(source: str, url: str, ref_id: str | None = None) -> Provenance:
    """Create provenance for HTTP-based provider results.

    Args:
        source: Source identifier (e.g., "provider.viator")
        url: Full URL of the HTTP request
        ref_id: Optional upstream identifier (e.g., an offer request id)

    Returns:
        Provenance with source=provider-specific string, fetched_at=now(UTC)
    """
    return Provenance(
        source=source,
        ref_id=ref_id or source,
        source_url=url,
        fetched_at=datetime.now(UTC),
    )
