"""Static catalog loaders for fallback content.

Catalog files live in tripgen/catalogs/ as JSON. Generic entries carry
{destination} and {destination_q} placeholders that are filled per trip.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel

from tripgen.adapters.provenance import provenance_for_catalog
from tripgen.adapters.runner import ProviderOk
from tripgen.models.common import ListingDataSource
from tripgen.models.listings import (
    ActivityEntry,
    HotelEntry,
    RestaurantEntry,
    TransportOption,
)

CATALOGS_DIR = Path(__file__).parent.parent / "catalogs"

GENERIC_KEY = "generic"


class AirlineRef(BaseModel):
    """Carrier in a regional roster."""

    code: str
    name: str


class AirlineRegion(BaseModel):
    """Hub-code set and carrier roster for one region."""

    codes: list[str]
    airlines: list[AirlineRef]


class AirlineCatalog(BaseModel):
    """Regional airline rosters with matching precedence."""

    default_region: str
    precedence: list[str]
    regions: dict[str, AirlineRegion]


class RouteCatalog(BaseModel):
    """Hub-pair flight durations in hours."""

    default_hours: float
    durations: dict[str, dict[str, float]]

    def duration_hours(self, origin: str, destination: str) -> float:
        """Look up a route duration, falling back to the default."""
        return self.durations.get(origin, {}).get(destination, self.default_hours)


class CuisineRef(BaseModel):
    cuisine: str
    price_range: str
    rating: float


class GenericRestaurantCatalog(BaseModel):
    """Parameters for the destination-agnostic restaurant list."""

    url: str
    review_count_base: int
    review_count_step: int
    cuisines: list[CuisineRef]
    areas: list[str]


@lru_cache
def _load(name: str) -> dict[str, Any]:
    with open(CATALOGS_DIR / f"{name}.json", encoding="utf-8") as f:
        return json.load(f)


def _fill(value: Any, destination: str) -> Any:
    """Substitute destination placeholders in every string of a JSON value."""
    if isinstance(value, str):
        return value.replace("{destination_q}", quote(destination)).replace(
            "{destination}", destination
        )
    if isinstance(value, list):
        return [_fill(v, destination) for v in value]
    if isinstance(value, dict):
        return {k: _fill(v, destination) for k, v in value.items()}
    return value


def match_city_key(destination: str, keys: list[str]) -> str | None:
    """Find the first known city key contained in the destination (case-insensitive)."""
    dest_lower = destination.lower()
    for key in keys:
        if key in dest_lower:
            return key
    return None


def city_token(destination: str) -> str:
    """Text before the first comma, lowercased and stripped."""
    return destination.split(",")[0].strip().lower()


@lru_cache
def load_gazetteer() -> dict[str, str]:
    """Place name (lowercase) to hub code."""
    return dict(_load("gazetteer"))


@lru_cache
def load_airlines() -> AirlineCatalog:
    return AirlineCatalog.model_validate(_load("airlines"))


@lru_cache
def load_routes() -> RouteCatalog:
    return RouteCatalog.model_validate(_load("routes"))


def catalog_hotels(destination: str) -> ProviderOk[list[HotelEntry]]:
    """Fetch fallback lodging for a destination.

    Args:
        destination: Free-text destination name

    Returns:
        ProviderOk wrapping per-city hotels, or the generic set when no city key matches
    """
    data = _load("hotels")
    key = match_city_key(destination, list(data["cities"]))
    raw = data["cities"][key] if key else _fill(data["generic"], destination)

    hotels = [
        HotelEntry.model_validate({**h, "data_source": ListingDataSource.fallback})
        for h in raw
    ]
    return ProviderOk(
        value=hotels,
        provenance=provenance_for_catalog("catalog.hotels", key or GENERIC_KEY),
    )


def catalog_activities(destination: str) -> ProviderOk[list[ActivityEntry]]:
    """Fetch fallback activities for a destination.

    Args:
        destination: Free-text destination name

    Returns:
        ProviderOk wrapping per-city activities, or the generic set when no city key matches
    """
    data = _load("activities")
    key = match_city_key(destination, list(data["cities"]))
    raw = data["cities"][key] if key else _fill(data["generic"], destination)

    activities = [
        ActivityEntry.model_validate({**a, "data_source": ListingDataSource.fallback})
        for a in raw
    ]
    return ProviderOk(
        value=activities,
        provenance=provenance_for_catalog("catalog.activities", key or GENERIC_KEY),
    )


def catalog_restaurants(destination: str) -> ProviderOk[list[RestaurantEntry]]:
    """Fetch fallback restaurants for a destination.

    The generic list pairs each cuisine type with a neighborhood label and
    links to the directory's destination search page.

    Args:
        destination: Free-text destination name

    Returns:
        ProviderOk wrapping per-city restaurants, or the generic set when no city key matches
    """
    data = _load("restaurants")
    key = match_city_key(destination, list(data["cities"]))

    if key:
        restaurants = [
            RestaurantEntry.model_validate({**r, "data_source": ListingDataSource.fallback})
            for r in data["cities"][key]
        ]
    else:
        generic = GenericRestaurantCatalog.model_validate(data["generic"])
        url = _fill(generic.url, destination)
        restaurants = []
        for i, ref in enumerate(generic.cuisines):
            area = generic.areas[i % len(generic.areas)]
            restaurants.append(
                RestaurantEntry(
                    name=f"{ref.cuisine} {area} Restaurant",
                    cuisine=ref.cuisine,
                    price_range=ref.price_range,
                    rating=ref.rating,
                    review_count=generic.review_count_base + generic.review_count_step * i,
                    address=f"{area}, {destination}",
                    url=url,
                    data_source=ListingDataSource.fallback,
                )
            )

    return ProviderOk(
        value=restaurants,
        provenance=provenance_for_catalog("catalog.restaurants", key or GENERIC_KEY),
    )


def catalog_transportation(destination: str) -> ProviderOk[list[TransportOption]]:
    """Fetch local transportation guidance.

    Lookup is an exact match on the city token (text before the first comma).
    An unknown city returns the generic three-entry guidance.
    """
    data = _load("transportation")
    key = city_token(destination)
    if key in data["cities"]:
        raw = data["cities"][key]
    else:
        key = GENERIC_KEY
        raw = _fill(data["generic"], destination)

    return ProviderOk(
        value=[TransportOption.model_validate(t) for t in raw],
        provenance=provenance_for_catalog("catalog.transportation", key),
    )
