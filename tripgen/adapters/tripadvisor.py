"""Restaurant directory adapter for the TripAdvisor Content API."""

import asyncio

import httpx
from pydantic import BaseModel

from tripgen.adapters.provenance import provenance_for_http
from tripgen.adapters.runner import ProviderOk
from tripgen.models.common import ListingDataSource
from tripgen.models.listings import RestaurantEntry
from tripgen.orchestration.errors import ProviderError

MAX_DETAIL_FETCHES = 20
DEFAULT_PRICE_RANGE = "€€"
DEFAULT_RATING = 4.0


class TripAdvisorAddress(BaseModel):
    address_string: str | None = None


class TripAdvisorSearchHit(BaseModel):
    location_id: str | int
    name: str
    address_obj: TripAdvisorAddress | None = None


class TripAdvisorSearchResponse(BaseModel):
    data: list[TripAdvisorSearchHit] = []


class TripAdvisorCuisine(BaseModel):
    name: str | None = None
    localized_name: str | None = None


class TripAdvisorDetails(BaseModel):
    location_id: str | int | None = None
    name: str | None = None
    cuisine: list[TripAdvisorCuisine] = []
    price_level: str | None = None
    rating: float | None = None
    num_reviews: int | None = None
    address_obj: TripAdvisorAddress | None = None
    web_url: str | None = None


def listing_url(location_id: str | int) -> str:
    return f"https://www.tripadvisor.com/Restaurant_Review-d{location_id}"


def basic_entry(hit: TripAdvisorSearchHit, destination: str) -> RestaurantEntry:
    """Entry built from a search hit when its detail fetch fails."""
    address = hit.address_obj.address_string if hit.address_obj else None
    return RestaurantEntry(
        name=hit.name,
        cuisine="Various",
        price_range=DEFAULT_PRICE_RANGE,
        rating=DEFAULT_RATING,
        review_count=0,
        address=address or destination,
        url=listing_url(hit.location_id),
        data_source=ListingDataSource.live_provider,
    )


def transform_details(
    hit: TripAdvisorSearchHit, details: TripAdvisorDetails, destination: str
) -> RestaurantEntry:
    """Normalize a TripAdvisor location detail record."""
    cuisines = [c.localized_name or c.name for c in details.cuisine if c.localized_name or c.name]
    address = details.address_obj.address_string if details.address_obj else None

    return RestaurantEntry(
        name=details.name or hit.name,
        cuisine=", ".join(cuisines) if cuisines else "Various",
        price_range=details.price_level or DEFAULT_PRICE_RANGE,
        rating=details.rating if details.rating is not None else DEFAULT_RATING,
        review_count=details.num_reviews or 0,
        address=address or destination,
        url=details.web_url or listing_url(hit.location_id),
        data_source=ListingDataSource.live_provider,
    )


async def search_restaurants(
    destination: str,
    api_key: str,
    base_url: str = "https://api.content.tripadvisor.com/api/v1",
    client: httpx.AsyncClient | None = None,
) -> ProviderOk[list[RestaurantEntry]]:
    """Search restaurants for a destination and fetch per-result details.

    Details are fetched concurrently for up to MAX_DETAIL_FETCHES results.
    A failed detail fetch degrades that result to a basic entry.

    Args:
        destination: Free-text destination name
        api_key: TripAdvisor Content API key
        base_url: TripAdvisor API base URL
        client: Optional httpx client (for testing with mocks)

    Returns:
        ProviderOk wrapping normalized RestaurantEntry objects

    Raises:
        ProviderError: When the search returns no locations
        httpx.HTTPError: On network or HTTP errors from the search call
    """
    url = f"{base_url}/location/search"
    params = {
        "key": api_key,
        "searchQuery": f"restaurants {destination}",
        "category": "restaurants",
        "language": "en",
    }

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=10.0)
        close_client = True

    async def fetch_one(hit: TripAdvisorSearchHit) -> RestaurantEntry:
        try:
            response = await client.get(
                f"{base_url}/location/{hit.location_id}/details",
                params={"key": api_key, "language": "en"},
            )
            response.raise_for_status()
            details = TripAdvisorDetails.model_validate(response.json())
        except (httpx.HTTPError, ValueError):  # includes JSON decode and pydantic validation errors
            return basic_entry(hit, destination)
        return transform_details(hit, details, destination)

    try:
        response = await client.get(url, params=params)
        response.raise_for_status()
        hits = TripAdvisorSearchResponse.model_validate(response.json()).data
        if not hits:
            raise ProviderError("empty", f"no restaurants for {destination}")

        restaurants = await asyncio.gather(*(fetch_one(h) for h in hits[:MAX_DETAIL_FETCHES]))

        return ProviderOk(
            value=list(restaurants),
            provenance=provenance_for_http("provider.tripadvisor", url, ref_id=destination),
        )
    finally:
        if close_client:
            await client.aclose()
