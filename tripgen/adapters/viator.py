"""Activity search adapter for the Viator Partner API (v2)."""

import httpx
from pydantic import BaseModel, ConfigDict, Field

from tripgen.adapters.provenance import provenance_for_http
from tripgen.adapters.runner import ProviderOk
from tripgen.models.common import ListingDataSource
from tripgen.models.listings import ActivityEntry
from tripgen.orchestration.errors import ProviderError

DESCRIPTION_MAX_CHARS = 300
SEARCH_RESULT_COUNT = 15

# Keyword groups checked in order, first match wins
CATEGORY_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("museum", ("museum", "gallery")),
    ("tour", ("tour", "walking")),
    ("food", ("food", "culinary", "tasting")),
    ("cruise", ("cruise", "boat")),
    ("entertainment", ("show", "concert", "performance")),
    ("adventure", ("adventure", "hiking", "outdoor")),
    ("experience", ("workshop", "class")),
]


def categorize_activity(title: str) -> str:
    """Derive a category tag from keywords in an activity title."""
    lowered = title.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(k in lowered for k in keywords):
            return category
    return "attraction"


# Response schemas
class _ViatorModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ViatorPriceSummary(_ViatorModel):
    from_price: float | None = Field(default=None, alias="fromPrice")


class ViatorPricing(_ViatorModel):
    summary: ViatorPriceSummary | None = None
    currency: str | None = None


class ViatorReviews(_ViatorModel):
    combined_average_rating: float | None = Field(default=None, alias="combinedAverageRating")
    total_reviews: int | None = Field(default=None, alias="totalReviews")


class ViatorDuration(_ViatorModel):
    fixed_minutes: int | None = Field(default=None, alias="fixedDurationInMinutes")
    variable_from_minutes: int | None = Field(default=None, alias="variableDurationFromMinutes")
    variable_to_minutes: int | None = Field(default=None, alias="variableDurationToMinutes")


class ViatorImageVariant(_ViatorModel):
    url: str
    width: int = 0
    height: int = 0


class ViatorImage(_ViatorModel):
    variants: list[ViatorImageVariant] = []


class ViatorProduct(_ViatorModel):
    product_code: str | None = Field(default=None, alias="productCode")
    title: str | None = None
    name: str | None = None
    description: str | None = None
    pricing: ViatorPricing | None = None
    reviews: ViatorReviews | None = None
    duration: ViatorDuration | None = None
    images: list[ViatorImage] = []
    flags: list[str] = []
    product_url: str | None = Field(default=None, alias="productUrl")


class ViatorSearchResponse(_ViatorModel):
    products: list[ViatorProduct] = []


def format_duration(duration: ViatorDuration | None) -> str:
    """Human-readable duration from minute counts."""
    if duration is None:
        return "Varies"
    if duration.fixed_minutes is not None:
        hours = round(duration.fixed_minutes / 60)
        if hours == 0:
            return f"{duration.fixed_minutes} min"
        return f"{hours} hour{'s' if hours != 1 else ''}"
    if duration.variable_from_minutes is not None and duration.variable_to_minutes is not None:
        low = round(duration.variable_from_minutes / 60)
        high = round(duration.variable_to_minutes / 60)
        return f"{low}-{high} hours"
    return "Varies"


def pick_image(images: list[ViatorImage]) -> str | None:
    """Choose a mid-size image variant (400-800px wide when available)."""
    if not images or not images[0].variants:
        return None
    variants = sorted(images[0].variants, key=lambda v: v.width)
    for variant in variants:
        if 400 <= variant.width <= 800:
            return variant.url
    for variant in variants:
        if variant.width >= 200:
            return variant.url
    return variants[-1].url


def transform_product(product: ViatorProduct) -> ActivityEntry:
    """Normalize a Viator product into an ActivityEntry."""
    title = product.title or product.name or "Activity"
    pricing = product.pricing or ViatorPricing()
    reviews = product.reviews or ViatorReviews()
    price = pricing.summary.from_price if pricing.summary else None

    return ActivityEntry(
        title=title,
        category=categorize_activity(title),
        price=max(0.0, price or 0.0),
        currency=pricing.currency or "EUR",
        rating=reviews.combined_average_rating,
        review_count=reviews.total_reviews or 0,
        duration=format_duration(product.duration),
        description=(product.description or "")[:DESCRIPTION_MAX_CHARS],
        booking_url=product.product_url
        or f"https://www.viator.com/tours/{product.product_code or ''}",
        image=pick_image(product.images),
        skip_the_line="SKIP_THE_LINE" in product.flags or "skip" in title.lower(),
        data_source=ListingDataSource.live_provider,
    )


async def search_activities(
    destination: str,
    api_key: str,
    base_url: str = "https://api.viator.com/partner",
    currency: str = "EUR",
    client: httpx.AsyncClient | None = None,
) -> ProviderOk[list[ActivityEntry]]:
    """Search top-rated activities for a destination.

    Args:
        destination: Free-text destination name
        api_key: Viator partner API key
        base_url: Viator API base URL
        currency: Pricing currency requested from the API
        client: Optional httpx client (for testing with mocks)

    Returns:
        ProviderOk wrapping normalized ActivityEntry objects

    Raises:
        ProviderError: When the search returns no products
        httpx.HTTPError: On network or HTTP errors
    """
    url = f"{base_url}/products/search"
    headers = {
        "Accept": "application/json;version=2.0",
        "Accept-Language": "en-US",
        "Content-Type": "application/json",
        "exp-api-key": api_key,
    }
    body = {
        "searchTerm": destination,
        "sorting": {"sort": "TRAVELER_RATING", "order": "DESC"},
        "pagination": {"start": 1, "count": SEARCH_RESULT_COUNT},
        "currency": currency,
    }

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=15.0)
        close_client = True

    try:
        response = await client.post(url, json=body, headers=headers)
        response.raise_for_status()
        products = ViatorSearchResponse.model_validate(response.json()).products
        if not products:
            raise ProviderError("empty", f"no activities for {destination}")

        return ProviderOk(
            value=[transform_product(p) for p in products],
            provenance=provenance_for_http("provider.viator", url, ref_id=destination),
        )
    finally:
        if close_client:
            await client.aclose()
