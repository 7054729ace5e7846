"""Unit tests for the Viator activity adapter."""

import json
from typing import Any

import httpx
import pytest

from tripgen.adapters.viator import (
    ViatorDuration,
    ViatorImage,
    ViatorProduct,
    categorize_activity,
    format_duration,
    pick_image,
    search_activities,
    transform_product,
)
from tripgen.models.common import ListingDataSource
from tripgen.orchestration.errors import ProviderError

PRODUCT: dict[str, Any] = {
    "productCode": "5010SYD",
    "title": "Skip the Line: Colosseum Guided Tour",
    "description": "Explore the arena floor with an expert guide. " * 20,
    "pricing": {"summary": {"fromPrice": 59.5}, "currency": "EUR"},
    "reviews": {"combinedAverageRating": 4.7, "totalReviews": 1234},
    "duration": {"fixedDurationInMinutes": 180},
    "images": [
        {
            "variants": [
                {"url": "https://img/small.jpg", "width": 150, "height": 100},
                {"url": "https://img/medium.jpg", "width": 480, "height": 320},
                {"url": "https://img/large.jpg", "width": 1200, "height": 800},
            ]
        }
    ],
    "flags": ["FREE_CANCELLATION"],
    "productUrl": "https://www.viator.com/tours/Rome/d511-5010SYD",
}


class TestCategorizeActivity:
    """Test keyword-based categories."""

    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Vatican Museum Tour", "museum"),
            ("Trastevere Walking Tour", "tour"),
            ("Pasta Tasting Evening", "food"),
            ("Tiber Boat Ride", "cruise"),
            ("Opera Concert at a Church", "entertainment"),
            ("Appian Way Hiking Trip", "adventure"),
            ("Gelato Making Class", "experience"),
            ("Pantheon Entry", "attraction"),
        ],
    )
    def test_categories(self, title: str, expected: str) -> None:
        assert categorize_activity(title) == expected


class TestFormatDuration:
    """Test duration text."""

    @pytest.mark.parametrize(
        ("duration", "expected"),
        [
            ({"fixedDurationInMinutes": 180}, "3 hours"),
            ({"fixedDurationInMinutes": 60}, "1 hour"),
            ({"fixedDurationInMinutes": 20}, "20 min"),
            ({"variableDurationFromMinutes": 120, "variableDurationToMinutes": 240}, "2-4 hours"),
            ({}, "Varies"),
        ],
    )
    def test_format(self, duration: dict[str, int], expected: str) -> None:
        assert format_duration(ViatorDuration.model_validate(duration)) == expected

    def test_missing_duration(self) -> None:
        assert format_duration(None) == "Varies"


class TestPickImage:
    """Test image variant selection."""

    def test_prefers_mid_size(self) -> None:
        images = [ViatorImage.model_validate(i) for i in PRODUCT["images"]]
        assert pick_image(images) == "https://img/medium.jpg"

    def test_falls_back_to_largest(self) -> None:
        images = [ViatorImage.model_validate({"variants": [{"url": "a", "width": 50}, {"url": "b", "width": 100}]})]
        assert pick_image(images) == "b"

    def test_no_images(self) -> None:
        assert pick_image([]) is None


class TestTransformProduct:
    """Test product normalization."""

    def test_transform(self) -> None:
        entry = transform_product(ViatorProduct.model_validate(PRODUCT))

        assert entry.title == "Skip the Line: Colosseum Guided Tour"
        assert entry.category == "tour"
        assert entry.price == 59.5
        assert entry.rating == 4.7
        assert entry.review_count == 1234
        assert entry.duration == "3 hours"
        assert len(entry.description) == 300
        assert entry.booking_url == PRODUCT["productUrl"]
        assert entry.image == "https://img/medium.jpg"
        assert entry.skip_the_line
        assert entry.data_source == ListingDataSource.live_provider

    def test_sparse_product(self) -> None:
        entry = transform_product(ViatorProduct.model_validate({"productCode": "X1", "name": "Catacombs"}))

        assert entry.title == "Catacombs"
        assert entry.price == 0
        assert entry.review_count == 0
        assert entry.duration == "Varies"
        assert entry.booking_url == "https://www.viator.com/tours/X1"
        assert not entry.skip_the_line


class TestSearchActivities:
    """Test the product search call."""

    @pytest.mark.asyncio
    async def test_search(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/partner/products/search"
            assert request.headers["exp-api-key"] == "test-key"
            body = json.loads(request.content)
            assert body["searchTerm"] == "Rome"
            assert body["currency"] == "EUR"
            return httpx.Response(200, json={"products": [PRODUCT], "totalCount": 1})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await search_activities("Rome", api_key="test-key", client=client)

        assert len(result.value) == 1
        assert result.provenance.source == "provider.viator"

    @pytest.mark.asyncio
    async def test_no_products_raises_empty(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"products": []})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ProviderError) as exc_info:
                await search_activities("Rome", api_key="k", client=client)

        assert exc_info.value.reason == "empty"
