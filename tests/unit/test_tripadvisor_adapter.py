"""Unit tests for the TripAdvisor restaurant adapter."""

import httpx
import pytest

from tripgen.adapters.tripadvisor import search_restaurants
from tripgen.models.common import ListingDataSource
from tripgen.orchestration.errors import ProviderError

SEARCH = {
    "data": [
        {"location_id": "111", "name": "Da Enzo al 29", "address_obj": {"address_string": "Via dei Vascellari 29"}},
        {"location_id": 222, "name": "Roscioli"},
    ]
}

DETAILS_111 = {
    "location_id": "111",
    "name": "Da Enzo al 29",
    "cuisine": [{"name": "italian", "localized_name": "Italian"}, {"name": "roman", "localized_name": "Roman"}],
    "price_level": "€€",
    "rating": "4.5",
    "num_reviews": "5400",
    "address_obj": {"address_string": "Via dei Vascellari 29, Rome"},
    "web_url": "https://www.tripadvisor.com/Restaurant_Review-d111",
}


class TestSearchRestaurants:
    """Test search plus per-result details."""

    @pytest.mark.asyncio
    async def test_search_with_details(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["key"] == "test-key"
            if request.url.path.endswith("/location/search"):
                assert request.url.params["searchQuery"] == "restaurants Rome"
                return httpx.Response(200, json=SEARCH)
            if request.url.path.endswith("/location/111/details"):
                return httpx.Response(200, json=DETAILS_111)
            return httpx.Response(500)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await search_restaurants("Rome", api_key="test-key", client=client)

        detailed, basic = result.value
        assert detailed.name == "Da Enzo al 29"
        assert detailed.cuisine == "Italian, Roman"
        assert detailed.rating == 4.5
        assert detailed.review_count == 5400
        assert detailed.address == "Via dei Vascellari 29, Rome"
        assert detailed.data_source == ListingDataSource.live_provider

        # Failed detail fetch degrades to a basic entry
        assert basic.name == "Roscioli"
        assert basic.cuisine == "Various"
        assert basic.price_range == "€€"
        assert basic.rating == 4.0
        assert basic.address == "Rome"
        assert basic.url == "https://www.tripadvisor.com/Restaurant_Review-d222"

    @pytest.mark.asyncio
    async def test_non_json_detail_degrades_to_basic_entry(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/location/search"):
                return httpx.Response(200, json=SEARCH)
            if request.url.path.endswith("/location/111/details"):
                return httpx.Response(200, json=DETAILS_111)
            return httpx.Response(200, text="<html>oops</html>")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await search_restaurants("Rome", api_key="k", client=client)

        detailed, basic = result.value
        assert detailed.cuisine == "Italian, Roman"
        assert basic.name == "Roscioli"
        assert basic.cuisine == "Various"

    @pytest.mark.asyncio
    async def test_no_results_raises_empty(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": []})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ProviderError) as exc_info:
                await search_restaurants("Atlantis", api_key="k", client=client)

        assert exc_info.value.reason == "empty"

    @pytest.mark.asyncio
    async def test_search_failure_propagates(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await search_restaurants("Rome", api_key="k", client=client)

    @pytest.mark.asyncio
    async def test_detail_fetches_are_capped(self) -> None:
        detail_calls: list[str] = []
        hits = [{"location_id": str(i), "name": f"Place {i}"} for i in range(30)]

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/location/search"):
                return httpx.Response(200, json={"data": hits})
            detail_calls.append(request.url.path)
            return httpx.Response(404)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await search_restaurants("Rome", api_key="k", client=client)

        assert len(result.value) == 20
        assert len(detail_calls) == 20
