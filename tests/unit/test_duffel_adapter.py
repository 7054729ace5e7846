"""Unit tests for the Duffel flight offer adapter."""

from datetime import date
from typing import Any

import httpx
import pytest

from tripgen.adapters.duffel import (
    DuffelOffer,
    format_clock,
    format_iso_duration,
    search_flight_offers,
    skyscanner_url,
    transform_offer,
)
from tripgen.orchestration.errors import ProviderError

DEPARTURE = date(2026, 5, 1)
RETURN = date(2026, 5, 4)


def make_offer(offer_id: str, total: str, owner_code: str = "ZZ", owner_name: str = "Duffel Airways") -> dict[str, Any]:
    carrier = {"name": owner_name, "iata_code": owner_code}

    def slice_(dep: str, arr: str, number: str, stops: int = 0) -> dict[str, Any]:
        segments = [
            {
                "operating_carrier": carrier,
                "operating_carrier_flight_number": number,
                "departing_at": dep,
                "arriving_at": arr,
            }
        ]
        segments += [dict(segments[0]) for _ in range(stops)]
        return {"duration": "PT2H30M", "segments": segments}

    return {
        "id": offer_id,
        "total_amount": total,
        "total_currency": "EUR",
        "owner": carrier,
        "passengers": [{"id": "pas_1"}],
        "slices": [
            slice_("2026-05-01T09:15:00", "2026-05-01T11:45:00", "101"),
            slice_("2026-05-04T18:30:00", "2026-05-04T21:00:00", "102", stops=1),
        ],
    }


async def no_sleep(delays: list[float], seconds: float) -> None:
    delays.append(seconds)


class TestFormatting:
    """Test Duffel value formatting."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("PT2H30M", "2h 30m"), ("PT45M", "0h 45m"), ("P1DT2H", "26h 0m"), (None, "")],
    )
    def test_format_iso_duration(self, value: str | None, expected: str) -> None:
        assert format_iso_duration(value) == expected

    def test_format_clock(self) -> None:
        assert format_clock("2026-05-01T09:15:00") == "09:15 AM"
        assert format_clock("2026-05-01T21:05:00") == "09:05 PM"
        assert format_clock(None) == ""

    def test_skyscanner_url(self) -> None:
        assert skyscanner_url("LHR", "FCO", DEPARTURE, RETURN) == (
            "https://www.skyscanner.com/transport/flights/lhr/fco/260501/260504"
        )


class TestTransformOffer:
    """Test offer normalization."""

    def test_round_trip(self) -> None:
        offer = DuffelOffer.model_validate(make_offer("off_1", "240.00"))

        option = transform_offer(offer, "LHR", "FCO", DEPARTURE, RETURN, passenger_count=1)

        assert option.id == "off_1"
        assert option.price == 240
        assert option.outbound.flight_number == "ZZ101"
        assert option.outbound.departure_time == "09:15 AM"
        assert option.outbound.duration == "2h 30m"
        assert option.outbound.stops == 0
        assert option.inbound.stops == 1
        assert option.inbound.origin == "FCO"
        assert option.checked_bag_included

    def test_price_is_per_person(self) -> None:
        data = make_offer("off_1", "600.00")
        data["passengers"] = [{"id": "a"}, {"id": "b"}, {"id": "c"}]
        offer = DuffelOffer.model_validate(data)

        option = transform_offer(offer, "LHR", "FCO", DEPARTURE, RETURN, passenger_count=3)

        assert option.price == 200

    def test_one_way_offer_rejected(self) -> None:
        data = make_offer("off_1", "100.00")
        data["slices"] = data["slices"][:1]

        with pytest.raises(ProviderError) as exc_info:
            transform_offer(DuffelOffer.model_validate(data), "LHR", "FCO", DEPARTURE, RETURN, 1)
        assert exc_info.value.reason == "schema"


class TestSearchFlightOffers:
    """Test offer request and polling."""

    @pytest.mark.asyncio
    async def test_inline_offers(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert request.headers["Duffel-Version"] == "v2"
            assert request.headers["Authorization"] == "Bearer test-token"
            return httpx.Response(
                201,
                json={
                    "data": {
                        "id": "orq_1",
                        "offers": [make_offer("off_b", "300.00"), make_offer("off_a", "200.00")],
                    }
                },
            )

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await search_flight_offers(
                "LHR", "FCO", DEPARTURE, RETURN, [30], access_token="test-token", client=client
            )

        assert [o.id for o in result.value] == ["off_a", "off_b"]
        assert result.value[0].is_best_price
        assert not result.value[1].is_best_price
        assert result.provenance.source == "provider.duffel"
        assert result.provenance.ref_id == "orq_1"

    @pytest.mark.asyncio
    async def test_one_way_offer_skipped(self) -> None:
        one_way = make_offer("off_cheap", "50.00")
        one_way["slices"] = one_way["slices"][:1]

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                201,
                json={"data": {"id": "orq_1", "offers": [one_way, make_offer("off_a", "200.00")]}},
            )

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await search_flight_offers(
                "LHR", "FCO", DEPARTURE, RETURN, [30], access_token="t", client=client
            )

        assert [o.id for o in result.value] == ["off_a"]
        assert result.value[0].is_best_price

    @pytest.mark.asyncio
    async def test_polls_until_offers_arrive(self) -> None:
        polls: list[httpx.Request] = []
        delays: list[float] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(201, json={"data": {"id": "orq_9", "offers": []}})
            polls.append(request)
            if len(polls) == 1:
                return httpx.Response(502)
            if len(polls) == 2:
                return httpx.Response(200, json={"data": []})
            return httpx.Response(200, json={"data": [make_offer("off_1", "150.00")]})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await search_flight_offers(
                "LHR",
                "FCO",
                DEPARTURE,
                RETURN,
                [30],
                access_token="t",
                poll_delay_ms=500,
                client=client,
                sleep_fn=lambda s: no_sleep(delays, s),
            )

        assert len(polls) == 3
        assert delays == [0.5, 0.5, 0.5]
        assert polls[0].url.params["offer_request_id"] == "orq_9"
        assert polls[0].url.params["sort"] == "total_amount"
        assert [o.id for o in result.value] == ["off_1"]

    @pytest.mark.asyncio
    async def test_poll_budget_exhausted_raises_empty(self) -> None:
        delays: list[float] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(201, json={"data": {"id": "orq_1", "offers": []}})
            return httpx.Response(200, json={"data": []})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ProviderError) as exc_info:
                await search_flight_offers(
                    "LHR",
                    "FCO",
                    DEPARTURE,
                    RETURN,
                    [30],
                    access_token="t",
                    poll_attempts=3,
                    client=client,
                    sleep_fn=lambda s: no_sleep(delays, s),
                )

        assert exc_info.value.reason == "empty"
        assert len(delays) == 3

    @pytest.mark.asyncio
    async def test_untrusted_carriers_filtered(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                201,
                json={
                    "data": {
                        "id": "orq_1",
                        "offers": [
                            make_offer("off_real", "90.00", owner_code="BA", owner_name="British Airways"),
                            make_offer("off_sandbox", "120.00"),
                        ],
                    }
                },
            )

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            filtered = await search_flight_offers(
                "LHR", "FCO", DEPARTURE, RETURN, [30], access_token="t", client=client
            )
            unfiltered = await search_flight_offers(
                "LHR", "FCO", DEPARTURE, RETURN, [30], access_token="t", carrier_filter=(), client=client
            )

        assert [o.id for o in filtered.value] == ["off_sandbox"]
        assert [o.id for o in unfiltered.value] == ["off_real", "off_sandbox"]

    @pytest.mark.asyncio
    async def test_max_results(self) -> None:
        offers = [make_offer(f"off_{i}", f"{100 + i}.00") for i in range(8)]

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, json={"data": {"id": "orq_1", "offers": offers}})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await search_flight_offers(
                "LHR", "FCO", DEPARTURE, RETURN, [30], access_token="t", max_results=3, client=client
            )

        assert [o.id for o in result.value] == ["off_0", "off_1", "off_2"]

    @pytest.mark.asyncio
    async def test_http_error_propagates(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"errors": [{"title": "Unauthorized"}]})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await search_flight_offers(
                    "LHR", "FCO", DEPARTURE, RETURN, [30], access_token="bad", client=client
                )
