"""Flight offer adapter for the Duffel API (v2).

Offer requests are created with POST /air/offer_requests. When the response
carries no inline offers, /air/offers is polled a fixed number of times with
a fixed delay.
"""

import asyncio
import re
from collections.abc import Awaitable, Callable
from datetime import date, datetime

import httpx
from pydantic import BaseModel

from tripgen.adapters.provenance import provenance_for_http
from tripgen.adapters.runner import ProviderOk
from tripgen.models.flights import FlightLeg, FlightOption
from tripgen.orchestration.errors import ProviderError

SANDBOX_OWNER_NAME = "Duffel Airways"


# Response schemas (only the fields we read)
class DuffelCarrier(BaseModel):
    name: str | None = None
    iata_code: str | None = None
    website_url: str | None = None


class DuffelSegment(BaseModel):
    operating_carrier: DuffelCarrier | None = None
    marketing_carrier: DuffelCarrier | None = None
    operating_carrier_flight_number: str | None = None
    departing_at: str | None = None
    arriving_at: str | None = None


class DuffelSlice(BaseModel):
    duration: str | None = None
    departing_at: str | None = None
    arriving_at: str | None = None
    segments: list[DuffelSegment] = []


class DuffelOffer(BaseModel):
    id: str
    total_amount: str
    total_currency: str
    owner: DuffelCarrier | None = None
    slices: list[DuffelSlice] = []
    passengers: list[dict] = []


class DuffelOfferRequest(BaseModel):
    id: str
    offers: list[DuffelOffer] = []


class DuffelOfferRequestEnvelope(BaseModel):
    data: DuffelOfferRequest


class DuffelOffersEnvelope(BaseModel):
    data: list[DuffelOffer] = []


def skyscanner_url(origin: str, destination: str, departure: date, return_date: date) -> str:
    """Deep link to a Skyscanner round-trip search."""
    return (
        f"https://www.skyscanner.com/transport/flights/{origin.lower()}/{destination.lower()}/"
        f"{departure.strftime('%y%m%d')}/{return_date.strftime('%y%m%d')}"
    )


def format_clock(value: str | None) -> str:
    """Format an ISO-8601 timestamp as 'HH:MM AM/PM'."""
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value).strftime("%I:%M %p")
    except ValueError:
        return value


_ISO_DURATION = re.compile(r"^P(?:(\d+)D)?T?(?:(\d+)H)?(?:(\d+)M)?")


def format_iso_duration(value: str | None) -> str:
    """Convert an ISO-8601 duration (e.g. 'PT2H30M') to '2h 30m'."""
    if not value:
        return ""
    match = _ISO_DURATION.match(value)
    if not match:
        return value
    days, hours, minutes = (int(g) if g else 0 for g in match.groups())
    return f"{days * 24 + hours}h {minutes}m"


def _leg(slice_: DuffelSlice, origin: str, destination: str) -> FlightLeg:
    first = slice_.segments[0] if slice_.segments else DuffelSegment()
    last = slice_.segments[-1] if slice_.segments else DuffelSegment()
    carrier = first.operating_carrier or first.marketing_carrier or DuffelCarrier()
    code = carrier.iata_code or ""

    return FlightLeg(
        airline=carrier.name or code,
        airline_code=code,
        flight_number=f"{code}{first.operating_carrier_flight_number or ''}",
        departure_time=format_clock(first.departing_at or slice_.departing_at),
        arrival_time=format_clock(last.arriving_at or slice_.arriving_at),
        duration=format_iso_duration(slice_.duration),
        stops=max(0, len(slice_.segments) - 1),
        origin=origin,
        destination=destination,
    )


def transform_offer(
    offer: DuffelOffer,
    origin: str,
    destination: str,
    departure: date,
    return_date: date,
    passenger_count: int,
) -> FlightOption:
    """Convert a Duffel offer into a per-person FlightOption."""
    if len(offer.slices) < 2:
        raise ProviderError("schema", f"offer {offer.id} is not a round trip")

    passengers = len(offer.passengers) or max(1, passenger_count)
    owner = offer.owner or DuffelCarrier()

    return FlightOption(
        id=offer.id,
        price=round(float(offer.total_amount) / passengers),
        currency=offer.total_currency,
        outbound=_leg(offer.slices[0], origin, destination),
        inbound=_leg(offer.slices[1], destination, origin),
        checked_bag_included=True,
        booking_url=owner.website_url
        or skyscanner_url(origin, destination, departure, return_date),
    )


def _trusted(offer: DuffelOffer, carrier_filter: tuple[str, ...]) -> bool:
    if not carrier_filter:
        return True
    owner = offer.owner or DuffelCarrier()
    return owner.iata_code in carrier_filter or owner.name == SANDBOX_OWNER_NAME


async def search_flight_offers(
    origin: str,
    destination: str,
    departure: date,
    return_date: date,
    passenger_ages: list[int],
    access_token: str,
    base_url: str = "https://api.duffel.com",
    poll_attempts: int = 15,
    poll_delay_ms: int = 2000,
    max_results: int = 5,
    carrier_filter: tuple[str, ...] = ("ZZ",),
    client: httpx.AsyncClient | None = None,
    sleep_fn: Callable[[float], Awaitable[None]] | None = None,
) -> ProviderOk[list[FlightOption]]:
    """Search round-trip offers on Duffel.

    Args:
        origin: Origin hub code
        destination: Destination hub code
        departure: Outbound date
        return_date: Return date
        passenger_ages: One age per passenger
        access_token: Duffel API token
        base_url: Duffel API base URL
        poll_attempts: Max polls of /air/offers when no inline offers arrive
        poll_delay_ms: Delay before each poll
        max_results: Number of cheapest offers to keep
        carrier_filter: Trusted owner codes; empty disables filtering
        client: Optional httpx client (for testing with mocks)
        sleep_fn: Injectable sleep function (default: asyncio.sleep)

    Returns:
        ProviderOk wrapping FlightOption objects sorted by price, cheapest marked best

    Raises:
        ProviderError: When no usable offers remain
        httpx.HTTPError: On network or HTTP errors
    """
    sleep = sleep_fn or asyncio.sleep
    headers = {
        "Authorization": f"Bearer {access_token}",
        "Content-Type": "application/json",
        "Accept": "application/json",
        "Duffel-Version": "v2",
    }
    payload = {
        "data": {
            "passengers": [{"age": age} for age in passenger_ages],
            "slices": [
                {
                    "origin": origin,
                    "destination": destination,
                    "departure_date": departure.isoformat(),
                },
                {
                    "origin": destination,
                    "destination": origin,
                    "departure_date": return_date.isoformat(),
                },
            ],
            "return_offers": True,
        }
    }
    url = f"{base_url}/air/offer_requests"

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=30.0)
        close_client = True

    try:
        response = await client.post(url, json=payload, headers=headers)
        response.raise_for_status()
        offer_request = DuffelOfferRequestEnvelope.model_validate(response.json()).data
        offers = offer_request.offers

        # Offers may be produced asynchronously
        attempt = 0
        while not offers and attempt < poll_attempts:
            attempt += 1
            await sleep(poll_delay_ms / 1000)
            poll = await client.get(
                f"{base_url}/air/offers",
                params={
                    "offer_request_id": offer_request.id,
                    "limit": 50,
                    "sort": "total_amount",
                },
                headers=headers,
            )
            if not poll.is_success:
                continue
            offers = DuffelOffersEnvelope.model_validate(poll.json()).data

        offers = [o for o in offers if _trusted(o, carrier_filter) and len(o.slices) >= 2]
        if not offers:
            raise ProviderError("empty", f"no offers for {origin}-{destination}")

        offers.sort(key=lambda o: float(o.total_amount))
        options = [
            transform_offer(o, origin, destination, departure, return_date, len(passenger_ages))
            for o in offers[:max_results]
        ]
        options.sort(key=lambda o: o.price)
        options[0].is_best_price = True

        return ProviderOk(
            value=options,
            provenance=provenance_for_http("provider.duffel", url, ref_id=offer_request.id),
        )
    finally:
        if close_client:
            await client.aclose()
