"""Flight acquisition stage: live offers with a synthesized fallback."""

import logging
import random
from dataclasses import dataclass
from datetime import date

import httpx

from tripgen.adapters.catalogs import AirlineRef, load_airlines, load_routes
from tripgen.adapters.duffel import search_flight_offers, skyscanner_url
from tripgen.adapters.runner import ProviderOk, ProviderRunner, StageContext
from tripgen.config import ProviderConfig
from tripgen.models.common import FlightDataSource, Skipped, TimeOfDay
from tripgen.models.flights import FlightLeg, FlightOffers, FlightOption, FlightResult
from tripgen.orchestration.errors import TripValidationError
from tripgen.orchestration.locale import resolve_hub_code
from tripgen.orchestration.state import GenerationState

logger = logging.getLogger(__name__)

SYNTHESIZED_OPTION_COUNT = 4


@dataclass(frozen=True)
class TimeSlot:
    """Departure slot in the synthesized schedule."""

    label: str
    hour: int
    minute: int
    category: TimeOfDay
    price_multiplier: float


TIME_SLOTS: list[TimeSlot] = [
    TimeSlot("early_morning", 6, 30, TimeOfDay.morning, 0.90),
    TimeSlot("morning", 9, 15, TimeOfDay.morning, 1.00),
    TimeSlot("afternoon", 13, 45, TimeOfDay.afternoon, 1.25),
    TimeSlot("evening", 18, 30, TimeOfDay.evening, 1.15),
    TimeSlot("night", 22, 15, TimeOfDay.night, 0.85),
]

# Slot order when no time of day is preferred
ANY_TIME_SLOTS = [1, 2, 3, 0]


def select_slots(preferred: TimeOfDay) -> list[int]:
    """Pick four slot indices: the preferred slot first, then others in catalog order."""
    if preferred == TimeOfDay.any:
        return list(ANY_TIME_SLOTS)

    matching = [i for i, s in enumerate(TIME_SLOTS) if s.category == preferred][:1]
    others = [i for i, s in enumerate(TIME_SLOTS) if s.category != preferred]
    return (matching + others)[:SYNTHESIZED_OPTION_COUNT]


def format_clock(hour: int, minute: int) -> str:
    """Format a 24h clock time as 'HH:MM AM/PM'."""
    suffix = "AM" if hour < 12 else "PM"
    display = hour % 12 or 12
    return f"{display:02d}:{minute:02d} {suffix}"


def add_hours(hour: int, minute: int, hours: float) -> tuple[int, int]:
    """Add a duration to a clock time, wrapping past midnight."""
    total = (hour * 60 + minute + round(hours * 60)) % (24 * 60)
    return total // 60, total % 60


def format_duration(hours: float) -> str:
    whole = int(hours)
    return f"{whole}h {round((hours - whole) * 60)}m"


def base_price(duration_hours: float, rng: random.Random) -> float:
    """Per-person round-trip base fare by route length, with jitter."""
    if duration_hours < 2:
        return 80 + rng.random() * 40
    if duration_hours < 4:
        return 150 + rng.random() * 100
    return 400 + rng.random() * 200


def airline_roster(origin: str, destination: str) -> list[AirlineRef]:
    """Choose the carrier roster for a route by region membership of either endpoint."""
    catalog = load_airlines()
    for region in catalog.precedence:
        codes = catalog.regions[region].codes
        if origin in codes or destination in codes:
            return catalog.regions[region].airlines

    logger.info(
        f"No airline region for {origin or '?'}-{destination or '?'}, "
        f"using {catalog.default_region} roster"
    )
    return catalog.regions[catalog.default_region].airlines


def _synth_leg(
    airline: AirlineRef,
    slot: TimeSlot,
    duration_hours: float,
    origin: str,
    destination: str,
    rng: random.Random,
) -> FlightLeg:
    arrival_hour, arrival_minute = add_hours(slot.hour, slot.minute, duration_hours)
    return FlightLeg(
        airline=airline.name,
        airline_code=airline.code,
        flight_number=f"{airline.code}{rng.randint(1000, 9999)}",
        departure_time=format_clock(slot.hour, slot.minute),
        arrival_time=format_clock(arrival_hour, arrival_minute),
        duration=format_duration(duration_hours),
        stops=0,
        origin=origin,
        destination=destination,
    )


def synthesize_flights(
    origin: str,
    destination: str,
    departure: date,
    return_date: date,
    preferred: TimeOfDay,
    rng: random.Random,
    currency: str = "EUR",
) -> FlightOffers:
    """Build four plausible round-trip options from the static route model.

    Args:
        origin: Origin hub code (may be empty when unresolved)
        destination: Destination hub code (may be empty when unresolved)
        departure: Outbound date
        return_date: Return date
        preferred: Preferred departure time of day
        rng: Random source for price jitter and flight numbers
        currency: Currency of the quoted prices

    Returns:
        FlightOffers with data_source=synthesized and exactly one best price
    """
    duration_hours = load_routes().duration_hours(origin, destination)
    roster = airline_roster(origin, destination)
    booking_url = skyscanner_url(origin, destination, departure, return_date)

    options: list[FlightOption] = []
    for i, slot_index in enumerate(select_slots(preferred)):
        slot = TIME_SLOTS[slot_index]
        return_slot = TIME_SLOTS[(slot_index + 2) % len(TIME_SLOTS)]
        airline = roster[i % len(roster)]

        outbound = _synth_leg(airline, slot, duration_hours, origin, destination, rng)
        inbound = _synth_leg(airline, return_slot, duration_hours, destination, origin, rng)
        if i == SYNTHESIZED_OPTION_COUNT - 1:
            outbound.stops = 1
            inbound.stops = 1

        bag_included = i < 2
        options.append(
            FlightOption(
                id=f"synth-{i + 1}",
                price=round(base_price(duration_hours, rng) * slot.price_multiplier),
                currency=currency,
                outbound=outbound,
                inbound=inbound,
                checked_bag_included=bag_included,
                checked_bag_price=None if bag_included else 25 + rng.randint(0, 19),
                booking_url=booking_url,
                time_of_day=slot.category,
                matches_preference=preferred == TimeOfDay.any or slot.category == preferred,
            )
        )

    options.sort(key=lambda o: (not o.matches_preference, o.price))
    best = min(options, key=lambda o: o.price)
    best.is_best_price = True

    return FlightOffers(
        options=options,
        best_price=best.price,
        data_source=FlightDataSource.synthesized,
        preferred_time=preferred,
    )


async def acquire_flights(
    state: GenerationState,
    config: ProviderConfig,
    runner: ProviderRunner,
    client: httpx.AsyncClient | None = None,
) -> FlightResult:
    """Flight stage.

    Skipped when the traveler already booked. Otherwise the live provider is
    tried when both hub codes resolve to distinct values; any failure degrades
    to synthesized options.

    Raises:
        TripValidationError: Origin missing while flights are not skipped
    """
    request = state.request
    if request.skip_flights:
        state.sources["flights"] = "skipped"
        return Skipped()

    if not request.origin or not request.origin.strip():
        raise TripValidationError("origin is required when flights are not skipped")

    origin_code = resolve_hub_code(request.origin)
    dest_code = resolve_hub_code(request.destination)
    departure = request.start_date.date()
    return_date = request.end_date.date()

    if not origin_code or not dest_code or origin_code == dest_code:
        reason = "invalid_route"
    elif not config.live_flights:
        reason = "unavailable"
    else:
        ages = request.traveler_ages or [config.default_passenger_age] * request.travelers
        ctx = StageContext(str(state.trip_id), state.generation, "flights")
        # Hard timeout covers the whole poll budget
        timeout_ms = config.provider_timeout_ms + config.flight_poll_attempts * config.flight_poll_delay_ms

        result = await runner.run(
            ctx,
            "duffel",
            lambda: search_flight_offers(
                origin_code,
                dest_code,
                departure,
                return_date,
                ages,
                access_token=config.duffel_access_token or "",
                base_url=config.duffel_base_url,
                poll_attempts=config.flight_poll_attempts,
                poll_delay_ms=config.flight_poll_delay_ms,
                max_results=config.flight_max_results,
                carrier_filter=config.flight_test_carrier_filter,
                client=client,
            ),
            timeout_ms=timeout_ms,
        )
        if isinstance(result, ProviderOk):
            state.sources["flights"] = "live"
            return FlightOffers(
                options=result.value,
                best_price=min(o.price for o in result.value),
                data_source=FlightDataSource.live_provider,
                preferred_time=request.preferred_flight_time,
            )
        reason = result.reason

    logger.info(f"Flights falling back to synthesized options ({reason})")
    runner.metrics.inc_fallback("flights")
    state.sources["flights"] = "fallback"
    return synthesize_flights(
        origin_code,
        dest_code,
        departure,
        return_date,
        request.preferred_flight_time,
        state.rng,
        currency=config.currency,
    )
