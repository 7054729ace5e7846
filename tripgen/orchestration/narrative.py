"""Narrative generator stage.

Asks the generative provider for exactly N days, then repairs the result so
the itinerary always has N contiguous days:
- Unusable output (error, empty, unparsable) is replaced by the template
- A short day array keeps its days and gets template days for the tail
- Extra days are dropped and every day is re-stamped with its number and date
"""

import json
import logging
import re
from datetime import time

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from tripgen.adapters.runner import ProviderOk, ProviderRunner, StageContext
from tripgen.config import ProviderConfig
from tripgen.llm.client import NarrativeClient
from tripgen.models.itinerary import ActivityItem, DayPlan
from tripgen.models.listings import ActivityEntry, RestaurantEntry
from tripgen.models.trip import TripRequest
from tripgen.orchestration.state import GenerationState
from tripgen.orchestration.template import build_template_itinerary

logger = logging.getLogger(__name__)

STYLE_GUIDANCE: dict[str, str] = {
    "shopping": (
        "Shopping: include local markets, design boutiques and well-known shopping streets, "
        "leaving time to browse."
    ),
    "nightlife": (
        "Nightlife: plan lively evenings with cocktail bars, live music venues and late "
        "dinners; keep mornings relaxed."
    ),
    "food": (
        "Food: center days around regional dishes, food markets, tastings and cooking "
        "experiences; suggest where locals eat."
    ),
    "culture": (
        "Culture: prioritize museums, historic landmarks, architecture and performances, "
        "with context on why each matters."
    ),
    "nature": (
        "Nature: include parks, gardens, viewpoints, coastal or hiking excursions and "
        "outdoor time each day."
    ),
}

LOCAL_EXPERIENCE_GUIDANCE: dict[str, str] = {
    "local-food": "Local food spots: family-run eateries and street food favored by residents",
    "markets": "Markets: neighborhood food and flea markets",
    "hidden-gems": "Hidden gems: lesser-known sights away from the main tourist routes",
    "workshops": "Workshops: hands-on classes with local artisans or cooks",
    "nature": "Nature: local parks, trails and natural spots",
    "nightlife": "Nightlife: bars and venues where locals go out",
    "neighborhoods": "Neighborhoods: residential districts with their own character",
    "festivals": "Festivals: events or celebrations happening during the stay",
}

SYSTEM_PROMPT = (
    "You are a travel itinerary planner. Return only valid JSON with a single key "
    '"dailyPlan" holding an array of day objects. You must generate exactly {days} days.'
)


def style_guidance(interests: list[str]) -> str:
    """Travel-style guidance blended across the selected interests."""
    if not interests:
        return (
            "Create a balanced itinerary with a mix of attractions, dining, and cultural "
            "experiences."
        )

    lines = [
        STYLE_GUIDANCE.get(
            interest.lower(), f"{interest}: include experiences related to {interest.lower()}."
        )
        for interest in interests
    ]
    if len(interests) > 1:
        lines.insert(
            0,
            "Blend these travel styles naturally throughout the itinerary: "
            + ", ".join(interests)
            + ".",
        )
    return "\n".join(lines)


def local_experience_guidance(tags: list[str]) -> str:
    """Priority local-experience categories, or empty when none are selected."""
    lines = [LOCAL_EXPERIENCE_GUIDANCE[t] for t in tags if t in LOCAL_EXPERIENCE_GUIDANCE]
    if not lines:
        return ""
    return (
        "Prioritize these local experiences and mark matching items with "
        '"isLocalExperience": true:\n- ' + "\n- ".join(lines)
    )


def budget_tier(budget: float, travelers: int, days: int) -> str:
    """Budget tier from the per-person daily budget."""
    if budget <= 0:
        return "moderate"
    daily = budget / max(1, travelers) / max(1, days)
    if daily > 300:
        return "premium"
    if daily >= 150:
        return "high"
    if daily > 60:
        return "moderate"
    return "low"


def budget_guidance(budget: float, travelers: int, days: int) -> str:
    tier = budget_tier(budget, travelers, days)
    text = {
        "low": "Budget is tight: favor free sights, walking tours and casual local eateries.",
        "moderate": "Moderate budget: mix paid highlights with free sights and mid-range dining.",
        "high": "Comfortable budget: include guided tours, skip-the-line tickets and good restaurants.",
        "premium": "Premium budget: include exclusive experiences, private tours and fine dining.",
    }[tier]
    if travelers >= 5:
        text += " This is a large group: prefer venues that take group bookings."
    elif travelers >= 3:
        text += " Plan for a small group: reserve tables and tickets together."
    return text


def first_day_start_minutes(arrival: time, buffer_hours: int) -> int:
    """Earliest start on day one, in minutes after midnight.

    Late arrivals are capped so an evening slot survives.
    """
    hour = arrival.hour
    uncapped = hour * 60 + arrival.minute + buffer_hours * 60
    if hour >= 20:
        return min(uncapped - 60, 22 * 60)
    if hour >= 15:
        return min(uncapped, 21 * 60)
    if hour >= 12:
        return min(uncapped, 20 * 60)
    return uncapped


def _clock(minutes: int) -> str:
    return time(minutes // 60 % 24, minutes % 60).strftime("%I:%M %p").lstrip("0")


def time_guidance(request: TripRequest, buffer_hours: int) -> str:
    """Day-one and last-day scheduling rules from arrival/departure clock times."""
    lines = []
    days = request.trip_days

    if request.arrival_time is not None:
        start = first_day_start_minutes(request.arrival_time, buffer_hours)
        lines.append(
            f"The traveler arrives at {request.arrival_time.strftime('%H:%M')} on day 1. "
            f"Do not schedule anything on day 1 before {_clock(start)}."
        )

    if request.departure_time is not None:
        dep = request.departure_time
        latest = max(0, dep.hour * 60 + dep.minute - buffer_hours * 60)
        if dep.hour < 12:
            lines.append(
                f"Day {days} is a departure day: schedule only breakfast and check-out, "
                f"leaving by {_clock(latest)}."
            )
        else:
            lines.append(
                f"On day {days} the traveler departs at {dep.strftime('%H:%M')}; "
                f"finish all activities by {_clock(latest)}."
            )

    return "\n".join(lines)


def token_budget(days: int, config: ProviderConfig) -> int:
    """Completion token budget clamped to the configured range."""
    wanted = days * config.narrative_max_tokens_per_day
    return max(config.narrative_min_tokens, min(config.narrative_max_tokens, wanted))


def build_prompt(
    request: TripRequest,
    activities: list[ActivityEntry],
    restaurants: list[RestaurantEntry],
    buffer_hours: int,
) -> str:
    """Build the trip-specific planning prompt."""
    days = request.trip_days
    lines = [
        f"Plan a {days}-day trip to {request.destination} for {request.travelers} "
        f"traveler(s) from {request.start_date.date().isoformat()} to "
        f"{request.end_date.date().isoformat()}.",
        f"Total budget: {request.budget:.0f} EUR.",
        "",
        "## Travel style",
        style_guidance(request.interests),
    ]

    local = local_experience_guidance(request.local_experiences)
    if local:
        lines += ["", "## Local experiences", local]

    lines += ["", "## Budget", budget_guidance(request.budget, request.travelers, days)]

    timing = time_guidance(request, buffer_hours)
    if timing:
        lines += ["", "## Timing", timing]

    if activities:
        lines += ["", "## Known activities"]
        lines += [f"- {a.title} ({a.category}, {a.price:.0f} {a.currency})" for a in activities[:15]]
    if restaurants:
        lines += ["", "## Known restaurants"]
        lines += [f"- {r.name} ({r.cuisine}, {r.price_range})" for r in restaurants[:15]]

    lines += [
        "",
        "## Output",
        f"Generate EXACTLY {days} days, numbered 1 to {days}. Each day object has "
        '"day", "title" and "activities". Each activity has "time" (e.g. "9:00 AM"), '
        '"title", "description", "category", "price" (number, per person, EUR), '
        '"skipTheLine" (boolean), "skipTheLinePrice" (number or null), "duration", '
        '"tips" and "isLocalExperience" (boolean). Use category "restaurant" for meals.',
    ]
    return "\n".join(lines)


# Lenient decoding schemas for generated content
class GeneratedActivity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    time: str = ""
    title: str = Field(default="", validation_alias=AliasChoices("title", "name", "activity"))
    description: str = ""
    category: str = "attraction"
    price: float = 0.0
    skip_the_line: bool = Field(
        default=False, validation_alias=AliasChoices("skipTheLine", "skip_the_line")
    )
    skip_the_line_price: float | None = Field(
        default=None, validation_alias=AliasChoices("skipTheLinePrice", "skip_the_line_price")
    )
    duration: str | None = None
    tips: str | None = None
    is_local_experience: bool = Field(
        default=False, validation_alias=AliasChoices("isLocalExperience", "is_local_experience")
    )

    @field_validator("price", "skip_the_line_price", mode="before")
    @classmethod
    def coerce_price(cls, v: object) -> object:
        """Accept '€25' style strings; unparsable prices become 0."""
        if v is None or isinstance(v, int | float):
            return v
        match = re.search(r"\d+(?:\.\d+)?", str(v))
        return float(match.group()) if match else 0.0

    @field_validator("time", "title", "description", "category", mode="before")
    @classmethod
    def coerce_text(cls, v: object) -> object:
        return "" if v is None else v

    @field_validator("skip_the_line", "is_local_experience", mode="before")
    @classmethod
    def coerce_flag(cls, v: object) -> object:
        return False if v is None else v

    @field_validator("duration", mode="before")
    @classmethod
    def coerce_duration(cls, v: object) -> object:
        """Bare numbers are minutes."""
        if isinstance(v, bool):
            return None
        if isinstance(v, int | float):
            return f"{v:g} min"
        return v


class GeneratedDay(BaseModel):
    model_config = ConfigDict(extra="ignore")

    day: int | None = None
    title: str | None = None
    activities: list[GeneratedActivity] = []


class GeneratedPlan(BaseModel):
    model_config = ConfigDict(extra="ignore")

    daily_plan: list[GeneratedDay] = Field(
        validation_alias=AliasChoices("dailyPlan", "daily_plan", "days")
    )


_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def parse_day_plans(content: str, request: TripRequest, currency: str = "EUR") -> list[DayPlan]:
    """Decode generated JSON into normalized day plans.

    The whole array is validated at once. Days beyond the trip length are
    dropped; kept days are re-stamped positionally with number and date.
    Prices are clamped to >= 0 and stamped with the trip currency.

    Raises:
        ValueError: Content is not JSON (json.JSONDecodeError)
        pydantic.ValidationError: Content does not hold a day array
    """
    data = json.loads(_FENCE.sub("", content.strip()))
    if isinstance(data, list):
        data = {"dailyPlan": data}
    plan = GeneratedPlan.model_validate(data)

    days = []
    for index, generated in enumerate(plan.daily_plan[: request.trip_days]):
        day_number = index + 1
        items = [
            ActivityItem(
                time=a.time,
                title=a.title,
                description=a.description,
                category=a.category or "attraction",
                price=max(0.0, a.price),
                currency=currency,
                skip_the_line=a.skip_the_line,
                skip_the_line_price=(
                    max(0.0, a.skip_the_line_price) if a.skip_the_line_price is not None else None
                ),
                duration=a.duration,
                tips=a.tips,
                is_local_experience=a.is_local_experience,
            )
            for a in generated.activities
        ]
        days.append(
            DayPlan(
                day=day_number,
                date=request.day_date(day_number),
                title=generated.title or f"Day {day_number} in {request.destination}",
                activities=items,
            )
        )
    return days


_TIME_LABEL = re.compile(r"^\s*(\d{1,2})(?::(\d{2}))?\s*([AaPp]\.?[Mm]\.?)?")


def parse_time_label(label: str) -> int | None:
    """Minutes after midnight for labels like '9:00 AM' or '14:30'; None if unparsable."""
    match = _TIME_LABEL.match(label or "")
    if not match:
        return None
    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    meridiem = (match.group(3) or "").lower().replace(".", "")
    if meridiem == "pm" and hour < 12:
        hour += 12
    elif meridiem == "am" and hour == 12:
        hour = 0
    if hour > 23 or minute > 59:
        return None
    return hour * 60 + minute


def apply_arrival_buffer(days: list[DayPlan], arrival: time | None, buffer_hours: int) -> list[DayPlan]:
    """Drop day-one items that start before the traveler can get there.

    Items with unparsable time labels are kept.
    """
    if arrival is None or not days or days[0].day != 1:
        return days

    cutoff = first_day_start_minutes(arrival, buffer_hours)
    first = days[0]
    kept = [
        item
        for item in first.activities
        if (start := parse_time_label(item.time)) is None or start >= cutoff
    ]
    return [first.model_copy(update={"activities": kept})] + days[1:]


def repair_day_count(
    days: list[DayPlan],
    request: TripRequest,
    activities: list[ActivityEntry],
    restaurants: list[RestaurantEntry],
    currency: str = "EUR",
) -> list[DayPlan]:
    """Append template days for the missing tail so exactly N days remain."""
    if len(days) >= request.trip_days:
        return days[: request.trip_days]
    return days + build_template_itinerary(
        request, activities, restaurants, currency, first_day=len(days) + 1
    )


async def generate_narrative(
    state: GenerationState,
    config: ProviderConfig,
    client: NarrativeClient,
    runner: ProviderRunner,
    template_activities: list[ActivityEntry],
    template_restaurants: list[RestaurantEntry],
) -> list[DayPlan]:
    """Narrative stage.

    Args:
        state: Generation state (request, acquired activities/restaurants)
        config: Provider config (token budget, timeouts, currency)
        client: Generative narrative client
        runner: Provider runner
        template_activities: Activity source for template days
        template_restaurants: Restaurant source for template days

    Returns:
        Exactly request.trip_days contiguous DayPlan objects
    """
    request = state.request
    currency = config.currency

    def full_template(reason: str) -> list[DayPlan]:
        logger.info(f"Narrative using template itinerary ({reason})")
        runner.metrics.inc_fallback("narrative")
        state.sources["narrative"] = "fallback"
        return build_template_itinerary(
            request, template_activities, template_restaurants, currency
        )

    if not client.available:
        return full_template("unavailable")

    ctx = StageContext(str(state.trip_id), state.generation, "narrative")
    result = await runner.run(
        ctx,
        "openai",
        lambda: client.generate_day_plans(
            system_prompt=SYSTEM_PROMPT.format(days=request.trip_days),
            user_prompt=build_prompt(
                request, state.activities, state.restaurants, config.arrival_buffer_hours
            ),
            max_tokens=token_budget(request.trip_days, config),
        ),
        timeout_ms=config.narrative_timeout_ms,
    )
    if not isinstance(result, ProviderOk):
        return full_template(result.reason)

    try:
        days = parse_day_plans(result.value, request, currency)
    except (ValueError, ValidationError) as e:
        logger.warning(f"Generated itinerary could not be parsed: {type(e).__name__}")
        return full_template("schema")

    if not days:
        return full_template("empty")

    days = apply_arrival_buffer(days, request.arrival_time, config.arrival_buffer_hours)

    if len(days) < request.trip_days:
        logger.info(
            f"Generated {len(days)} of {request.trip_days} days, supplementing from template"
        )
        runner.metrics.inc_fallback("narrative_supplement")
        state.sources["narrative"] = "supplemented"
    else:
        state.sources["narrative"] = "live"

    return repair_day_count(days, request, template_activities, template_restaurants, currency)
