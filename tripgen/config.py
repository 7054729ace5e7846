"""Typed settings configuration - single source of truth."""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str | None = None

    # Provider credentials (absence routes the stage to its fallback)
    openai_api_key: SecretStr | None = None
    duffel_access_token: SecretStr | None = None
    viator_api_key: SecretStr | None = None
    tripadvisor_api_key: SecretStr | None = None

    # Provider endpoints
    duffel_base_url: str = "https://api.duffel.com"
    viator_base_url: str = "https://api.viator.com/partner"
    tripadvisor_base_url: str = "https://api.content.tripadvisor.com/api/v1"

    # Provider feature flags
    flights_provider_enabled: bool = True
    activities_provider_enabled: bool = True
    restaurants_provider_enabled: bool = True

    # Narrative generation
    openai_model: str = "gpt-4o-mini"
    narrative_max_tokens_per_day: int = 1500
    narrative_min_tokens: int = 6000
    narrative_max_tokens: int = 16000

    # Timeouts (milliseconds)
    provider_timeout_ms: int = 8000
    narrative_timeout_ms: int = 60000

    # Flight offer polling
    flight_poll_attempts: int = 15
    flight_poll_delay_ms: int = 2000
    flight_max_results: int = 5
    # Sandbox carrier codes; empty disables the filter
    flight_test_carrier_filter: list[str] = ["ZZ"]

    # Trip defaults
    default_passenger_age: int = 30
    currency: str = "EUR"
    arrival_buffer_hours: int = 3

    # Jitter reproducibility (None = system randomness)
    rng_seed: int | None = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def _secret(value: SecretStr | None) -> str | None:
    if value is None:
        return None
    raw = value.get_secret_value().strip()
    return raw or None


@dataclass(frozen=True)
class ProviderConfig:
    """Explicit provider wiring for one pipeline instance.

    A provider is live only when its flag is on and a credential is present.
    Anything else routes that stage to its static fallback.
    """

    duffel_access_token: str | None = None
    viator_api_key: str | None = None
    tripadvisor_api_key: str | None = None
    openai_api_key: str | None = None
    flights_enabled: bool = True
    activities_enabled: bool = True
    restaurants_enabled: bool = True
    duffel_base_url: str = "https://api.duffel.com"
    viator_base_url: str = "https://api.viator.com/partner"
    tripadvisor_base_url: str = "https://api.content.tripadvisor.com/api/v1"
    openai_model: str = "gpt-4o-mini"
    provider_timeout_ms: int = 8000
    narrative_timeout_ms: int = 60000
    flight_poll_attempts: int = 15
    flight_poll_delay_ms: int = 2000
    flight_max_results: int = 5
    flight_test_carrier_filter: tuple[str, ...] = ("ZZ",)
    default_passenger_age: int = 30
    currency: str = "EUR"
    arrival_buffer_hours: int = 3
    narrative_max_tokens_per_day: int = 1500
    narrative_min_tokens: int = 6000
    narrative_max_tokens: int = 16000

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderConfig":
        """Build provider config from application settings."""
        return cls(
            duffel_access_token=_secret(settings.duffel_access_token),
            viator_api_key=_secret(settings.viator_api_key),
            tripadvisor_api_key=_secret(settings.tripadvisor_api_key),
            openai_api_key=_secret(settings.openai_api_key),
            flights_enabled=settings.flights_provider_enabled,
            activities_enabled=settings.activities_provider_enabled,
            restaurants_enabled=settings.restaurants_provider_enabled,
            duffel_base_url=settings.duffel_base_url,
            viator_base_url=settings.viator_base_url,
            tripadvisor_base_url=settings.tripadvisor_base_url,
            openai_model=settings.openai_model,
            provider_timeout_ms=settings.provider_timeout_ms,
            narrative_timeout_ms=settings.narrative_timeout_ms,
            flight_poll_attempts=settings.flight_poll_attempts,
            flight_poll_delay_ms=settings.flight_poll_delay_ms,
            flight_max_results=settings.flight_max_results,
            flight_test_carrier_filter=tuple(settings.flight_test_carrier_filter),
            default_passenger_age=settings.default_passenger_age,
            currency=settings.currency,
            arrival_buffer_hours=settings.arrival_buffer_hours,
            narrative_max_tokens_per_day=settings.narrative_max_tokens_per_day,
            narrative_min_tokens=settings.narrative_min_tokens,
            narrative_max_tokens=settings.narrative_max_tokens,
        )

    @property
    def live_flights(self) -> bool:
        return self.flights_enabled and self.duffel_access_token is not None

    @property
    def live_activities(self) -> bool:
        return self.activities_enabled and self.viator_api_key is not None

    @property
    def live_restaurants(self) -> bool:
        return self.restaurants_enabled and self.tripadvisor_api_key is not None

    @property
    def live_narrative(self) -> bool:
        return self.openai_api_key is not None
