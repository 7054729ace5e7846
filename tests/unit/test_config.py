"""Unit tests for settings and provider wiring."""

from pydantic import SecretStr

from tripgen.config import ProviderConfig, Settings


class TestProviderConfig:
    """Test live/fallback routing flags."""

    def test_no_credentials_means_no_live_providers(self) -> None:
        config = ProviderConfig()

        assert not config.live_flights
        assert not config.live_activities
        assert not config.live_restaurants
        assert not config.live_narrative

    def test_flag_off_disables_provider(self) -> None:
        config = ProviderConfig(viator_api_key="key", activities_enabled=False)
        assert not config.live_activities

    def test_from_settings(self) -> None:
        settings = Settings(
            duffel_access_token=SecretStr("duffel"),
            tripadvisor_api_key=SecretStr("   "),
            flight_test_carrier_filter=[],
            currency="USD",
        )

        config = ProviderConfig.from_settings(settings)

        assert config.live_flights
        assert config.duffel_access_token == "duffel"
        # Blank credentials count as missing
        assert config.tripadvisor_api_key is None
        assert not config.live_restaurants
        assert config.flight_test_carrier_filter == ()
        assert config.currency == "USD"
