"""Tests for configuration loading and validation."""

import pytest

from lensbook.config import (
    AppConfig,
    PricingConfig,
    RetryConfig,
    ScheduleConfig,
    TravelConfig,
    _validate_config,
)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_defaults(self):
        config = AppConfig()
        assert config.travel.travel_speed_kmh > 0
        assert config.schedule.cleanup_cooldown_seconds >= 0

    def test_zero_travel_speed(self):
        config = AppConfig(travel=TravelConfig(travel_speed_kmh=0))
        with pytest.raises(ValueError, match="TRAVEL_SPEED_KMH"):
            _validate_config(config)

    def test_suggestion_granularity_out_of_range(self):
        config = AppConfig(travel=TravelConfig(suggestion_granularity_minutes=90))
        with pytest.raises(ValueError, match="SUGGESTION_GRANULARITY_MINUTES"):
            _validate_config(config)

    def test_slot_granularity_must_divide_day(self):
        config = AppConfig(schedule=ScheduleConfig(slot_granularity_minutes=7))
        with pytest.raises(ValueError, match="SLOT_GRANULARITY_MINUTES"):
            _validate_config(config)

    def test_slot_granularity_half_hour_ok(self):
        _validate_config(AppConfig(schedule=ScheduleConfig(slot_granularity_minutes=30)))

    def test_negative_cooldown(self):
        config = AppConfig(schedule=ScheduleConfig(cleanup_cooldown_seconds=-1))
        with pytest.raises(ValueError, match="CLEANUP_COOLDOWN_SECONDS"):
            _validate_config(config)

    def test_service_fee_above_one(self):
        config = AppConfig(pricing=PricingConfig(service_fee_rate=1.5))
        with pytest.raises(ValueError, match="SERVICE_FEE_RATE"):
            _validate_config(config)

    def test_retry_attempts(self):
        config = AppConfig(retry=RetryConfig(max_attempts=0))
        with pytest.raises(ValueError, match="RETRY_MAX_ATTEMPTS"):
            _validate_config(config)

    def test_retry_max_below_base(self):
        config = AppConfig(retry=RetryConfig(base_delay_seconds=10.0, max_delay_seconds=1.0))
        with pytest.raises(ValueError, match="RETRY_MAX_DELAY"):
            _validate_config(config)

    def test_env_number_defaults(self):
        from lensbook.config import _env_number

        assert _env_number("NONEXISTENT_VAR_12345", "42", int) == 42
        assert _env_number("NONEXISTENT_VAR_12345", "3.14", float) == pytest.approx(3.14)

    def test_env_number_rejects_garbage(self, monkeypatch):
        from lensbook.config import _env_number

        monkeypatch.setenv("LENSBOOK_TEST_INT", "abc")
        with pytest.raises(ValueError, match="LENSBOOK_TEST_INT must be a int"):
            _env_number("LENSBOOK_TEST_INT", "1", int)
