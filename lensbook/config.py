"""
Centralized configuration with environment variable overrides.

Travel heuristics, rounding granularities, cooldowns and retry settings
used by the scheduling engine live here. Nothing is hardcoded in the
scheduling or service modules.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_N = TypeVar("_N", int, float)


def _env_number(env_var: str, default: str, cast: Callable[[str], _N]) -> _N:
    """Read a numeric env var, naming the variable when its value is malformed."""
    raw = os.getenv(env_var, default)
    try:
        return cast(raw)
    except (ValueError, TypeError):
        raise ValueError(f"{env_var} must be a {cast.__name__}, got {raw!r}") from None


@dataclass(frozen=True)
class TravelConfig:
    """Inputs to the distance conflict heuristic."""

    travel_speed_kmh: float = _env_number("TRAVEL_SPEED_KMH", "30.0", float)
    suggestion_granularity_minutes: int = _env_number("SUGGESTION_GRANULARITY_MINUTES", "5", int)


@dataclass(frozen=True)
class ScheduleConfig:
    """Weekly schedule and booking housekeeping settings."""

    slot_granularity_minutes: int = _env_number("SLOT_GRANULARITY_MINUTES", "60", int)
    cleanup_cooldown_seconds: int = _env_number("CLEANUP_COOLDOWN_SECONDS", "300", int)
    pending_booking_ttl_minutes: int = _env_number("PENDING_BOOKING_TTL_MINUTES", "15", int)


@dataclass(frozen=True)
class PricingConfig:
    """Caller-side pricing surcharges."""

    service_fee_rate: float = _env_number("SERVICE_FEE_RATE", "0.0", float)


@dataclass(frozen=True)
class RetryConfig:
    """Backoff settings for callers retrying store conflicts."""

    max_attempts: int = _env_number("RETRY_MAX_ATTEMPTS", "3", int)
    base_delay_seconds: float = _env_number("RETRY_BASE_DELAY", "1.5", float)
    max_delay_seconds: float = _env_number("RETRY_MAX_DELAY", "30.0", float)


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    travel: TravelConfig = field(default_factory=TravelConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    pricing: PricingConfig = field(default_factory=PricingConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "lensbook-scheduling")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.travel.travel_speed_kmh <= 0:
        raise ValueError(
            f"TRAVEL_SPEED_KMH must be > 0, got {config.travel.travel_speed_kmh}"
        )
    if not 1 <= config.travel.suggestion_granularity_minutes <= 60:
        raise ValueError(
            "SUGGESTION_GRANULARITY_MINUTES must be between 1 and 60, "
            f"got {config.travel.suggestion_granularity_minutes}"
        )
    if config.schedule.slot_granularity_minutes < 1 or (
        (24 * 60) % config.schedule.slot_granularity_minutes
    ):
        raise ValueError(
            "SLOT_GRANULARITY_MINUTES must divide a day evenly, "
            f"got {config.schedule.slot_granularity_minutes}"
        )
    if config.schedule.cleanup_cooldown_seconds < 0:
        raise ValueError(
            "CLEANUP_COOLDOWN_SECONDS must be >= 0, "
            f"got {config.schedule.cleanup_cooldown_seconds}"
        )
    if config.schedule.pending_booking_ttl_minutes < 1:
        raise ValueError(
            "PENDING_BOOKING_TTL_MINUTES must be >= 1, "
            f"got {config.schedule.pending_booking_ttl_minutes}"
        )
    if not 0.0 <= config.pricing.service_fee_rate <= 1.0:
        raise ValueError(
            f"SERVICE_FEE_RATE must be between 0.0 and 1.0, got {config.pricing.service_fee_rate}"
        )
    if config.retry.max_attempts < 1:
        raise ValueError(
            f"RETRY_MAX_ATTEMPTS must be >= 1, got {config.retry.max_attempts}"
        )
    if config.retry.base_delay_seconds < 0:
        raise ValueError(
            f"RETRY_BASE_DELAY must be >= 0, got {config.retry.base_delay_seconds}"
        )
    if config.retry.max_delay_seconds < config.retry.base_delay_seconds:
        raise ValueError(
            "RETRY_MAX_DELAY must be >= RETRY_BASE_DELAY, "
            f"got {config.retry.max_delay_seconds}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("%s configuration loaded (log level %s)", config.app_name, config.log_level)
    return config


# Shared instance read by the scheduling and service modules
settings = load_config()
