"""12-factor configuration adapter using environment variables and TOML config."""

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Fields the [routing] section of the TOML file may set
_ROUTING_FIELDS = (
    "osrm_base_url",
    "osrm_profile",
    "osrm_timeout_seconds",
    "osrm_min_delay_seconds",
    "routing_debounce_ms",
    "segmented_routing",
)


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Routing engine configuration
    osrm_base_url: str = Field(
        default="https://router.project-osrm.org",
        description="Base URL of the OSRM routing engine",
    )
    osrm_profile: str = Field(default="driving", description="OSRM routing profile")
    osrm_timeout_seconds: float = Field(
        default=10.0, description="Timeout for OSRM requests in seconds"
    )
    osrm_min_delay_seconds: float = Field(
        default=1.0,
        description="Minimum delay between OSRM requests (the public demo server allows ~1 req/s)",
    )
    segmented_routing: bool = Field(
        default=True,
        description="Resolve multi-stop routes leg by leg and stitch the legs together",
    )
    routing_debounce_ms: int = Field(
        default=300,
        description="Quiet period after the last edit before a road route is requested",
    )

    # Fare configuration
    default_fare_per_km: float = Field(
        default=10.0, description="Fare per kilometer used when a route does not set one"
    )

    # School location (both or neither)
    school_latitude: float | None = Field(default=None, description="School latitude")
    school_longitude: float | None = Field(default=None, description="School longitude")

    # Placeholder position for persisted stops that cannot be decoded
    fallback_stop_latitude: float = Field(default=28.6139)
    fallback_stop_longitude: float = Field(default=77.2090)

    log_level: str = Field(default="INFO", description="Logging level name")

    # Optional TOML file overriding the sections above
    config_file: str | None = Field(
        default=None,
        description="Path to TOML configuration file with [school], [routing] and [fare] sections",
    )

    @classmethod
    def for_testing(cls, **overrides: Any) -> "AppConfig":
        """Build a config that ignores any .env file in the working directory."""
        return cls(_env_file=None, **overrides)  # type: ignore[call-arg]

    @field_validator("osrm_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop the trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("osrm_base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("osrm_timeout_seconds", "default_fare_per_km")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Validate that timeouts and fares are positive."""
        if v <= 0:
            raise ValueError("value must be greater than 0")
        return v

    @field_validator("osrm_min_delay_seconds", "routing_debounce_ms")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("value must not be negative")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard logging level name."""
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"log_level must be a logging level name, got '{v}'")
        return level

    @model_validator(mode="after")
    def validate_school_location(self) -> "AppConfig":
        """School latitude and longitude must be given together."""
        if (self.school_latitude is None) != (self.school_longitude is None):
            raise ValueError("school_latitude and school_longitude must be set together")
        return self

    @property
    def routing_debounce_seconds(self) -> float:
        return self.routing_debounce_ms / 1000

    @classmethod
    def load(cls, **overrides: Any) -> "AppConfig":
        """Load configuration from the environment, then overlay the TOML file if one is set.

        Precedence: explicit overrides, TOML file, environment, defaults.

        Raises:
            FileNotFoundError: If config_file is set but does not exist.
        """
        config = cls(**overrides)
        if not config.config_file:
            return config
        toml_values = _read_toml_values(config.config_file)
        return cls(**{**toml_values, **overrides})


def _read_toml_values(config_file: str) -> dict[str, Any]:
    """Flatten the [school], [routing] and [fare] sections of a TOML file into field values."""
    config_path = Path(config_file)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "rb") as f:
        toml_data = tomllib.load(f)

    values: dict[str, Any] = {}

    school = toml_data.get("school", {})
    if "latitude" in school:
        values["school_latitude"] = school["latitude"]
    if "longitude" in school:
        values["school_longitude"] = school["longitude"]

    routing = toml_data.get("routing", {})
    for field_name in _ROUTING_FIELDS:
        if field_name in routing:
            values[field_name] = routing[field_name]

    fare = toml_data.get("fare", {})
    if "fare_per_km" in fare:
        values["default_fare_per_km"] = fare["fare_per_km"]

    if "log_level" in toml_data:
        values["log_level"] = toml_data["log_level"]

    return values
