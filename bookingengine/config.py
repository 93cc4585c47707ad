"""
Configuration management using Pydantic.
"""

import logging
from pathlib import Path

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator
from rich.logging import RichHandler

from .adapters.schema import BookingConfigSchema
from .domain.exceptions import ConfigurationError
from .domain.models import BookingConfiguration

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class GeneratorDefaults(BaseModel):
    """Default settings for slot generation."""
    slot_length_minutes: int = 60
    gap_minutes: int = 0
    max_slots: int = 50

    @field_validator("slot_length_minutes", "max_slots")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure length and slot cap are positive."""
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @field_validator("gap_minutes")
    @classmethod
    def validate_gap(cls, value: int) -> int:
        """Gaps may be zero but never negative."""
        if value < 0:
            raise ValueError("gap_minutes must not be negative")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Berlin"
    log_level: str = "WARNING"
    generator: GeneratorDefaults = Field(default_factory=GeneratorDefaults)
    booking: BookingConfigSchema = Field(default_factory=BookingConfigSchema)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA identifier."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value}")
        return level

    def booking_configuration(self) -> BookingConfiguration:
        """The embedded booking document as a domain aggregate."""
        return self.booking.to_domain()

    def with_booking(self, config: BookingConfiguration) -> "AppConfig":
        """Copy of this config carrying a new booking configuration."""
        return self.model_copy(update={"booking": BookingConfigSchema.from_domain(config)})

    def apply_logging(self) -> None:
        """Configure the root logger from ``log_level``."""
        logging.basicConfig(
            level=getattr(logging, self.log_level),
            format="%(message)s",
            handlers=[RichHandler(show_path=False)],
        )

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If the file is not valid YAML or not a mapping
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigurationError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def save_to_yaml(self, config_path: Path) -> None:
        """Write the configuration back, booking slots normalized."""
        normalized = self.with_booking(self.booking_configuration())
        data = normalized.model_dump(mode="json", by_alias=True)
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
