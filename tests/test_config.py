"""
Tests for application configuration.
"""

from dataclasses import replace
from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

from bookingengine.config import AppConfig, GeneratorDefaults
from bookingengine.domain.exceptions import ConfigurationError
from bookingengine.domain.models import BookingKind, TimeInterval, Weekday

EXAMPLE_CONFIG = Path(__file__).parent.parent / "config.example.yaml"


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self):
        """Test an empty config uses defaults."""
        config = AppConfig()

        assert config.timezone == "Europe/Berlin"
        assert config.log_level == "WARNING"
        assert config.generator.slot_length_minutes == 60
        assert config.booking_configuration().kind == BookingKind.TIMESLOTS

    def test_load_example(self):
        """Test the shipped example file loads."""
        config = AppConfig.load_from_yaml(EXAMPLE_CONFIG)
        booking = config.booking_configuration()

        assert booking.availability.max_days_ahead == 30
        assert booking.quantity.per_unit == 3
        assert date(2026, 12, 25) in booking.excluded_dates
        assert booking.groups[0].days == {Weekday.MONDAY, Weekday.WEDNESDAY}
        assert booking.groups[1].slots == (TimeInterval("14:00", "15:00"), TimeInterval("15:00", "16:00"))

    def test_log_level_uppercased(self):
        """Test log levels are case-insensitive."""
        assert AppConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        """Test an unknown log level is rejected."""
        with pytest.raises(ValidationError):
            AppConfig(log_level="chatty")

    def test_invalid_timezone(self):
        """Test an unknown timezone is rejected."""
        with pytest.raises(ValidationError):
            AppConfig(timezone="Mars/Olympus_Mons")

    def test_generator_validation(self):
        """Test generator defaults reject non-positive values."""
        with pytest.raises(ValidationError):
            GeneratorDefaults(slot_length_minutes=0)
        with pytest.raises(ValidationError):
            GeneratorDefaults(gap_minutes=-5)

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "config.yaml")

    def test_non_mapping_file(self, tmp_path):
        """Test a scalar document raises ConfigurationError."""
        path = tmp_path / "config.yaml"
        path.write_text("just a string\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            AppConfig.load_from_yaml(path)

    def test_with_booking_and_save(self, tmp_path):
        """Test a changed booking is written back and reloaded."""
        config = AppConfig.load_from_yaml(EXAMPLE_CONFIG)
        booking = config.booking_configuration()
        changed = config.with_booking(
            replace(booking, excluded_dates=frozenset({date(2026, 1, 1)}))
        )
        path = tmp_path / "config.yaml"

        changed.save_to_yaml(path)
        reloaded = AppConfig.load_from_yaml(path)

        assert reloaded.booking_configuration().excluded_dates == {date(2026, 1, 1)}
        assert reloaded.booking_configuration().groups == booking.groups
        assert config.booking_configuration().excluded_dates != {date(2026, 1, 1)}
