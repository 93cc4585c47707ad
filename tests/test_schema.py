"""
Tests for structural (de)serialization.
"""

from datetime import date

import pytest

from bookingengine.adapters.schema import (
    dump_booking_document,
    load_booking_document,
    load_booking_yaml,
    save_booking_yaml,
)
from bookingengine.domain.exceptions import ConfigurationError
from bookingengine.domain.models import (
    BookingKind,
    BookingMode,
    BufferUnit,
    CountMode,
    TimeInterval,
    Weekday,
)


class TestLoadDocument:
    """Tests for loading plain mappings."""

    def test_empty_document_gives_defaults(self):
        """Test a missing document yields the default configuration."""
        config = load_booking_document(None)

        assert config.kind == BookingKind.TIMESLOTS
        assert config.availability.max_days_ahead == 365
        assert config.groups == ()

    def test_full_document(self):
        """Test every section is mapped onto the aggregate."""
        config = load_booking_document({
            "kind": "days",
            "mode": "date_range",
            "count_mode": "days",
            "availability": {"max_days": 90, "buffer": {"amount": 6, "unit": "hours"}},
            "quantity": {"enabled": True, "per_unit": 4},
            "date_range": {"has_custom_limits": True, "min_length": 2, "max_length": 14},
            "excluded_days_enabled": True,
            "excluded_days": ["2025-12-26", "2025-12-25"],
            "excluded_weekdays": ["sun", "sat"],
        })

        assert config.kind == BookingKind.DAYS
        assert config.booking_mode == BookingMode.DATE_RANGE
        assert config.count_mode == CountMode.DAYS
        assert config.availability.max_days_ahead == 90
        assert config.availability.buffer.amount == 6
        assert config.availability.buffer.unit == BufferUnit.HOURS
        assert config.quantity.per_unit == 4
        assert config.date_range.effective_limits() == (2, 14)
        assert config.excluded_dates == {date(2025, 12, 25), date(2025, 12, 26)}
        assert config.excluded_weekdays == {Weekday.SATURDAY, Weekday.SUNDAY}

    def test_legacy_timeslots_props(self):
        """Test the single-mode field layout is understood."""
        config = load_booking_document({
            "mode": "timeslots",
            "availability": {"max_days": 365, "buffer": {"amount": 2, "unit": "days"}},
            "excluded_days": ["2025-12-25"],
            "timeslots": {
                "groups": [
                    {
                        "days": ["mon", "tue", "wed"],
                        "slots": [{"from": "09:00", "to": "10:00"}, {"from": "10:00", "to": "11:00"}],
                    }
                ]
            },
            "quantity_per_slot": 5,
        })

        assert config.kind == BookingKind.TIMESLOTS
        assert config.excluded_dates_enabled
        assert config.excluded_dates == {date(2025, 12, 25)}
        assert config.quantity.enabled
        assert config.quantity.per_unit == 5
        assert config.groups[0].days == {Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY}
        assert len(config.groups[0].slots) == 2

    def test_legacy_date_range_mode(self):
        """Test a whole-day mode implies the days kind."""
        config = load_booking_document({"mode": "date_range"})

        assert config.kind == BookingKind.DAYS
        assert config.is_date_range

    def test_lenient_values(self):
        """Test malformed values are clamped or dropped instead of raising."""
        config = load_booking_document({
            "kind": "weekly",
            "availability": {"max_days": -3, "buffer": {"amount": "lots", "unit": "weeks"}},
            "quantity": {"enabled": True, "per_unit": 0},
            "date_range": {"min_length": -2, "max_length": None},
            "excluded_days_enabled": True,
            "excluded_days": ["2025-12-25", "not-a-date", 17],
            "excluded_weekdays": ["mon", "funday", "Monday", "SUNDAY"],
        })

        assert config.kind == BookingKind.TIMESLOTS
        assert config.availability.max_days_ahead == 0
        assert config.availability.buffer.amount == 0
        assert config.availability.buffer.unit == BufferUnit.DAYS
        assert config.quantity.per_unit == 1
        assert config.date_range.min_length_days == 0
        assert config.date_range.max_length_days == 30
        assert config.excluded_dates == {date(2025, 12, 25)}
        assert config.excluded_weekdays == {Weekday.MONDAY, Weekday.SUNDAY}

    def test_disabled_exclusion_drops_dates(self):
        """Test dates listed while exclusion is off are not loaded."""
        config = load_booking_document({"excluded_days_enabled": False, "excluded_days": ["2025-12-25"]})

        assert config.excluded_dates == frozenset()

    def test_invalid_slots_dropped_and_sorted(self):
        """Test slots are normalized on load."""
        config = load_booking_document({
            "timeslots": {"groups": [{
                "days": ["fri"],
                "slots": [
                    {"from": "14:00", "to": "15:00"},
                    {"from": "10:00", "to": "09:00"},
                    {"from": "9:00", "to": "10:00"},
                    {"from": "09:00", "to": "10:00"},
                    {"to": "11:00"},
                ],
            }]}
        })

        assert config.groups[0].slots == (TimeInterval("09:00", "10:00"), TimeInterval("14:00", "15:00"))

    def test_overlapping_groups_repaired(self):
        """Test a day claimed twice stays with the first group."""
        config = load_booking_document({
            "timeslots": {"groups": [{"days": ["mon", "tue"]}, {"days": ["tue", "wed"]}]}
        })

        assert config.groups[0].days == {Weekday.MONDAY, Weekday.TUESDAY}
        assert config.groups[1].days == {Weekday.WEDNESDAY}


class TestDumpDocument:
    """Tests for dumping configurations."""

    def test_dump_shape(self):
        """Test slots use from/to keys and dates are ISO strings in order."""
        config = load_booking_document({
            "excluded_days_enabled": True,
            "excluded_days": ["2026-01-01", "2025-12-25"],
            "timeslots": {"groups": [{"days": ["wed", "mon"], "slots": [{"from": "9:00", "to": "10:00"}]}]},
        })

        document = dump_booking_document(config)

        assert document["kind"] == "timeslots"
        assert document["excluded_days"] == ["2025-12-25", "2026-01-01"]
        assert document["timeslots"]["groups"][0] == {
            "days": ["mon", "wed"],
            "slots": [{"from": "09:00", "to": "10:00"}],
        }

    def test_dump_then_load_preserves_configuration(self):
        """Test a dumped document loads back to the same aggregate."""
        config = load_booking_document({
            "kind": "days",
            "mode": "single_day",
            "date_range": {"has_custom_limits": False, "min_length": 3, "max_length": 9},
            "excluded_weekdays": ["sun"],
        })

        assert load_booking_document(dump_booking_document(config)) == config


class TestYaml:
    """Tests for YAML files."""

    def test_unquoted_times(self, tmp_path):
        """Test YAML base-60 integers are read back as times."""
        path = tmp_path / "booking.yaml"
        path.write_text(
            "timeslots:\n"
            "  groups:\n"
            "    - days: [mon]\n"
            "      slots:\n"
            "        - {from: 09:00, to: 10:30}\n"
            "        - {from: 10:30, to: 12:00}\n",
            encoding="utf-8",
        )

        config = load_booking_yaml(path)

        assert [s.key() for s in config.groups[0].slots] == ["09:00-10:30", "10:30-12:00"]

    def test_integer_times_outside_a_day_dropped(self, tmp_path):
        """Test minute counts past midnight or below zero drop the slot."""
        path = tmp_path / "booking.yaml"
        path.write_text(
            "timeslots:\n"
            "  groups:\n"
            "    - days: [mon]\n"
            "      slots:\n"
            "        - {from: 1500, to: 1560}\n"
            "        - {from: -1, to: 60}\n"
            "        - {from: 600, to: 660}\n",
            encoding="utf-8",
        )

        config = load_booking_yaml(path)

        assert [s.key() for s in config.groups[0].slots] == ["10:00-11:00"]

    def test_save_and_load(self, tmp_path):
        """Test a saved file loads back unchanged."""
        config = load_booking_document({
            "timeslots": {"groups": [{"days": ["tue"], "slots": [{"from": "10:00", "to": "11:00"}]}]},
            "excluded_days_enabled": True,
            "excluded_days": ["2025-12-25"],
        })
        path = tmp_path / "booking.yaml"

        save_booking_yaml(path, config)

        assert load_booking_yaml(path) == config

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_booking_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Test broken YAML raises ConfigurationError."""
        path = tmp_path / "booking.yaml"
        path.write_text("timeslots: [\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_booking_yaml(path)

    def test_non_mapping_root(self, tmp_path):
        """Test a list at the root raises ConfigurationError."""
        path = tmp_path / "booking.yaml"
        path.write_text("- kind: days\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_booking_yaml(path)
