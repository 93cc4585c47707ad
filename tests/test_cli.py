"""
Tests for the command line interface.
"""

import pytest
from typer.testing import CliRunner

from bookingengine import __version__
from bookingengine.cli.app import app
from bookingengine.config import AppConfig

runner = CliRunner()

NOW = "2024-11-25T08:00:00"

CONFIG = """\
timezone: Europe/Berlin
booking:
  kind: timeslots
  availability:
    max_days: 30
    buffer: {amount: 1, unit: days}
  timeslots:
    groups:
      - days: [mon, wed]
        slots:
          - {from: "09:00", to: "10:30"}
"""


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG, encoding="utf-8")
    return path


class TestCli:
    """Tests for the Typer commands."""

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_config(self, tmp_path):
        """Test a missing config file exits with an error."""
        result = runner.invoke(app, ["show", "-c", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_show(self, config_path):
        result = runner.invoke(app, ["show", "-c", str(config_path)])

        assert result.exit_code == 0
        assert "Booking configuration" in result.output
        assert "09:00-10:30" in result.output

    def test_generate(self, config_path):
        """Test generated slots are listed."""
        result = runner.invoke(app, ["generate", "09:00", "17:00", "--length", "60", "-c", str(config_path)])

        assert result.exit_code == 0
        assert "8 slot(s)" in result.output

    def test_generate_nothing_fits(self, config_path):
        result = runner.invoke(app, ["generate", "09:00", "09:30", "-l", "60", "-c", str(config_path)])

        assert result.exit_code == 0
        assert "No slots fit" in result.output

    def test_window(self, config_path):
        result = runner.invoke(app, ["window", "--now", NOW, "-c", str(config_path)])

        assert result.exit_code == 0
        assert "2024-11-26 08:00" in result.output
        assert "2024-12-25 08:00" in result.output

    def test_dates(self, config_path):
        """Test only Wednesday is bookable in the next three days."""
        result = runner.invoke(app, ["dates", "--days", "3", "--now", NOW, "-c", str(config_path)])

        assert result.exit_code == 0
        assert "1 bookable date(s)" in result.output
        assert "2024-11-27" in result.output

    def test_check_accepted(self, config_path):
        result = runner.invoke(
            app, ["check", "2024-11-27", "--slot", "09:00-10:30", "--now", NOW, "-c", str(config_path)]
        )

        assert result.exit_code == 0
        assert "Accepted" in result.output

    def test_check_rejected(self, config_path):
        """Test a rejection exits with code 2 and names the reason."""
        result = runner.invoke(
            app, ["check", "2024-11-26", "--slot", "09:00-10:30", "--now", NOW, "-c", str(config_path)]
        )

        assert result.exit_code == 2
        assert "no_schedule" in result.output

    def test_check_requires_slot(self, config_path):
        result = runner.invoke(app, ["check", "2024-11-27", "--now", NOW, "-c", str(config_path)])

        assert result.exit_code == 1

    def test_exclude_toggles_and_saves(self, config_path):
        """Test exclude writes the date to the file and a second call removes it."""
        result = runner.invoke(app, ["exclude", "2024-12-04", "-c", str(config_path)])

        assert result.exit_code == 0
        assert "excluded" in result.output
        booking = AppConfig.load_from_yaml(config_path).booking_configuration()
        assert booking.excluded_dates_enabled
        assert [d.isoformat() for d in booking.excluded_dates] == ["2024-12-04"]

        result = runner.invoke(app, ["exclude", "2024-12-04", "-c", str(config_path)])

        assert "available again" in result.output
        booking = AppConfig.load_from_yaml(config_path).booking_configuration()
        assert booking.excluded_dates == frozenset()
