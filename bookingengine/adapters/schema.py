"""
Structural (de)serialization of booking configurations using Pydantic.

Loading is lenient: numbers are clamped, unknown weekdays and unparsable
dates are dropped, unknown enum values fall back to their defaults. What
comes out of ``to_domain`` is always internally consistent.
"""

import logging
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List

import pendulum
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..domain.allocator import repair_exclusivity
from ..domain.editor import normalize_configuration
from ..domain.exceptions import ConfigurationError
from ..domain.exclusions import sorted_excluded_dates
from ..domain.models import (
    AvailabilityWindow,
    BookingConfiguration,
    BookingKind,
    BookingMode,
    BufferPeriod,
    BufferUnit,
    CountMode,
    DateRangePolicy,
    QuantityPolicy,
    TimeInterval,
    Weekday,
    WeekdayGroup,
    sort_weekdays,
)
from ..domain.time_of_day import MINUTES_PER_DAY, from_minutes, parse_time_of_day

logger = logging.getLogger(__name__)


def _clamp(value: Any, minimum: int, default: int) -> int:
    """Missing -> default, unparsable or too small -> minimum."""
    if value is None:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        logger.warning("Unparsable number %r, using %s", value, minimum)
        return minimum
    return max(minimum, number)


def _enum_or_default(enum_cls, value: Any, default):
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning("Unknown %s %r, using %s", enum_cls.__name__, value, default.value)
        return default


def _parse_weekdays(values: Any) -> List[Weekday]:
    if not isinstance(values, (list, tuple, set, frozenset)):
        return []

    parsed: List[Weekday] = []
    for value in values:
        day = Weekday.parse(value)
        if day is None:
            logger.warning("Ignoring unknown weekday %r", value)
        elif day not in parsed:
            parsed.append(day)
    return sort_weekdays(parsed)


def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return date(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    try:
        parsed = pendulum.from_format(value.strip(), "YYYY-MM-DD")
    except (TypeError, ValueError):
        return None
    return date(parsed.year, parsed.month, parsed.day)


def _time_value(value: Any) -> str:
    """
    Coerce a slot endpoint to "HH:MM" where possible.

    YAML 1.1 reads an unquoted 10:00 as the base-60 integer 600, which is
    exactly the minute count. Integers outside a day and unparsable strings
    are kept invalid so normalization drops the slot.
    """
    if isinstance(value, bool):
        return ""
    if isinstance(value, int):
        if not 0 <= value < MINUTES_PER_DAY:
            return ""
        return from_minutes(value)
    if isinstance(value, time):
        return parse_time_of_day(value)
    if isinstance(value, str):
        return parse_time_of_day(value) or value
    return ""


class BufferSchema(BaseModel):
    amount: int = 0
    unit: BufferUnit = BufferUnit.DAYS

    @field_validator("amount", mode="before")
    @classmethod
    def clamp_amount(cls, value: Any) -> int:
        return _clamp(value, minimum=0, default=0)

    @field_validator("unit", mode="before")
    @classmethod
    def parse_unit(cls, value: Any) -> BufferUnit:
        return _enum_or_default(BufferUnit, value, BufferUnit.DAYS)


class AvailabilitySchema(BaseModel):
    max_days: int = 365
    buffer: BufferSchema = Field(default_factory=BufferSchema)

    @field_validator("max_days", mode="before")
    @classmethod
    def clamp_max_days(cls, value: Any) -> int:
        return _clamp(value, minimum=0, default=365)

    @field_validator("buffer", mode="before")
    @classmethod
    def default_buffer(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, BufferSchema)) else {}


class QuantitySchema(BaseModel):
    enabled: bool = False
    per_unit: int = 1

    @field_validator("per_unit", mode="before")
    @classmethod
    def clamp_per_unit(cls, value: Any) -> int:
        return _clamp(value, minimum=1, default=1)


class DateRangeSchema(BaseModel):
    has_custom_limits: bool = False
    min_length: int = 1
    max_length: int = 30

    @field_validator("min_length", mode="before")
    @classmethod
    def clamp_min_length(cls, value: Any) -> int:
        return _clamp(value, minimum=0, default=1)

    @field_validator("max_length", mode="before")
    @classmethod
    def clamp_max_length(cls, value: Any) -> int:
        return _clamp(value, minimum=0, default=30)


class SlotSchema(BaseModel):
    """A slot as stored: {"from": "09:00", "to": "10:00"}."""
    model_config = ConfigDict(populate_by_name=True)

    start: str = Field(alias="from")
    end: str = Field(alias="to")

    @field_validator("start", "end", mode="before")
    @classmethod
    def coerce_time(cls, value: Any) -> str:
        return _time_value(value)


class GroupSchema(BaseModel):
    days: List[Weekday] = Field(default_factory=list)
    slots: List[SlotSchema] = Field(default_factory=list)

    @field_validator("days", mode="before")
    @classmethod
    def parse_days(cls, value: Any) -> List[Weekday]:
        return _parse_weekdays(value)

    @field_validator("slots", mode="before")
    @classmethod
    def drop_malformed_slots(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        return [
            slot for slot in value
            if isinstance(slot, SlotSchema)
            or (isinstance(slot, dict) and "from" in slot and "to" in slot)
        ]


class TimeslotsSchema(BaseModel):
    groups: List[GroupSchema] = Field(default_factory=list)


class BookingConfigSchema(BaseModel):
    """
    Plain document shape of a booking configuration.

    Also accepts the older single ``mode`` field (``timeslots``,
    ``single_day`` or ``date_range``) and ``quantity_per_slot``.
    """
    kind: BookingKind = BookingKind.TIMESLOTS
    mode: BookingMode = BookingMode.SINGLE_DAY
    count_mode: CountMode = CountMode.NIGHTS
    availability: AvailabilitySchema = Field(default_factory=AvailabilitySchema)
    quantity: QuantitySchema = Field(default_factory=QuantitySchema)
    date_range: DateRangeSchema = Field(default_factory=DateRangeSchema)
    excluded_days_enabled: bool = False
    excluded_days: List[date] = Field(default_factory=list)
    excluded_weekdays: List[Weekday] = Field(default_factory=list)
    timeslots: TimeslotsSchema = Field(default_factory=TimeslotsSchema)

    @model_validator(mode="before")
    @classmethod
    def upgrade_legacy_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        data = dict(data)

        if "kind" not in data and "mode" in data:
            if data["mode"] == BookingKind.TIMESLOTS.value:
                data["kind"] = BookingKind.TIMESLOTS.value
                data.pop("mode")
            else:
                data["kind"] = BookingKind.DAYS.value

        if "quantity_per_slot" in data:
            per_slot = data.pop("quantity_per_slot")
            data.setdefault("quantity", {"enabled": True, "per_unit": per_slot})

        if "excluded_days_enabled" not in data and data.get("excluded_days"):
            data["excluded_days_enabled"] = True

        for key in ("availability", "quantity", "date_range", "timeslots"):
            if key in data and not isinstance(data[key], (dict, BaseModel)):
                logger.warning("Ignoring malformed %r section", key)
                data.pop(key)

        return data

    @field_validator("kind", mode="before")
    @classmethod
    def parse_kind(cls, value: Any) -> BookingKind:
        return _enum_or_default(BookingKind, value, BookingKind.TIMESLOTS)

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls, value: Any) -> BookingMode:
        return _enum_or_default(BookingMode, value, BookingMode.SINGLE_DAY)

    @field_validator("count_mode", mode="before")
    @classmethod
    def parse_count_mode(cls, value: Any) -> CountMode:
        return _enum_or_default(CountMode, value, CountMode.NIGHTS)

    @field_validator("excluded_days", mode="before")
    @classmethod
    def parse_excluded_days(cls, value: Any) -> List[date]:
        if not isinstance(value, (list, tuple, set, frozenset)):
            return []

        parsed: set[date] = set()
        for item in value:
            day = _parse_date(item)
            if day is None:
                logger.warning("Ignoring unparsable excluded date %r", item)
            else:
                parsed.add(day)
        return sorted(parsed)

    @field_validator("excluded_weekdays", mode="before")
    @classmethod
    def parse_excluded_weekdays(cls, value: Any) -> List[Weekday]:
        return _parse_weekdays(value)

    def to_domain(self) -> BookingConfiguration:
        """Build the domain aggregate from this document."""
        groups = tuple(
            WeekdayGroup(
                days=frozenset(group.days),
                slots=tuple(TimeInterval(start=s.start, end=s.end) for s in group.slots),
            )
            for group in self.timeslots.groups
        )

        config = BookingConfiguration(
            kind=self.kind,
            availability=AvailabilityWindow(
                max_days_ahead=self.availability.max_days,
                buffer=BufferPeriod(
                    amount=self.availability.buffer.amount,
                    unit=self.availability.buffer.unit,
                ),
            ),
            quantity=QuantityPolicy(
                enabled=self.quantity.enabled,
                per_unit=self.quantity.per_unit,
            ),
            groups=repair_exclusivity(groups),
            excluded_dates=frozenset(self.excluded_days) if self.excluded_days_enabled else frozenset(),
            excluded_dates_enabled=self.excluded_days_enabled,
            excluded_weekdays=frozenset(self.excluded_weekdays),
            booking_mode=self.mode,
            count_mode=self.count_mode,
            date_range=DateRangePolicy(
                custom_limits_enabled=self.date_range.has_custom_limits,
                min_length_days=self.date_range.min_length,
                max_length_days=self.date_range.max_length,
            ),
        )
        return normalize_configuration(config)

    @classmethod
    def from_domain(cls, config: BookingConfiguration) -> "BookingConfigSchema":
        """Build a document from the aggregate, normalizing slots first."""
        config = normalize_configuration(config)

        return cls(
            kind=config.kind,
            mode=config.booking_mode,
            count_mode=config.count_mode,
            availability=AvailabilitySchema(
                max_days=config.availability.max_days_ahead,
                buffer=BufferSchema(
                    amount=config.availability.buffer.amount,
                    unit=config.availability.buffer.unit,
                ),
            ),
            quantity=QuantitySchema(
                enabled=config.quantity.enabled,
                per_unit=config.quantity.per_unit,
            ),
            date_range=DateRangeSchema(
                has_custom_limits=config.date_range.custom_limits_enabled,
                min_length=config.date_range.min_length_days,
                max_length=config.date_range.max_length_days,
            ),
            excluded_days_enabled=config.excluded_dates_enabled,
            excluded_days=sorted_excluded_dates(config.excluded_dates),
            excluded_weekdays=sort_weekdays(config.excluded_weekdays),
            timeslots=TimeslotsSchema(
                groups=[
                    GroupSchema(
                        days=group.sorted_days(),
                        slots=[SlotSchema(start=s.start, end=s.end) for s in group.slots],
                    )
                    for group in config.groups
                ]
            ),
        )

    def to_document(self) -> Dict[str, Any]:
        """Plain JSON-compatible dict ("from"/"to" slot keys, ISO dates)."""
        return self.model_dump(mode="json", by_alias=True)


def load_booking_document(data: Dict[str, Any] | None) -> BookingConfiguration:
    """Build a configuration from a plain mapping (missing -> defaults)."""
    return BookingConfigSchema.model_validate(data or {}).to_domain()


def dump_booking_document(config: BookingConfiguration) -> Dict[str, Any]:
    """Serialize a configuration to a plain mapping."""
    return BookingConfigSchema.from_domain(config).to_document()


def load_booking_yaml(path: Path) -> BookingConfiguration:
    """
    Load a booking configuration from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If the file is not a YAML mapping
    """
    if not path.exists():
        raise FileNotFoundError(f"Booking file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError("Booking file must contain a mapping at the root level.")

    return load_booking_document(data)


def save_booking_yaml(path: Path, config: BookingConfiguration) -> None:
    """Write a booking configuration to a YAML file."""
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(dump_booking_document(config), f, sort_keys=False, allow_unicode=True)
