"""Monitor domain models.

Normalized shape of the Wiener Linien monitor payload. Only the fields the
departure pipeline reads are modelled; everything else is ignored and every
field is optional so that partial upstream documents still validate.
"""

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# The API sends offsets without a colon ("+0100"), which older parsers reject
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


def parse_api_timestamp(value: Any) -> datetime | None:
    """Parse an API timestamp, returning None for absent or unparsable values."""
    if value is None or isinstance(value, datetime):
        return value
    text = str(value).strip()
    if not text:
        return None
    text = _COMPACT_OFFSET.sub(r"\1:\2", text.replace("Z", "+00:00"))
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def parse_countdown(value: Any) -> int | None:
    """Parse a countdown in minutes, returning None for absent or unparsable values."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(float(str(value).strip()))
    except (ValueError, OverflowError):
        return None


def _coerce_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _null_as_empty(value: Any) -> Any:
    # The API sends null for empty lists and objects
    return {} if value is None else value


def _null_as_empty_list(value: Any) -> Any:
    return [] if value is None else value


class _MonitorModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class MonitorDepartureTime(_MonitorModel):
    """Timing information of a single departure."""

    countdown: int | None = None
    time_planned: datetime | None = Field(default=None, alias="timePlanned")
    time_real: datetime | None = Field(default=None, alias="timeReal")

    @field_validator("countdown", mode="before")
    @classmethod
    def parse_countdown_minutes(cls, v: Any) -> int | None:
        """Accept numeric strings; drop unparsable countdowns."""
        return parse_countdown(v)

    @field_validator("time_planned", "time_real", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> datetime | None:
        """Accept ISO timestamps with compact offsets; drop unparsable ones."""
        return parse_api_timestamp(v)


class MonitorVehicle(_MonitorModel):
    """Vehicle-level overrides of the line information."""

    towards: str | None = None
    direction: Any = None
    destination: str | None = None

    @field_validator("towards", "destination", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str | None:
        """Coerce scalar values to text."""
        return _coerce_optional_str(v)

    @property
    def direction_value(self) -> str | None:
        """Direction label when the API sends a structured direction."""
        if isinstance(self.direction, dict):
            return _coerce_optional_str(self.direction.get("value"))
        return None


class MonitorDeparture(_MonitorModel):
    """One raw departure entry of a monitor line."""

    departure_time: MonitorDepartureTime = Field(
        default_factory=MonitorDepartureTime, alias="departureTime"
    )
    vehicle: MonitorVehicle | None = None

    @field_validator("departure_time", mode="before")
    @classmethod
    def default_departure_time(cls, v: Any) -> Any:
        """Treat a null departure time as empty."""
        return _null_as_empty(v)


class MonitorLineDepartures(_MonitorModel):
    """Wrapper object the API puts around the departure list."""

    departure: list[MonitorDeparture] = Field(default_factory=list)

    @field_validator("departure", mode="before")
    @classmethod
    def default_departure(cls, v: Any) -> Any:
        """Treat a null departure list as empty."""
        return _null_as_empty_list(v)


class MonitorLine(_MonitorModel):
    """A line currently served at a monitored platform."""

    name: str = ""
    towards: str | None = None
    platform: str | None = None
    type: str = ""
    departures: MonitorLineDepartures = Field(default_factory=MonitorLineDepartures)

    @field_validator("departures", mode="before")
    @classmethod
    def default_departures(cls, v: Any) -> Any:
        """Treat null departures as empty."""
        return _null_as_empty(v)

    @field_validator("name", "type", mode="before")
    @classmethod
    def coerce_required_text(cls, v: Any) -> str:
        """Coerce scalar values to text, treating null as empty."""
        return "" if v is None else str(v)

    @field_validator("towards", "platform", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str | None:
        """Coerce scalar values to text."""
        return _coerce_optional_str(v)


class MonitorLocationProperties(_MonitorModel):
    """Descriptive properties of the monitored stop."""

    name: str | None = None
    title: str | None = None

    @field_validator("name", "title", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str | None:
        """Coerce scalar values to text."""
        return _coerce_optional_str(v)


class MonitorLocationStop(_MonitorModel):
    """The stop a monitor belongs to."""

    properties: MonitorLocationProperties = Field(default_factory=MonitorLocationProperties)

    @field_validator("properties", mode="before")
    @classmethod
    def default_properties(cls, v: Any) -> Any:
        """Treat null properties as empty."""
        return _null_as_empty(v)


class Monitor(_MonitorModel):
    """All lines currently tracked at one platform."""

    location_stop: MonitorLocationStop | None = Field(default=None, alias="locationStop")
    lines: list[MonitorLine] = Field(default_factory=list)

    @field_validator("lines", mode="before")
    @classmethod
    def default_lines(cls, v: Any) -> Any:
        """Treat null lines as empty."""
        return _null_as_empty_list(v)

    @property
    def stop_name(self) -> str | None:
        """Name of the monitored stop, if the API reported one."""
        if self.location_stop is None:
            return None
        return self.location_stop.properties.name
