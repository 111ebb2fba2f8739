"""Departure domain model."""

from dataclasses import dataclass
from datetime import datetime

from wl_departures.domain.models.transport_category import TransportCategory


@dataclass(frozen=True)
class Departure:
    """A single departure, normalized from one monitor line entry."""

    line: str
    destination: str
    platform: str
    countdown_minutes: int | None
    planned_time: datetime | None
    real_time: datetime | None
    category: TransportCategory
    line_type: str = ""
    source: str | None = None  # Name of the monitored stop the entry came from

    @property
    def is_realtime(self) -> bool:
        """True when the departure carries a confirmed real-time timestamp."""
        return self.real_time is not None
