"""Departure group domain model."""

from dataclasses import dataclass

from wl_departures.domain.models.departure import Departure
from wl_departures.domain.models.transport_category import TransportCategory


@dataclass(frozen=True)
class DepartureGroup:
    """Departures of one line leaving from one platform towards one destination."""

    line: str
    destination: str
    platform: str
    category: TransportCategory
    departures: tuple[Departure, ...]

    @property
    def key(self) -> tuple[str, str, str]:
        """Group identity: (line, platform, destination)."""
        return (self.line, self.platform, self.destination)
