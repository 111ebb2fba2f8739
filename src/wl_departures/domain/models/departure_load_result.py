"""Departure load result domain model."""

from dataclasses import dataclass
from enum import StrEnum

from wl_departures.domain.models.departure_group import DepartureGroup
from wl_departures.domain.models.error_details import ErrorDetails
from wl_departures.domain.models.station import Station


class LoadStatus(StrEnum):
    """Outcome of loading departures for a station."""

    LOADED = "loaded"
    NO_DEPARTURES = "no_departures"  # Monitors arrived but carried no departures
    NO_DATA = "no_data"  # No platform returned any monitor
    FAILED = "failed"


@dataclass(frozen=True)
class DepartureLoadResult:
    """Result of one departure load for a station."""

    status: LoadStatus
    station: Station
    groups: tuple[DepartureGroup, ...] = ()
    error: ErrorDetails | None = None
    platforms_requested: int = 0
    platforms_succeeded: int = 0
    silent: bool = False
