"""Domain layer - core business logic and models."""

from wl_departures.domain.models import (
    Departure,
    DepartureGroup,
    Monitor,
    Station,
    TransportCategory,
)
from wl_departures.domain.ports import (
    ClientStateStore,
    DisplayAdapter,
    MonitorRepository,
    StationRepository,
)

__all__ = [
    "ClientStateStore",
    "Departure",
    "DepartureGroup",
    "DisplayAdapter",
    "Monitor",
    "MonitorRepository",
    "Station",
    "StationRepository",
    "TransportCategory",
]
