"""Ports (interfaces) for the ports-and-adapters architecture."""

from wl_departures.domain.ports.client_state_store import ClientStateStore
from wl_departures.domain.ports.display_adapter import DisplayAdapter
from wl_departures.domain.ports.monitor_repository import MonitorRepository
from wl_departures.domain.ports.station_repository import StationRepository

__all__ = [
    "ClientStateStore",
    "DisplayAdapter",
    "MonitorRepository",
    "StationRepository",
]
