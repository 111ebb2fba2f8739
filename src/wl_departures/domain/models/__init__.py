"""Domain models for Wiener Linien departures."""

from wl_departures.domain.models.departure import Departure
from wl_departures.domain.models.departure_group import DepartureGroup
from wl_departures.domain.models.departure_load_result import DepartureLoadResult, LoadStatus
from wl_departures.domain.models.error_details import ErrorDetails
from wl_departures.domain.models.load_progress import LoadProgress
from wl_departures.domain.models.monitor import (
    Monitor,
    MonitorDeparture,
    MonitorDepartureTime,
    MonitorLine,
    MonitorVehicle,
)
from wl_departures.domain.models.proxy_descriptor import ProxyDescriptor
from wl_departures.domain.models.station import Station
from wl_departures.domain.models.transport_category import TransportCategory

__all__ = [
    "Departure",
    "DepartureGroup",
    "DepartureLoadResult",
    "ErrorDetails",
    "LoadProgress",
    "LoadStatus",
    "Monitor",
    "MonitorDeparture",
    "MonitorDepartureTime",
    "MonitorLine",
    "MonitorVehicle",
    "ProxyDescriptor",
    "Station",
    "TransportCategory",
]
