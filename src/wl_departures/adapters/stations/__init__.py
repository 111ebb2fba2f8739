"""Static station dataset adapter."""

from wl_departures.adapters.stations.json_station_repository import (
    JsonStationRepository,
    parse_platform_id,
)

__all__ = ["JsonStationRepository", "parse_platform_id"]
