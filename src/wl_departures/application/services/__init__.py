"""Application services."""

from wl_departures.application.services.batched_monitor_fetcher import (
    BatchedMonitorFetcher,
    MonitorFetchResult,
)
from wl_departures.application.services.departure_grouping_service import (
    DepartureGroupingService,
    normalize_destination,
)
from wl_departures.application.services.departure_load_service import DepartureLoadService
from wl_departures.application.services.geo import haversine_distance_meters
from wl_departures.application.services.line_classifier import classify_line, line_badge
from wl_departures.application.services.station_search_service import StationSearchService

__all__ = [
    "BatchedMonitorFetcher",
    "DepartureGroupingService",
    "DepartureLoadService",
    "MonitorFetchResult",
    "StationSearchService",
    "classify_line",
    "haversine_distance_meters",
    "line_badge",
    "normalize_destination",
]
