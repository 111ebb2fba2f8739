"""Station search service."""

from wl_departures.application.services.geo import haversine_distance_meters
from wl_departures.domain.models.station import Station
from wl_departures.domain.ports.station_repository import StationRepository


class StationSearchService:
    """Name and proximity search over the loaded station list."""

    def __init__(self, station_repository: StationRepository) -> None:
        """Initialize with a station repository."""
        self._station_repository = station_repository

    def search_by_name(self, query: str) -> list[Station]:
        """Stations whose name contains the query, case-insensitively, in dataset order."""
        needle = query.strip().lower()
        if not needle:
            return []
        return [s for s in self._station_repository.get_all() if needle in s.name.lower()]

    def search_nearby(
        self, latitude: float, longitude: float, radius_meters: float
    ) -> list[Station]:
        """Stations within the radius, nearest first."""
        return [
            station
            for station, _ in self.search_nearby_with_distance(latitude, longitude, radius_meters)
        ]

    def search_nearby_with_distance(
        self, latitude: float, longitude: float, radius_meters: float
    ) -> list[tuple[Station, float]]:
        """Stations within the radius, nearest first, with their distance in meters."""
        matches = []
        for station in self._station_repository.get_all():
            distance = haversine_distance_meters(
                latitude, longitude, station.latitude, station.longitude
            )
            if distance <= radius_meters:
                matches.append((station, distance))
        matches.sort(key=lambda match: match[1])
        return matches

    def resolve(self, query: str) -> Station | None:
        """Resolve a platform id or a name query to a single station.

        A numeric query matches a station's primary platform first, then any
        station listing that platform. Otherwise the first name match wins.
        """
        text = query.strip()
        if text.isdigit():
            platform_id = int(text)
            station = self._station_repository.find_by_primary_id(platform_id)
            if station is not None:
                return station
            for candidate in self._station_repository.get_all():
                if platform_id in candidate.platform_ids:
                    return candidate
            return None

        matches = self.search_by_name(text)
        return matches[0] if matches else None
