"""Station repository port."""

from typing import Protocol

from wl_departures.domain.models.station import Station


class StationRepository(Protocol):
    """Port for the canonical in-memory station list."""

    def get_all(self) -> list[Station]:
        """Return every loaded station in dataset order."""
        ...

    def find_by_primary_id(self, platform_id: int) -> Station | None:
        """Find the station whose primary platform id matches."""
        ...
