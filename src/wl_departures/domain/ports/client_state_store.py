"""Client state store port."""

from typing import Protocol

from wl_departures.domain.models.station import Station


class ClientStateStore(Protocol):
    """Port for persisted per-user state (favorites and recent searches)."""

    def is_favorite(self, platform_id: int) -> bool:
        """Check whether the station with this primary platform id is a favorite."""
        ...

    def toggle_favorite(self, station: Station) -> bool:
        """Add or remove a favorite. Returns True if the station is now a favorite."""
        ...

    def get_favorites(self) -> list[Station]:
        """Return favorites in the order they were added."""
        ...

    def record_recent(self, station: Station) -> None:
        """Record a station as recently viewed."""
        ...

    def get_recent(self) -> list[Station]:
        """Return recently viewed stations, most recent first."""
        ...
