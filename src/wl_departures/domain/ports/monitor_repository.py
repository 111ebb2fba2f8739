"""Monitor repository port."""

from typing import Protocol

from wl_departures.domain.models.monitor import Monitor


class MonitorRepository(Protocol):
    """Port for retrieving live monitors of a single platform."""

    async def get_monitors(self, platform_id: int) -> list[Monitor] | None:
        """Get the monitors of one platform.

        Returns None when the platform could not be fetched through any source.
        """
        ...
