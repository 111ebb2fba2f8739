"""Display adapter port."""

from abc import ABC, abstractmethod

from wl_departures.domain.models.departure_load_result import DepartureLoadResult


class DisplayAdapter(ABC):
    """Port for presenting departure load results to users."""

    @abstractmethod
    async def display_result(self, result: DepartureLoadResult) -> None:
        """Display the outcome of a departure load."""
        ...
