"""Protocol for reporting load progress."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from wl_departures.domain.models.load_progress import LoadProgress


class ProgressReporterProtocol(Protocol):
    """Protocol for receiving progress updates of user-visible loads."""

    def report(self, progress: "LoadProgress") -> None:
        """Receive a progress update.

        Args:
            progress: Counts after the latest completed batch.
        """
        ...
