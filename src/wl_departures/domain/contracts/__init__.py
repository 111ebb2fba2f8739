"""Domain contracts (protocols shared between layers)."""

from wl_departures.domain.contracts.progress_reporter import ProgressReporterProtocol

__all__ = ["ProgressReporterProtocol"]
