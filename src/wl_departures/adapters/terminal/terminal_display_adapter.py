"""Terminal rendering of departure load results."""

import json
import logging
import sys
from datetime import datetime
from typing import TextIO

from wl_departures.adapters.terminal.departure_formatter import DepartureFormatter
from wl_departures.application.services.line_classifier import line_badge
from wl_departures.domain.models.departure_load_result import DepartureLoadResult, LoadStatus
from wl_departures.domain.models.load_progress import LoadProgress
from wl_departures.domain.models.station import Station
from wl_departures.domain.ports.display_adapter import DisplayAdapter

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "Keine Abfahrtsdaten verfügbar"
NO_DEPARTURES_MESSAGE = "Keine Abfahrten gefunden"
LOAD_ERROR_PREFIX = "Fehler beim Laden der Abfahrten"


def describe_station(station: Station) -> str:
    """Station name with municipality, if known."""
    if station.municipality:
        return f"{station.name} ({station.municipality})"
    return station.name


class TerminalProgressReporter:
    """Writes batch progress of user-visible loads to a stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        """Initialize with an output stream (default: stderr)."""
        self.stream = stream or sys.stderr

    def report(self, progress: LoadProgress) -> None:
        """Write one progress line."""
        print(
            f"{progress.processed}/{progress.total} RBLs ({progress.succeeded} erfolgreich)",
            file=self.stream,
        )


class TerminalDisplayAdapter(DisplayAdapter):
    """Renders departure boards as plain text or JSON."""

    def __init__(
        self,
        stream: TextIO | None = None,
        formatter: DepartureFormatter | None = None,
        as_json: bool = False,
    ) -> None:
        """Initialize the adapter.

        Args:
            stream: Output stream (default: stdout).
            formatter: Departure formatter.
            as_json: Emit one JSON document per result instead of text.
        """
        self.stream = stream or sys.stdout
        self.formatter = formatter or DepartureFormatter()
        self.as_json = as_json

    async def display_result(self, result: DepartureLoadResult) -> None:
        """Display the outcome of a departure load."""
        text = self.render_json(result) if self.as_json else self.render(result)
        print(text, file=self.stream, flush=True)

    def render(self, result: DepartureLoadResult, now: datetime | None = None) -> str:
        """Render a load result as a text board."""
        now = now or datetime.now()
        lines = [f"{describe_station(result.station)}  (Stand {now.strftime('%H:%M:%S')})"]

        if result.status is LoadStatus.FAILED:
            reason = result.error.reason if result.error else "unbekannter Fehler"
            lines.append(f"{LOAD_ERROR_PREFIX}: {reason}")
            return "\n".join(lines)
        if result.status is LoadStatus.NO_DATA:
            lines.append(NO_DATA_MESSAGE)
            return "\n".join(lines)
        if result.status is LoadStatus.NO_DEPARTURES:
            lines.append(NO_DEPARTURES_MESSAGE)
            return "\n".join(lines)

        if result.platforms_succeeded < result.platforms_requested:
            lines.append(
                f"{result.platforms_succeeded}/{result.platforms_requested} Steige erreichbar"
            )
        line_width = max(len(group.line) for group in result.groups)
        destination_width = max(len(group.destination) for group in result.groups)
        for group in result.groups:
            badge = line_badge(group.line, group.category)
            times = ", ".join(self.formatter.format_compact(d) for d in group.departures)
            platform = f"Steig {group.platform}" if group.platform else ""
            lines.append(
                f"{badge.icon} {group.line:<{line_width}}  {group.destination:<{destination_width}}  "
                f"{platform:<9} {times}".rstrip()
            )
        return "\n".join(lines)

    def render_json(self, result: DepartureLoadResult) -> str:
        """Render a load result as JSON."""
        document = {
            "status": result.status.value,
            "station": {
                "name": result.station.name,
                "municipality": result.station.municipality,
                "rbl": result.station.primary_platform_id,
                "rbls": list(result.station.platform_ids),
            },
            "platforms_requested": result.platforms_requested,
            "platforms_succeeded": result.platforms_succeeded,
            "groups": [self.formatter.group_to_dict(g) for g in result.groups],
            "error": result.error.model_dump() if result.error else None,
        }
        return json.dumps(document, indent=2, ensure_ascii=False)
