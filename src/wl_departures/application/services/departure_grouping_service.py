"""Departure grouping service."""

import logging
import re
from collections import Counter
from collections.abc import Iterable

from wl_departures.application.services.line_classifier import classify_line
from wl_departures.domain.models.departure import Departure
from wl_departures.domain.models.departure_group import DepartureGroup
from wl_departures.domain.models.monitor import Monitor, MonitorDeparture, MonitorLine

logger = logging.getLogger(__name__)

UNKNOWN_DESTINATION = "UNBEKANNT"
NO_PLATFORM = "no-platform"
DEFAULT_MAX_DEPARTURES_PER_GROUP = 3

_NON_DIGITS = re.compile(r"\D")


def normalize_destination(raw: str | None) -> str:
    """Trim and upper-case a destination label; empty labels become UNBEKANNT."""
    if raw is None:
        return UNKNOWN_DESTINATION
    normalized = str(raw).strip().upper()
    return normalized or UNKNOWN_DESTINATION


def resolve_destination(raw_departure: MonitorDeparture, line: MonitorLine) -> str:
    """Pick the most specific destination available for a departure.

    Precedence: vehicle "towards", vehicle direction value, vehicle destination,
    then the line's "towards" label.
    """
    vehicle = raw_departure.vehicle
    candidates: list[str | None] = []
    if vehicle is not None:
        candidates.extend([vehicle.towards, vehicle.direction_value, vehicle.destination])
    candidates.append(line.towards)
    for candidate in candidates:
        if candidate:
            return normalize_destination(candidate)
    return UNKNOWN_DESTINATION


def countdown_sort_key(countdown: int | None) -> tuple[bool, int]:
    """Sort key placing missing countdowns after every known countdown."""
    return (countdown is None, countdown if countdown is not None else 0)


def line_number(line: str) -> int:
    """Numeric part of a line name ("U1" -> 1, "13A" -> 13, "D" -> 0)."""
    digits = _NON_DIGITS.sub("", line)
    return int(digits) if digits else 0


class DepartureGroupingService:
    """Merges monitors of several platforms into ordered departure groups.

    The pipeline is: flatten every monitor into departures, order them so that
    real-time entries come first, drop duplicates observed through more than one
    platform feed, bucket by (line, platform, destination), keep the earliest
    departures per bucket and order the buckets for display.
    """

    def __init__(self, max_departures_per_group: int = DEFAULT_MAX_DEPARTURES_PER_GROUP) -> None:
        """Initialize with the number of departures kept per group."""
        self.max_departures_per_group = max_departures_per_group

    def build_groups(
        self, monitors: Iterable[Monitor], station_name: str | None = None
    ) -> list[DepartureGroup]:
        """Run the full pipeline over a flat monitor sequence.

        Args:
            monitors: Monitors of all platforms of a station, in fetch order.
            station_name: Used for log messages only.

        Returns:
            Ordered departure groups; empty when no monitor carried departures.
        """
        departures = self.flatten_monitors(monitors)
        deduplicated = self.deduplicate(self.order_for_deduplication(departures))
        groups = self.sort_groups(self.group_departures(deduplicated))

        if groups:
            stats = Counter(group.category.value for group in groups)
            logger.debug(
                f"Groups at {station_name or 'station'}: {dict(stats)} (Total: {len(groups)})"
            )
        return groups

    def flatten_monitors(self, monitors: Iterable[Monitor]) -> list[Departure]:
        """Turn every departure of every line of every monitor into a Departure."""
        departures: list[Departure] = []
        for monitor_index, monitor in enumerate(monitors):
            source = monitor.stop_name or str(monitor_index)
            for line in monitor.lines:
                category = classify_line(line.name, line.type)
                for raw_departure in line.departures.departure:
                    departure_time = raw_departure.departure_time
                    departures.append(
                        Departure(
                            line=line.name,
                            destination=resolve_destination(raw_departure, line),
                            platform=line.platform or "",
                            countdown_minutes=departure_time.countdown,
                            planned_time=departure_time.time_planned,
                            real_time=departure_time.time_real,
                            category=category,
                            line_type=line.type,
                            source=source,
                        )
                    )
        return departures

    def order_for_deduplication(self, departures: list[Departure]) -> list[Departure]:
        """Real-time entries first, then ascending countdown; stable otherwise."""
        return sorted(
            departures,
            key=lambda d: (not d.is_realtime, countdown_sort_key(d.countdown_minutes)),
        )

    def deduplication_key(self, departure: Departure) -> tuple[str, str, str, object]:
        """Identity of a physical departure across platform feeds."""
        if departure.real_time is not None:
            time_signature: object = departure.real_time
        elif departure.planned_time is not None:
            time_signature = departure.planned_time
        else:
            time_signature = f"countdown-{departure.countdown_minutes}"
        return (
            departure.line,
            departure.platform or NO_PLATFORM,
            normalize_destination(departure.destination),
            time_signature,
        )

    def deduplicate(self, departures: list[Departure]) -> list[Departure]:
        """Keep the first departure seen per identity, preserving order."""
        seen: set[tuple[str, str, str, object]] = set()
        kept: list[Departure] = []
        for departure in departures:
            key = self.deduplication_key(departure)
            if key in seen:
                logger.debug(
                    f"Removed duplicate: {departure.line} -> {departure.destination} "
                    f"@ {departure.countdown_minutes}min"
                )
                continue
            seen.add(key)
            kept.append(departure)
        return kept

    def group_departures(self, departures: list[Departure]) -> list[DepartureGroup]:
        """Bucket departures by (line, platform, destination) and finalize each bucket.

        Departures within a group are sorted by countdown (missing last, ties in
        arrival order) and truncated to max_departures_per_group.
        """
        buckets: dict[tuple[str, str, str], list[Departure]] = {}
        for departure in departures:
            key = (departure.line, departure.platform, normalize_destination(departure.destination))
            buckets.setdefault(key, []).append(departure)

        groups = []
        for (line, platform, destination), members in buckets.items():
            members.sort(key=lambda d: countdown_sort_key(d.countdown_minutes))
            groups.append(
                DepartureGroup(
                    line=line,
                    destination=destination,
                    platform=platform,
                    category=members[0].category,
                    departures=tuple(members[: self.max_departures_per_group]),
                )
            )
        return groups

    def sort_groups(self, groups: list[DepartureGroup]) -> list[DepartureGroup]:
        """Order groups by category rank, line number, line name, platform, first countdown."""

        def group_sort_key(group: DepartureGroup) -> tuple:
            first_countdown = group.departures[0].countdown_minutes if group.departures else None
            return (
                group.category.rank,
                line_number(group.line),
                group.line,
                group.platform,
                countdown_sort_key(first_countdown),
            )

        return sorted(groups, key=group_sort_key)
