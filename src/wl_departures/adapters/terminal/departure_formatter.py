"""Text formatting of departure times."""

from datetime import datetime
from typing import Any

from wl_departures.application.services.line_classifier import line_badge
from wl_departures.domain.models.departure import Departure
from wl_departures.domain.models.departure_group import DepartureGroup


class DepartureFormatter:
    """Formats countdowns, clock times and delays the way the departure board shows them."""

    def format_countdown(self, minutes: int | None) -> str:
        """Format minutes until departure ("?", "Jetzt", "1 Min", "5 Min")."""
        if minutes is None:
            return "?"
        if minutes == 0:
            return "Jetzt"
        return f"{minutes} Min"

    def format_clock(self, timestamp: datetime | None) -> str:
        """Format a timestamp as HH:MM in its own offset."""
        if timestamp is None:
            return ""
        return timestamp.strftime("%H:%M")

    def delay_minutes(self, planned: datetime, real: datetime) -> int | None:
        """Difference between real and planned time in whole minutes.

        None when only one of the two timestamps carries an offset.
        """
        if (planned.tzinfo is None) != (real.tzinfo is None):
            return None
        return round((real - planned).total_seconds() / 60)

    def format_delay(self, planned: datetime, real: datetime) -> str:
        """Format the delay as "+n", "-n" or "±0"; empty when it cannot be computed."""
        diff = self.delay_minutes(planned, real)
        if diff is None:
            return ""
        if diff > 0:
            return f"+{diff}"
        if diff < 0:
            return str(diff)
        return "±0"

    def format_times(self, departure: Departure) -> str:
        """Planned and real time; a departure without real-time data shows only the plan."""
        planned, real = departure.planned_time, departure.real_time
        if planned is not None and real is not None:
            text = f"Plan {self.format_clock(planned)} / Ist {self.format_clock(real)}"
            delay = self.format_delay(planned, real)
            return f"{text} ({delay})" if delay else text
        if planned is not None:
            return f"Plan {self.format_clock(planned)}"
        if real is not None:
            return f"Ist {self.format_clock(real)}"
        return ""

    def format_compact(self, departure: Departure) -> str:
        """Countdown followed by the clock time, e.g. "3 Min (12:07 +1)"."""
        countdown = self.format_countdown(departure.countdown_minutes)
        planned, real = departure.planned_time, departure.real_time
        if planned is not None and real is not None:
            delay = self.format_delay(planned, real)
            clock = f"{self.format_clock(real)} {delay}" if delay else self.format_clock(real)
            return f"{countdown} ({clock})"
        if planned is not None:
            # Schedule only, no live confirmation
            return f"{countdown} ({self.format_clock(planned)}*)"
        return countdown

    def departure_to_dict(self, departure: Departure) -> dict[str, Any]:
        """JSON-friendly representation of a departure."""
        return {
            "countdown": departure.countdown_minutes,
            "countdown_text": self.format_countdown(departure.countdown_minutes),
            "time_planned": departure.planned_time.isoformat() if departure.planned_time else None,
            "time_real": departure.real_time.isoformat() if departure.real_time else None,
            "realtime": departure.is_realtime,
        }

    def group_to_dict(self, group: DepartureGroup) -> dict[str, Any]:
        """JSON-friendly representation of a departure group."""
        return {
            "line": group.line,
            "destination": group.destination,
            "platform": group.platform,
            "category": group.category.value,
            "badge": line_badge(group.line, group.category).css_class,
            "departures": [self.departure_to_dict(d) for d in group.departures],
        }
