"""Terminal presentation adapters."""

from wl_departures.adapters.terminal.departure_formatter import DepartureFormatter
from wl_departures.adapters.terminal.terminal_display_adapter import (
    TerminalDisplayAdapter,
    TerminalProgressReporter,
    describe_station,
)

__all__ = [
    "DepartureFormatter",
    "TerminalDisplayAdapter",
    "TerminalProgressReporter",
    "describe_station",
]
