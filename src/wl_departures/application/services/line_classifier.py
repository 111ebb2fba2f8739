"""Line classification into transport categories.

The rules are a heuristic over Vienna line names and are order-sensitive:
name-based rules run before the API type code is consulted, and the first
matching rule wins. For example "13A" is a bus because it contains "A", and a
line literally named "A" is a bus for the same reason.
"""

import re
from dataclasses import dataclass

from wl_departures.domain.models.transport_category import TransportCategory

_METRO_NAME = re.compile(r"^U[1-6]$")
_DIGITS_ONLY = re.compile(r"^\d+$")

METRO_TYPE_TOKEN = "ptmetro"
TRAM_TYPE_TOKEN = "pttramwayline"
BUS_TYPE_TOKEN = "ptbusline"

_ICONS = {
    TransportCategory.METRO: "🚇",
    TransportCategory.TRAM: "🚊",
    TransportCategory.BUS: "🚌",
}


@dataclass(frozen=True)
class LineBadge:
    """Presentation metadata for a line badge."""

    css_class: str
    icon: str


def classify_line(line_name: str, api_type: str = "") -> TransportCategory:
    """Classify a line by name first, then by API type code. Defaults to bus."""
    name = str(line_name).upper()
    if _METRO_NAME.match(name):
        return TransportCategory.METRO
    if "D" in name or "O" in name or _DIGITS_ONLY.match(name):
        return TransportCategory.TRAM
    if "A" in name or "B" in name or "N" in name:
        return TransportCategory.BUS

    type_code = str(api_type or "").lower()
    if "metro" in type_code or type_code == METRO_TYPE_TOKEN:
        return TransportCategory.METRO
    if "tram" in type_code or type_code == TRAM_TYPE_TOKEN:
        return TransportCategory.TRAM
    if "bus" in type_code or type_code == BUS_TYPE_TOKEN:
        return TransportCategory.BUS
    return TransportCategory.BUS


def line_badge(line_name: str, category: TransportCategory) -> LineBadge:
    """Badge class and icon for a line, with a per-line class for metro lines."""
    css_class = category.value
    if category is TransportCategory.METRO:
        match = re.search(r"U([1-6])", str(line_name).upper())
        if match:
            css_class = f"{css_class} u{match.group(1)}"
    return LineBadge(css_class=css_class, icon=_ICONS.get(category, _ICONS[TransportCategory.BUS]))
