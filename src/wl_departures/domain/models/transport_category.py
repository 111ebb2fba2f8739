"""Transport category domain model."""

from enum import StrEnum


class TransportCategory(StrEnum):
    """Coarse transport category used for badges and group ordering."""

    METRO = "metro"
    TRAM = "tram"
    BUS = "bus"
    OTHER = "other"

    @property
    def rank(self) -> int:
        """Display rank: metro first, then bus, then tram, then everything else."""
        return _CATEGORY_RANKS[self]


_CATEGORY_RANKS = {
    TransportCategory.METRO: 0,
    TransportCategory.BUS: 1,
    TransportCategory.TRAM: 2,
    TransportCategory.OTHER: 3,
}
