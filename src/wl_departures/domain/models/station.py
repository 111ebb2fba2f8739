"""Station domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Station:
    """Represents a logical station made up of one or more platforms (RBLs)."""

    name: str
    municipality: str | None
    latitude: float
    longitude: float
    primary_platform_id: int
    platform_ids: tuple[int, ...]
