"""Station repository backed by the static JSON station dataset."""

import json
import logging
import math
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from wl_departures.domain.models.station import Station
from wl_departures.domain.ports.station_repository import StationRepository

logger = logging.getLogger(__name__)


class StationRecord(BaseModel):
    """One entry of the dataset's "stations" array, before normalization."""

    model_config = ConfigDict(extra="ignore")

    name: str
    municipality: str | None = None
    latitude: float
    longitude: float
    rbls: list[Any] = Field(default_factory=list)


def parse_platform_id(value: Any) -> int | None:
    """Parse a dataset platform id such as "2093.0"; None unless a positive integer."""
    try:
        number = math.floor(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return number if number > 0 else None


def station_from_record(record: StationRecord) -> Station | None:
    """Normalize a dataset entry, or None if its first platform id is invalid."""
    if not record.rbls:
        return None
    primary = parse_platform_id(record.rbls[0])
    if primary is None:
        return None
    platform_ids = tuple(
        pid for pid in (parse_platform_id(r) for r in record.rbls) if pid is not None
    )
    return Station(
        name=record.name,
        municipality=record.municipality,
        latitude=record.latitude,
        longitude=record.longitude,
        primary_platform_id=primary,
        platform_ids=platform_ids,
    )


class JsonStationRepository(StationRepository):
    """In-memory station list loaded once from a JSON document."""

    def __init__(self, stations: list[Station] | None = None) -> None:
        """Initialize with already normalized stations."""
        self._stations: list[Station] = list(stations or [])
        self._by_primary_id: dict[int, Station] = {}
        for station in self._stations:
            self._by_primary_id.setdefault(station.primary_platform_id, station)

    @classmethod
    def from_data(cls, data: Any) -> "JsonStationRepository":
        """Build a repository from a parsed dataset, dropping invalid entries."""
        entries = data.get("stations", []) if isinstance(data, dict) else []
        stations = []
        for entry in entries:
            try:
                record = StationRecord.model_validate(entry)
            except ValidationError as e:
                logger.debug(f"Skipping malformed station entry: {e.error_count()} error(s)")
                continue
            station = station_from_record(record)
            if station is not None:
                stations.append(station)

        logger.info(f"Loaded {len(stations)} stations from {len(entries)} total")
        return cls(stations)

    @classmethod
    def from_file(cls, path: str | Path) -> "JsonStationRepository":
        """Load the dataset file. An unreadable file yields an empty repository."""
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error loading stations from {path}: {e}")
            return cls([])
        return cls.from_data(data)

    def get_all(self) -> list[Station]:
        """Return every loaded station in dataset order."""
        return list(self._stations)

    def find_by_primary_id(self, platform_id: int) -> Station | None:
        """Find the station whose primary platform id matches."""
        return self._by_primary_id.get(platform_id)
