"""Favorites and recent searches persisted to a local JSON file."""

import json
import logging
import time
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from wl_departures.domain.models.station import Station
from wl_departures.domain.ports.client_state_store import ClientStateStore

logger = logging.getLogger(__name__)

MAX_RECENT_SEARCHES = 5


class SavedStation(BaseModel):
    """Serialized station as stored in the state file."""

    model_config = ConfigDict(extra="ignore")

    name: str
    municipality: str | None = None
    latitude: float = 0.0
    longitude: float = 0.0
    rbl: int
    rbls: list[int] = Field(default_factory=list)
    timestamp: int | None = None  # Milliseconds since epoch, recent searches only

    @classmethod
    def from_station(cls, station: Station, timestamp: int | None = None) -> "SavedStation":
        """Serialize a station."""
        return cls(
            name=station.name,
            municipality=station.municipality,
            latitude=station.latitude,
            longitude=station.longitude,
            rbl=station.primary_platform_id,
            rbls=list(station.platform_ids),
            timestamp=timestamp,
        )

    def to_station(self) -> Station:
        """Deserialize; older entries without a platform list fall back to the primary id."""
        return Station(
            name=self.name,
            municipality=self.municipality,
            latitude=self.latitude,
            longitude=self.longitude,
            primary_platform_id=self.rbl,
            platform_ids=tuple(self.rbls) if self.rbls else (self.rbl,),
        )


class ClientState(BaseModel):
    """Contents of the state file."""

    favorites: list[SavedStation] = Field(default_factory=list)
    recent: list[SavedStation] = Field(default_factory=list)


class JsonClientStateStore(ClientStateStore):
    """Client state store writing the whole state on every change."""

    def __init__(self, path: str | Path, max_recent: int = MAX_RECENT_SEARCHES) -> None:
        """Initialize and load existing state from path."""
        self.path = Path(path)
        self.max_recent = max_recent
        self._state = self._load()

    def _load(self) -> ClientState:
        if not self.path.exists():
            return ClientState()
        try:
            with open(self.path, encoding="utf-8") as f:
                data: Any = json.load(f)
            return ClientState.model_validate(data)
        except (OSError, ValueError, ValidationError) as e:
            logger.error(f"Error loading client state from {self.path}: {e}")
            return ClientState()

    def _save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(self._state.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            logger.error(f"Error saving client state to {self.path}: {e}")

    def is_favorite(self, platform_id: int) -> bool:
        """Check whether the station with this primary platform id is a favorite."""
        return any(f.rbl == platform_id for f in self._state.favorites)

    def toggle_favorite(self, station: Station) -> bool:
        """Add or remove a favorite. Returns True if the station is now a favorite."""
        platform_id = station.primary_platform_id
        if self.is_favorite(platform_id):
            self._state.favorites = [f for f in self._state.favorites if f.rbl != platform_id]
            now_favorite = False
        else:
            self._state.favorites.append(SavedStation.from_station(station))
            now_favorite = True
        self._save()
        return now_favorite

    def get_favorites(self) -> list[Station]:
        """Return favorites in the order they were added."""
        return [f.to_station() for f in self._state.favorites]

    def record_recent(self, station: Station) -> None:
        """Move the station to the front of the recent searches."""
        entry = SavedStation.from_station(station, timestamp=int(time.time() * 1000))
        others = [r for r in self._state.recent if r.rbl != station.primary_platform_id]
        self._state.recent = [entry, *others][: self.max_recent]
        self._save()

    def get_recent(self) -> list[Station]:
        """Return recently viewed stations, most recent first."""
        return [r.to_station() for r in self._state.recent]
