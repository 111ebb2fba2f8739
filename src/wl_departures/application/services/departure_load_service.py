"""Departure load orchestration."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from wl_departures.domain.models.departure_load_result import DepartureLoadResult, LoadStatus
from wl_departures.domain.models.error_details import ErrorDetails

if TYPE_CHECKING:
    from wl_departures.application.services.batched_monitor_fetcher import BatchedMonitorFetcher
    from wl_departures.application.services.departure_grouping_service import (
        DepartureGroupingService,
    )
    from wl_departures.domain.models.station import Station
    from wl_departures.domain.ports import ClientStateStore, DisplayAdapter, StationRepository

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL_SECONDS = 10.0


class DepartureLoadService:
    """Loads departures for one station at a time and keeps them fresh.

    Owns the current station and the single background refresh task. Starting a
    user-visible load stops the refresh of the previous station; a successful
    user-visible load starts a new one.
    """

    def __init__(
        self,
        station_repository: StationRepository,
        monitor_fetcher: BatchedMonitorFetcher,
        grouping_service: DepartureGroupingService,
        client_state: ClientStateStore | None = None,
        display_adapter: DisplayAdapter | None = None,
        refresh_interval_seconds: float = DEFAULT_REFRESH_INTERVAL_SECONDS,
    ) -> None:
        """Initialize the load service.

        Args:
            station_repository: Canonical station list used to complete partial records.
            monitor_fetcher: Batched fetcher for platform monitors.
            grouping_service: Merge/deduplicate/group engine.
            client_state: Optional store for favorites and recent searches.
            display_adapter: Receives results of background refreshes.
            refresh_interval_seconds: Pause between background refreshes.
        """
        self.station_repository = station_repository
        self.monitor_fetcher = monitor_fetcher
        self.grouping_service = grouping_service
        self.client_state = client_state
        self.display_adapter = display_adapter
        self.refresh_interval_seconds = refresh_interval_seconds
        self.current_station: Station | None = None
        self._refresh_task: asyncio.Task | None = None
        self._background_loads: set[asyncio.Task] = set()

    @property
    def is_auto_refreshing(self) -> bool:
        """True while a background refresh task is scheduled."""
        return self._refresh_task is not None and not self._refresh_task.done()

    def resolve_station(self, station: Station) -> Station:
        """Return the canonical record for a possibly partial station.

        Stations saved earlier (e.g. favorites) may predate additional platform
        ids; the in-memory station list is the source of truth.
        """
        return self.station_repository.find_by_primary_id(station.primary_platform_id) or station

    def is_favorite(self, station: Station) -> bool:
        """Check whether a station is a favorite."""
        if self.client_state is None:
            return False
        return self.client_state.is_favorite(station.primary_platform_id)

    async def load_departures(self, station: Station, silent: bool = False) -> DepartureLoadResult:
        """Load and group departures for a station.

        Never raises for fetch problems: total failure is reported as NO_DATA and
        unexpected errors as FAILED (which also stops the background refresh).

        Args:
            station: Station to load, possibly a partial record.
            silent: Background refresh; no progress, no recent-search entry,
                no change to the refresh schedule.
        """
        if not silent:
            self.stop_auto_refresh()
            self.current_station = station

        try:
            full_station = self.resolve_station(station)
            if not silent:
                logger.info(
                    f"Loading departures for {full_station.name} from "
                    f"{len(full_station.platform_ids)} platform(s): "
                    f"{', '.join(str(p) for p in full_station.platform_ids)}"
                )

            fetch_result = await self.monitor_fetcher.fetch_monitors(
                full_station.platform_ids, silent=silent
            )

            if not silent and self.client_state is not None:
                self.client_state.record_recent(full_station)

            if not fetch_result.monitors:
                logger.warning(f"No departure data available for {full_station.name}")
                return DepartureLoadResult(
                    status=LoadStatus.NO_DATA,
                    station=full_station,
                    platforms_requested=fetch_result.requested,
                    platforms_succeeded=fetch_result.succeeded,
                    silent=silent,
                )

            groups = self.grouping_service.build_groups(fetch_result.monitors, full_station.name)

            if not silent:
                self.start_auto_refresh(full_station)

            return DepartureLoadResult(
                status=LoadStatus.LOADED if groups else LoadStatus.NO_DEPARTURES,
                station=full_station,
                groups=tuple(groups),
                platforms_requested=fetch_result.requested,
                platforms_succeeded=fetch_result.succeeded,
                silent=silent,
            )
        except Exception as e:
            logger.error(f"Failed to load departures for {station.name}: {e}", exc_info=True)
            # A late background failure must not stop the refresh of a newer station
            if not silent or station == self.current_station:
                self.stop_auto_refresh()
            return DepartureLoadResult(
                status=LoadStatus.FAILED,
                station=station,
                error=ErrorDetails.from_exception(e),
                silent=silent,
            )

    def start_auto_refresh(self, station: Station) -> None:
        """Replace any running background refresh with one for this station."""
        self.stop_auto_refresh()
        self.current_station = station
        self._refresh_task = asyncio.create_task(self._refresh_loop())
        logger.info(f"Auto-refresh started ({self.refresh_interval_seconds:g}s interval)")

    def stop_auto_refresh(self) -> None:
        """Stop scheduling background refreshes.

        A refresh already in flight still completes, but its result is dropped.
        """
        if self._refresh_task is not None:
            if not self._refresh_task.done():
                self._refresh_task.cancel()
                logger.info("Auto-refresh stopped")
            self._refresh_task = None

    async def close(self) -> None:
        """Stop the background refresh and wait for its task to finish."""
        task = self._refresh_task
        self.stop_auto_refresh()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _publish(self, result: DepartureLoadResult) -> None:
        """Forward a background result to the display adapter."""
        if self.display_adapter is None:
            return
        try:
            await self.display_adapter.display_result(result)
        except Exception as e:
            # Keep refreshing even if one display update fails
            logger.error(f"Error displaying refreshed departures: {e}", exc_info=True)

    async def _refresh_loop(self) -> None:
        """Main background refresh loop."""
        try:
            while True:
                await asyncio.sleep(self.refresh_interval_seconds)
                station = self.current_station
                if station is None:
                    return
                logger.debug(f"Auto-refreshing departures for {station.name}")
                # Shielded so that stopping the refresh never aborts a fetch mid-flight
                load = asyncio.ensure_future(self.load_departures(station, silent=True))
                self._background_loads.add(load)
                load.add_done_callback(self._background_loads.discard)
                result = await asyncio.shield(load)
                await self._publish(result)
        except asyncio.CancelledError:
            logger.debug("Auto-refresh loop cancelled")
            raise
