"""Batched monitor fetcher."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from wl_departures.domain.models.load_progress import LoadProgress

if TYPE_CHECKING:
    from wl_departures.domain.contracts.progress_reporter import ProgressReporterProtocol
    from wl_departures.domain.models.monitor import Monitor
    from wl_departures.domain.ports.monitor_repository import MonitorRepository

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5
DEFAULT_BATCH_DELAY_MS = 300
DEFAULT_MAX_PLATFORM_IDS = 15


@dataclass(frozen=True)
class MonitorFetchResult:
    """Monitors of all fetched platforms, flattened in fetch order."""

    monitors: list[Monitor]
    requested: int
    succeeded: int


class BatchedMonitorFetcher:
    """Fetches monitors for many platforms in sequential, concurrent batches.

    At most batch_size requests are in flight at a time: members of one batch
    run concurrently, batches run one after another with a delay in between.
    """

    def __init__(
        self,
        monitor_repository: MonitorRepository,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay_ms: int = DEFAULT_BATCH_DELAY_MS,
        max_platform_ids: int = DEFAULT_MAX_PLATFORM_IDS,
        progress_reporter: ProgressReporterProtocol | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            monitor_repository: Source of per-platform monitors.
            batch_size: Platforms fetched concurrently per batch.
            batch_delay_ms: Pause between two batches in milliseconds.
            max_platform_ids: Platforms beyond this many are ignored.
            progress_reporter: Receives progress of user-visible loads.
        """
        self.monitor_repository = monitor_repository
        self.batch_size = batch_size
        self.batch_delay_ms = batch_delay_ms
        self.max_platform_ids = max_platform_ids
        self.progress_reporter = progress_reporter

    def plan_batches(self, platform_ids: list[int] | tuple[int, ...]) -> list[list[int]]:
        """Deduplicate and cap the platform list, then split it into consecutive batches."""
        unique = list(dict.fromkeys(platform_ids))
        capped = unique[: self.max_platform_ids]
        if len(unique) > len(capped):
            logger.info(
                f"Ignoring {len(unique) - len(capped)} platform(s) beyond "
                f"the limit of {self.max_platform_ids}"
            )
        return [capped[i : i + self.batch_size] for i in range(0, len(capped), self.batch_size)]

    async def fetch_monitors(
        self, platform_ids: list[int] | tuple[int, ...], silent: bool = False
    ) -> MonitorFetchResult:
        """Fetch and flatten monitors for the given platforms.

        A platform that cannot be fetched contributes nothing. Exceptions raised
        by the repository are not caught and abort the whole fetch; the other
        requests of the failing batch are cancelled first.

        Args:
            platform_ids: Platforms of one station, primary platform first.
            silent: Background refresh; suppresses progress reporting.

        Returns:
            Flattened monitors plus request/success counts.
        """
        batches = self.plan_batches(platform_ids)
        total = sum(len(batch) for batch in batches)
        results: list[list[Monitor] | None] = []

        for batch_index, batch in enumerate(batches):
            if not silent:
                logger.debug(
                    f"Loading batch {batch_index + 1}/{len(batches)}: platforms {batch}"
                )

            tasks = [
                asyncio.create_task(self.monitor_repository.get_monitors(platform_id))
                for platform_id in batch
            ]
            try:
                batch_results = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
            results.extend(batch_results)

            if not silent and self.progress_reporter is not None:
                self.progress_reporter.report(
                    LoadProgress(
                        processed=len(results),
                        total=total,
                        succeeded=sum(1 for r in results if r is not None),
                        batch_number=batch_index + 1,
                        total_batches=len(batches),
                    )
                )

            # Delay between batches (except after the last one)
            if batch_index < len(batches) - 1 and self.batch_delay_ms > 0:
                await asyncio.sleep(self.batch_delay_ms / 1000.0)

        monitors = [monitor for result in results if result is not None for monitor in result]
        succeeded = sum(1 for r in results if r is not None)
        if not silent:
            logger.info(
                f"Fetched {len(monitors)} monitor(s) from {succeeded}/{total} platform(s) "
                f"in {len(batches)} batch(es)"
            )
        return MonitorFetchResult(monitors=monitors, requested=total, succeeded=succeeded)
