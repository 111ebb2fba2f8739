"""Wiener Linien real-time monitor repository adapter."""

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from wl_departures.adapters.wiener_linien_api.monitor_envelope import extract_monitors
from wl_departures.domain.ports.monitor_repository import MonitorRepository

if TYPE_CHECKING:
    from wl_departures.adapters.wiener_linien_api.proxy_registry import ProxyRegistry
    from wl_departures.domain.models.monitor import Monitor

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://www.wienerlinien.at"
MONITOR_PATH = "/ogd_realtime/monitor"


class WienerLinienMonitorRepository(MonitorRepository):
    """Fetches monitors of one platform (RBL) through the proxy registry."""

    def __init__(
        self, proxy_registry: "ProxyRegistry", api_base_url: str = DEFAULT_API_BASE_URL
    ) -> None:
        """Initialize with the proxy registry and the API base URL."""
        self.proxy_registry = proxy_registry
        self.api_base_url = api_base_url.rstrip("/")

    def monitor_url(self, platform_id: int) -> str:
        """Monitor endpoint URL for one platform."""
        return f"{self.api_base_url}{MONITOR_PATH}?rbl={platform_id}"

    async def get_monitors(self, platform_id: int) -> "list[Monitor] | None":
        """Get the monitors of one platform, or None if no usable data arrived."""
        payload = await self.proxy_registry.fetch_through_proxies(self.monitor_url(platform_id))
        if payload is None:
            return None
        try:
            monitors = extract_monitors(payload)
        except ValidationError as e:
            logger.warning(
                f"RBL {platform_id}: malformed monitor payload ({e.error_count()} error(s))"
            )
            return None
        logger.debug(f"RBL {platform_id}: {len(monitors)} monitor(s)")
        return monitors
