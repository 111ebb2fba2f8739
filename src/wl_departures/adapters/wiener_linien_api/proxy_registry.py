"""Failover fetch through an ordered list of CORS proxies."""

import json
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import aiohttp

from wl_departures.adapters.api_request_logger import log_api_request

if TYPE_CHECKING:
    from aiohttp import ClientSession

    from wl_departures.domain.models.proxy_descriptor import ProxyDescriptor

logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves untouched besides alphanumerics and "-_.~"
_URI_COMPONENT_SAFE = "!~*'()"


class ProxyUnusableError(Exception):
    """A proxy answered, but not with a usable JSON document."""


def encode_uri_component(value: str) -> str:
    """Percent-encode a full URL so it can be passed as a query parameter value."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def build_proxy_url(proxy: "ProxyDescriptor", api_url: str) -> str:
    """URL to request for api_url through the given proxy."""
    if not proxy.endpoint_prefix:
        return api_url
    return f"{proxy.endpoint_prefix}{encode_uri_component(api_url)}"


class ProxyRegistry:
    """Ordered proxies with a sticky cursor on the last proxy that worked.

    Every fetch scans forward from the cursor and never rewinds within one
    call. A success moves the cursor to the proxy that answered; failures
    leave it where it is, so the next call starts from the last-known-good
    proxy again.
    """

    def __init__(self, proxies: "list[ProxyDescriptor]", session: "ClientSession") -> None:
        """Initialize the registry.

        Args:
            proxies: Proxies in failover order.
            session: Shared aiohttp session used for every request.
        """
        if not proxies:
            raise ValueError("At least one proxy is required")
        self.proxies = list(proxies)
        self.session = session
        self.current_index = 0

    async def fetch_through_proxies(self, api_url: str) -> Any | None:
        """Fetch a JSON document, falling over to later proxies on failure.

        Returns:
            The parsed payload, or None if every proxy from the cursor to the
            end of the list failed.
        """
        start_index = self.current_index
        for proxy_index in range(start_index, len(self.proxies)):
            proxy = self.proxies[proxy_index]
            try:
                payload = await self._fetch_via(proxy, api_url)
            except (aiohttp.ClientError, TimeoutError, ProxyUnusableError, ValueError) as e:
                logger.warning(f"Proxy {proxy.label} failed: {e}")
                continue

            if proxy_index != self.current_index:
                logger.info(
                    f"Switching proxy from {self.proxies[self.current_index].label} "
                    f"to {proxy.label}"
                )
                self.current_index = proxy_index
            return payload

        logger.warning(f"All proxies failed for {api_url}")
        return None

    async def _fetch_via(self, proxy: "ProxyDescriptor", api_url: str) -> Any:
        url = build_proxy_url(proxy, api_url)
        headers = {"Accept": "application/json"}
        log_api_request("GET", url, headers=headers, via=proxy.label)

        async with self.session.get(url, headers=headers) as response:
            if not 200 <= response.status < 300:
                raise ProxyUnusableError(f"HTTP {response.status}")

            content_type = response.headers.get("Content-Type", "")
            if "application/json" not in content_type.lower():
                raise ProxyUnusableError(f"unexpected content type '{content_type}'")

            payload = await response.json(content_type=None)

        if not proxy.must_unwrap:
            return payload

        contents = payload.get("contents") if isinstance(payload, dict) else None
        if not isinstance(contents, str):
            raise ProxyUnusableError("response envelope has no contents")
        return json.loads(contents)
