"""Wiener Linien monitor API adapter."""

from wl_departures.adapters.wiener_linien_api.monitor_envelope import (
    DataEnvelope,
    MessageEnvelope,
    extract_monitors,
)
from wl_departures.adapters.wiener_linien_api.monitor_repository import (
    WienerLinienMonitorRepository,
)
from wl_departures.adapters.wiener_linien_api.proxy_registry import (
    ProxyRegistry,
    build_proxy_url,
    encode_uri_component,
)

__all__ = [
    "DataEnvelope",
    "MessageEnvelope",
    "ProxyRegistry",
    "WienerLinienMonitorRepository",
    "build_proxy_url",
    "encode_uri_component",
    "extract_monitors",
]
