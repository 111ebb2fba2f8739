"""Tests for the failover proxy registry."""

import json
from collections.abc import Callable
from typing import Any

import aiohttp
import pytest

from wl_departures.adapters.wiener_linien_api.proxy_registry import (
    ProxyRegistry,
    build_proxy_url,
    encode_uri_component,
)
from wl_departures.domain.models import ProxyDescriptor

API_URL = "https://www.wienerlinien.at/ogd_realtime/monitor?rbl=4116"
MONITOR_PAYLOAD = {"data": {"monitors": []}}

PROXY_A = ProxyDescriptor(endpoint_prefix="https://a.example/?url=", label="A")
PROXY_B = ProxyDescriptor(endpoint_prefix="https://b.example/get?url=", must_unwrap=True, label="B")
PROXY_C = ProxyDescriptor(endpoint_prefix="https://c.example/?", label="C")


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse."""

    def __init__(
        self,
        status: int = 200,
        payload: Any = None,
        content_type: str = "application/json",
        body: bytes | None = None,
    ) -> None:
        """Initialize with status, JSON payload and content type."""
        self.status = status
        self.payload = payload
        self.headers = {"Content-Type": content_type}
        self.body = body if body is not None else json.dumps(payload).encode()

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *args: object) -> None:
        return None

    async def json(self, content_type: str | None = "application/json") -> Any:  # noqa: ARG002
        """Decode the body as JSON."""
        return json.loads(self.body)

    async def read(self) -> bytes:
        """Return the raw body."""
        return self.body


class RaisingContext:
    """Context manager raising on entry, like a failed aiohttp request."""

    def __init__(self, error: BaseException) -> None:
        self.error = error

    async def __aenter__(self) -> FakeResponse:
        raise self.error

    async def __aexit__(self, *args: object) -> None:
        return None


class FakeSession:
    """Session answering by URL prefix (or a callable) and recording requested URLs."""

    def __init__(
        self,
        routes: dict[str, FakeResponse | BaseException | Callable[[], Any]] | None = None,
    ) -> None:
        """Initialize with responses keyed by URL prefix."""
        self.routes = routes or {}
        self.requests: list[tuple[str, dict[str, str]]] = []

    def get(self, url: str, headers: dict[str, str] | None = None, **kwargs: Any) -> Any:  # noqa: ARG002
        """Return the response registered for the longest matching prefix."""
        self.requests.append((url, dict(headers or {})))
        matches = [prefix for prefix in self.routes if url.startswith(prefix)]
        if not matches:
            return RaisingContext(aiohttp.ClientConnectionError(f"no route for {url}"))
        answer = self.routes[max(matches, key=len)]
        if callable(answer) and not isinstance(answer, FakeResponse):
            answer = answer()
        if isinstance(answer, BaseException):
            return RaisingContext(answer)
        return answer

    @property
    def urls(self) -> list[str]:
        """Requested URLs in order."""
        return [url for url, _ in self.requests]


def wrapped(payload: Any) -> FakeResponse:
    """allorigins-style envelope around a payload."""
    return FakeResponse(payload={"contents": json.dumps(payload), "status": {"http_code": 200}})


class TestBuildProxyUrl:
    """Tests for proxy URL construction."""

    def test_when_prefix_present_then_target_is_fully_encoded(self) -> None:
        """Given a proxy prefix, when building, then the target URL is percent-encoded."""
        url = build_proxy_url(PROXY_A, API_URL)

        assert url == (
            "https://a.example/?url="
            "https%3A%2F%2Fwww.wienerlinien.at%2Fogd_realtime%2Fmonitor%3Frbl%3D4116"
        )

    def test_when_prefix_empty_then_target_used_directly(self) -> None:
        """Given an empty prefix, when building, then the target URL is used as-is."""
        direct = ProxyDescriptor(endpoint_prefix="", label="direct")

        assert build_proxy_url(direct, API_URL) == API_URL

    def test_encoding_keeps_uri_component_safe_characters(self) -> None:
        """Given characters encodeURIComponent keeps, when encoding, then they stay literal."""
        assert encode_uri_component("a-b_c.d!e~f*g'h(i)j k&l") == "a-b_c.d!e~f*g'h(i)j%20k%26l"


class TestFetchThroughProxies:
    """Tests for failover behaviour and the sticky cursor."""

    @pytest.mark.asyncio
    async def test_when_first_proxy_works_then_its_payload_returned(self) -> None:
        """Given a healthy first proxy, when fetching, then only it is used."""
        session = FakeSession({"https://a.example/": FakeResponse(payload=MONITOR_PAYLOAD)})
        registry = ProxyRegistry([PROXY_A, PROXY_B, PROXY_C], session)  # type: ignore[arg-type]

        payload = await registry.fetch_through_proxies(API_URL)

        assert payload == MONITOR_PAYLOAD
        assert len(session.requests) == 1
        assert session.requests[0][1]["Accept"] == "application/json"
        assert registry.current_index == 0

    @pytest.mark.asyncio
    async def test_when_proxy_returns_non_json_then_next_proxy_used_and_cursor_moves(self) -> None:
        """Given an HTML answer from A, when fetching, then B is used and becomes current."""
        session = FakeSession(
            {
                "https://a.example/": FakeResponse(content_type="text/html", body=b"<html>"),
                "https://b.example/": wrapped(MONITOR_PAYLOAD),
            }
        )
        registry = ProxyRegistry([PROXY_A, PROXY_B, PROXY_C], session)  # type: ignore[arg-type]

        payload = await registry.fetch_through_proxies(API_URL)

        assert payload == MONITOR_PAYLOAD
        assert registry.current_index == 1

    @pytest.mark.asyncio
    async def test_when_cursor_moved_then_next_call_starts_there(self) -> None:
        """Given a cursor on B, when fetching again, then A is not retried."""
        session = FakeSession(
            {
                "https://a.example/": FakeResponse(status=503, payload={}),
                "https://b.example/": wrapped(MONITOR_PAYLOAD),
            }
        )
        registry = ProxyRegistry([PROXY_A, PROXY_B, PROXY_C], session)  # type: ignore[arg-type]

        await registry.fetch_through_proxies(API_URL)
        await registry.fetch_through_proxies(API_URL)

        assert [url.split("/?")[0].split("/get")[0] for url in session.urls] == [
            "https://a.example",
            "https://b.example",
            "https://b.example",
        ]

    @pytest.mark.asyncio
    async def test_when_every_proxy_from_cursor_fails_then_none_and_cursor_kept(self) -> None:
        """Given every proxy failing, when fetching, then None is returned without rewinding."""
        session = FakeSession(
            {
                "https://a.example/": FakeResponse(payload=MONITOR_PAYLOAD),
                "https://b.example/": FakeResponse(status=500, payload={}),
                "https://c.example/": aiohttp.ClientConnectionError("refused"),
            }
        )
        registry = ProxyRegistry([PROXY_A, PROXY_B, PROXY_C], session)  # type: ignore[arg-type]
        registry.current_index = 1

        payload = await registry.fetch_through_proxies(API_URL)

        assert payload is None
        assert registry.current_index == 1
        assert not any(url.startswith("https://a.example/") for url in session.urls)

    @pytest.mark.asyncio
    async def test_when_unwrap_envelope_lacks_contents_then_failure(self) -> None:
        """Given an unwrapping proxy without contents, when fetching, then the next proxy is used."""
        session = FakeSession(
            {
                "https://b.example/": FakeResponse(payload={"status": {"http_code": 500}}),
                "https://c.example/": FakeResponse(payload=MONITOR_PAYLOAD),
            }
        )
        registry = ProxyRegistry([PROXY_B, PROXY_C], session)  # type: ignore[arg-type]

        payload = await registry.fetch_through_proxies(API_URL)

        assert payload == MONITOR_PAYLOAD
        assert registry.current_index == 1

    @pytest.mark.asyncio
    async def test_when_unwrapped_contents_not_json_then_failure(self) -> None:
        """Given contents that are not JSON, when fetching, then the proxy counts as failed."""
        session = FakeSession(
            {"https://b.example/": FakeResponse(payload={"contents": "<html>busy</html>"})}
        )
        registry = ProxyRegistry([PROXY_B], session)  # type: ignore[arg-type]

        assert await registry.fetch_through_proxies(API_URL) is None

    @pytest.mark.asyncio
    async def test_when_body_is_not_valid_json_then_failure(self) -> None:
        """Given a JSON content type with a broken body, when fetching, then None is returned."""
        session = FakeSession({"https://a.example/": FakeResponse(body=b"{not json")})
        registry = ProxyRegistry([PROXY_A], session)  # type: ignore[arg-type]

        assert await registry.fetch_through_proxies(API_URL) is None

    @pytest.mark.asyncio
    async def test_when_request_times_out_then_next_proxy_used(self) -> None:
        """Given a timeout on A, when fetching, then C answers."""
        session = FakeSession(
            {
                "https://a.example/": TimeoutError(),
                "https://c.example/": FakeResponse(payload=MONITOR_PAYLOAD),
            }
        )
        registry = ProxyRegistry([PROXY_A, PROXY_C], session)  # type: ignore[arg-type]

        assert await registry.fetch_through_proxies(API_URL) == MONITOR_PAYLOAD

    @pytest.mark.asyncio
    async def test_when_unexpected_error_then_it_propagates(self) -> None:
        """Given an unexpected exception, when fetching, then it is not swallowed."""
        session = FakeSession({"https://a.example/": RuntimeError("bug")})
        registry = ProxyRegistry([PROXY_A, PROXY_C], session)  # type: ignore[arg-type]

        with pytest.raises(RuntimeError, match="bug"):
            await registry.fetch_through_proxies(API_URL)

    def test_when_no_proxies_then_rejected(self) -> None:
        """Given an empty proxy list, when creating the registry, then ValueError is raised."""
        with pytest.raises(ValueError, match="At least one proxy"):
            ProxyRegistry([], FakeSession())  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_when_request_logging_enabled_then_request_logged(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Given WL_LOG_REQUESTS=true, when fetching, then the proxied request is logged."""
        monkeypatch.setenv("WL_LOG_REQUESTS", "true")
        session = FakeSession({"https://a.example/": FakeResponse(payload=MONITOR_PAYLOAD)})
        registry = ProxyRegistry([PROXY_A], session)  # type: ignore[arg-type]

        with caplog.at_level("INFO", logger="wl_departures.adapters.api_request_logger"):
            await registry.fetch_through_proxies(API_URL)

        assert "GET https://a.example/?url=" in caplog.text
        assert "Via: A" in caplog.text
