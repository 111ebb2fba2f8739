"""Tests for the edge CORS proxy."""

import time
from typing import Any

import aiohttp
import pytest
from starlette.testclient import TestClient

from tests.test_proxy_registry import FakeResponse, RaisingContext
from wl_departures.adapters.config import AppConfig
from wl_departures.adapters.web import CorsProxyHandler, create_proxy_app

TARGET = "https://www.wienerlinien.at/ogd_realtime/monitor?rbl=4116"
BODY = {"data": {"monitors": []}}


class SequenceSession:
    """Session answering successive requests from a list."""

    def __init__(self, answers: list[FakeResponse | BaseException]) -> None:
        """Initialize with the answers in request order."""
        self.answers = list(answers)
        self.requests: list[dict[str, Any]] = []

    def get(self, url: str, headers: dict[str, str] | None = None, **kwargs: Any) -> Any:
        """Return the next answer."""
        self.requests.append({"url": url, "headers": dict(headers or {}), **kwargs})
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            return RaisingContext(answer)
        return answer


def make_client(session: SequenceSession, **overrides: Any) -> TestClient:
    """Test client for a proxy app using the given session."""
    config = AppConfig.for_testing(**{"proxy_rate_limit_per_minute": 0, **overrides})
    return TestClient(create_proxy_app(config, session))  # type: ignore[arg-type]


class TestCorsProxy:
    """Behaviour of the proxy endpoint."""

    def test_when_options_then_preflight_headers_without_body(self) -> None:
        """Given a preflight request, when handled, then permissive CORS headers are sent."""
        session = SequenceSession([])
        with make_client(session) as client:
            response = client.options("/")

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert response.headers["Access-Control-Allow-Methods"] == "GET, POST, OPTIONS"
        assert response.headers["Access-Control-Allow-Headers"] == "Content-Type"
        assert session.requests == []

    def test_when_url_missing_then_400(self) -> None:
        """Given no url parameter, when handled, then a 400 JSON error is returned."""
        with make_client(SequenceSession([])) as client:
            response = client.get("/")

        assert response.status_code == 400
        assert response.json() == {"error": "Missing url parameter"}
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_when_upstream_ok_then_passed_through_with_headers(self) -> None:
        """Given a healthy upstream, when proxying, then body, status and headers pass through."""
        session = SequenceSession([FakeResponse(payload=BODY)])
        with make_client(session) as client:
            response = client.get("/", params={"url": TARGET})

        assert response.status_code == 200
        assert response.json() == BODY
        assert response.headers["Content-Type"] == "application/json"
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert response.headers["Cache-Control"] == "public, max-age=30"
        assert response.headers["X-Proxy-Attempts"] == "1"
        assert session.requests[0]["url"] == TARGET
        assert session.requests[0]["headers"] == {
            "User-Agent": "WannfahrmaLight/1.0",
            "Accept": "application/json",
        }
        assert isinstance(session.requests[0]["timeout"], aiohttp.ClientTimeout)
        assert session.requests[0]["timeout"].total == 10.0

    def test_when_503_twice_then_200_after_backoff(self) -> None:
        """Given 503, 503, 200, when proxying, then 200 after three attempts and 600ms backoff."""
        session = SequenceSession(
            [
                FakeResponse(status=503, payload={}),
                FakeResponse(status=503, payload={}),
                FakeResponse(payload=BODY),
            ]
        )
        with make_client(session) as client:
            started = time.monotonic()
            response = client.get("/", params={"url": TARGET})
            elapsed = time.monotonic() - started

        assert response.status_code == 200
        assert response.headers["X-Proxy-Attempts"] == "3"
        assert elapsed >= 0.59
        assert len(session.requests) == 3

    def test_when_non_retryable_error_then_passed_through_immediately(self) -> None:
        """Given a 404 upstream, when proxying, then it is returned after one attempt."""
        session = SequenceSession([FakeResponse(status=404, payload={"message": "nope"})])
        with make_client(session) as client:
            response = client.get("/", params={"url": TARGET})

        assert response.status_code == 404
        assert response.json() == {"message": "nope"}
        assert response.headers["X-Proxy-Attempts"] == "1"

    def test_when_all_attempts_fail_then_500_proxy_error(self) -> None:
        """Given only retryable failures, when proxying, then a 500 proxy_error results."""
        session = SequenceSession(
            [
                FakeResponse(status=502, payload={}),
                aiohttp.ClientConnectionError("reset"),
                FakeResponse(status=403, payload={}),
            ]
        )
        with make_client(session, proxy_initial_backoff_ms=1) as client:
            response = client.get("/", params={"url": TARGET})

        assert response.status_code == 500
        assert response.json() == {"error": "HTTP 403", "type": "proxy_error"}
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_when_last_attempt_raises_then_error_message_returned(self) -> None:
        """Given a transport error on the final attempt, when proxying, then its message is reported."""
        session = SequenceSession(
            [FakeResponse(status=500, payload={}), aiohttp.ClientConnectionError("reset")]
        )
        with make_client(session, proxy_max_attempts=2, proxy_initial_backoff_ms=1) as client:
            response = client.get("/", params={"url": TARGET})

        assert response.status_code == 500
        assert response.json() == {"error": "reset", "type": "proxy_error"}

    def test_when_rate_limit_exceeded_then_429(self) -> None:
        """Given a limit of 2 per minute, when sending three requests, then the third is rejected."""
        session = SequenceSession([FakeResponse(payload=BODY), FakeResponse(payload=BODY)])
        with make_client(session, proxy_rate_limit_per_minute=2) as client:
            first = client.get("/", params={"url": TARGET})
            second = client.get("/", params={"url": TARGET})
            third = client.get("/", params={"url": TARGET})

        assert [first.status_code, second.status_code] == [200, 200]
        assert third.status_code == 429
        assert "Retry-After" in third.headers
        assert third.headers["Access-Control-Allow-Origin"] == "*"


class TestBackoff:
    """Tests for the backoff schedule."""

    @pytest.mark.parametrize(("attempt", "expected"), [(0, 0.0), (1, 0.2), (2, 0.4), (3, 0.8)])
    def test_backoff_doubles_from_initial_delay(self, attempt: int, expected: float) -> None:
        """Given the default schedule, when asking for a delay, then it doubles per attempt."""
        handler = CorsProxyHandler(session=None)  # type: ignore[arg-type]

        assert handler.backoff_seconds(attempt) == pytest.approx(expected)
