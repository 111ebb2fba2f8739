"""Edge CORS proxy for the Wiener Linien monitor API.

Browsers cannot call the monitor API directly, so this small Starlette app
relays GET requests given as ?url=<encoded target>, retrying transient
upstream errors and adding permissive CORS headers.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import aiohttp
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from wl_departures.adapters.api_request_logger import log_api_request
from wl_departures.adapters.web.rate_limit_middleware import RateLimitMiddleware

if TYPE_CHECKING:
    from wl_departures.adapters.config.app_config import AppConfig

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({403, 500, 502, 503})

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


@dataclass(frozen=True)
class UpstreamResponse:
    """Upstream answer that is passed through to the caller."""

    status: int
    body: bytes
    attempts: int


class UpstreamError(Exception):
    """Every upstream attempt failed."""


class CorsProxyHandler:
    """Relays requests to the target URL with retries and CORS headers."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        max_attempts: int = 3,
        initial_backoff_ms: int = 200,
        timeout_seconds: float = 10.0,
        cache_max_age_seconds: int = 30,
        user_agent: str = "WannfahrmaLight/1.0",
    ) -> None:
        """Initialize the handler.

        Args:
            session: aiohttp session for upstream requests.
            max_attempts: Attempts per request, including the first.
            initial_backoff_ms: Pause before the second attempt; doubles per attempt.
            timeout_seconds: Timeout of a single attempt.
            cache_max_age_seconds: Cache lifetime announced on pass-through responses.
            user_agent: User-Agent sent upstream.
        """
        self.session = session
        self.max_attempts = max_attempts
        self.initial_backoff_ms = initial_backoff_ms
        self.timeout_seconds = timeout_seconds
        self.cache_max_age_seconds = cache_max_age_seconds
        self.user_agent = user_agent

    @classmethod
    def from_config(cls, config: "AppConfig", session: aiohttp.ClientSession) -> "CorsProxyHandler":
        """Create a handler with the proxy settings of the application config."""
        return cls(
            session,
            max_attempts=config.proxy_max_attempts,
            initial_backoff_ms=config.proxy_initial_backoff_ms,
            timeout_seconds=config.proxy_timeout_seconds,
            cache_max_age_seconds=config.proxy_cache_max_age_seconds,
            user_agent=config.proxy_user_agent,
        )

    def backoff_seconds(self, attempt: int) -> float:
        """Pause before the given attempt (0-based): 0, 200ms, 400ms, ..."""
        if attempt <= 0:
            return 0.0
        return self.initial_backoff_ms * 2 ** (attempt - 1) / 1000.0

    async def fetch_upstream(self, target_url: str) -> UpstreamResponse:
        """Fetch the target, retrying only 403/500/502/503 and transport errors.

        Raises:
            UpstreamError: If the last attempt failed.
        """
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        last_error = "All retry attempts failed"

        for attempt in range(self.max_attempts):
            delay = self.backoff_seconds(attempt)
            if delay > 0:
                await asyncio.sleep(delay)

            log_api_request("GET", target_url, headers=headers)
            try:
                async with self.session.get(target_url, headers=headers, timeout=timeout) as response:
                    if response.status not in RETRYABLE_STATUSES:
                        body = await response.read()
                        return UpstreamResponse(response.status, body, attempt + 1)
                    last_error = f"HTTP {response.status}"
            except (aiohttp.ClientError, TimeoutError) as e:
                last_error = str(e) or e.__class__.__name__

            logger.warning(
                f"Upstream attempt {attempt + 1}/{self.max_attempts} failed: {last_error}"
            )

        raise UpstreamError(last_error)

    async def handle(self, request: Request) -> Response:
        """Handle one proxy request."""
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=PREFLIGHT_HEADERS)

        target_url = request.query_params.get("url")
        if not target_url:
            return JSONResponse(
                {"error": "Missing url parameter"},
                status_code=400,
                headers={"Access-Control-Allow-Origin": "*"},
            )

        try:
            upstream = await self.fetch_upstream(target_url)
        except UpstreamError as e:
            logger.error(f"Proxy request to {target_url} failed: {e}")
            return JSONResponse(
                {"error": str(e), "type": "proxy_error"},
                status_code=500,
                headers={"Access-Control-Allow-Origin": "*"},
            )

        return Response(
            content=upstream.body,
            status_code=upstream.status,
            headers={
                "Content-Type": "application/json",
                "Access-Control-Allow-Origin": "*",
                "Cache-Control": f"public, max-age={self.cache_max_age_seconds}",
                "X-Proxy-Attempts": str(upstream.attempts),
            },
        )


def create_proxy_app(
    config: "AppConfig", session: aiohttp.ClientSession | None = None
) -> Starlette:
    """Build the proxy ASGI app.

    Without a session, one is opened on startup and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        if session is not None:
            yield
            return
        async with aiohttp.ClientSession() as owned_session:
            app.state.handler.session = owned_session
            yield

    # Session is replaced in lifespan when the app owns it
    handler = CorsProxyHandler.from_config(config, session)  # type: ignore[arg-type]

    middleware = []
    if config.proxy_rate_limit_per_minute > 0:
        middleware.append(
            Middleware(
                RateLimitMiddleware, requests_per_minute=config.proxy_rate_limit_per_minute
            )
        )

    app = Starlette(
        routes=[Route("/{path:path}", handler.handle, methods=ALL_METHODS)],
        middleware=middleware,
        lifespan=lifespan,
    )
    app.state.handler = handler
    return app
