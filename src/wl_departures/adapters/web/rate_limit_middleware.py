"""Per-client rate limiting for the edge proxy, using throttled-py."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from throttled import RateLimiterType, Throttled, rate_limiter, store

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER_SECONDS = 60.0


def extract_client_ip(request: Request) -> str:
    """Client IP of a request, preferring the first X-Forwarded-For entry."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()
        if client_ip:
            return client_ip

    if request.client and request.client.host:
        return request.client.host

    logger.warning("Could not determine client IP, using 'unknown'")
    return "unknown"


def retry_after_seconds(result: Any) -> float:
    """Seconds until the client may retry, read from a throttled-py result."""
    state = getattr(result, "state", None)
    retry_after = getattr(state, "retry_after", None)
    if retry_after is None:
        retry_after = getattr(result, "retry_after", None)
    try:
        return float(retry_after) if retry_after is not None else DEFAULT_RETRY_AFTER_SECONDS
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER_SECONDS


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Token-bucket limit per client IP.

    Rejected requests get a 429 JSON body with CORS headers, so browser
    callers can read the error like any other proxy failure.
    """

    def __init__(self, app: Callable, requests_per_minute: int = 100) -> None:
        """Initialize rate limiting middleware.

        Args:
            app: The ASGI application to wrap.
            requests_per_minute: Requests allowed per client IP per minute.
        """
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.quota = rate_limiter.per_min(requests_per_minute, burst=requests_per_minute)
        self.rate_limiter_store = store.MemoryStore()
        logger.info(f"Rate limiting enabled: {requests_per_minute} requests per minute per IP")

    def _rejection(self, client_ip: str, retry_after: float) -> Response:
        logger.warning(f"Rate limit exceeded for IP {client_ip}, retry after {retry_after} seconds")
        return JSONResponse(
            {"error": "Rate limit exceeded", "type": "rate_limited"},
            status_code=429,
            headers={
                "Retry-After": str(max(1, int(retry_after))),
                "Access-Control-Allow-Origin": "*",
            },
        )

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Reject the request if the client's bucket is empty."""
        # Preflight requests are never counted
        if request.method == "OPTIONS":
            return await call_next(request)

        client_ip = extract_client_ip(request)
        throttle = Throttled(
            key=client_ip,
            using=RateLimiterType.TOKEN_BUCKET.value,
            quota=self.quota,
            store=self.rate_limiter_store,
        )

        result = throttle.limit()
        if result.limited:
            return self._rejection(client_ip, retry_after_seconds(result))

        response: Response = await call_next(request)
        return response
