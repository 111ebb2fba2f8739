"""Web adapters: the edge CORS proxy."""

from wl_departures.adapters.web.cors_proxy import CorsProxyHandler, create_proxy_app
from wl_departures.adapters.web.rate_limit_middleware import RateLimitMiddleware

__all__ = ["CorsProxyHandler", "RateLimitMiddleware", "create_proxy_app"]
