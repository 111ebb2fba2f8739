"""Configuration adapters."""

from wl_departures.adapters.config.app_config import DEFAULT_PROXIES, AppConfig

__all__ = ["DEFAULT_PROXIES", "AppConfig"]
