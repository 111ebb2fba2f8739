"""12-factor configuration adapter using environment variables and TOML config."""

from pathlib import Path
from typing import Any

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]  # Fallback for older Python

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from wl_departures.domain.models.proxy_descriptor import ProxyDescriptor

DEFAULT_PROXIES = [
    ProxyDescriptor(
        endpoint_prefix="https://wannfahrma-cors-proxy.stefan-radakovits.workers.dev/?url=",
        must_unwrap=False,
        label="Cloudflare Worker",
    ),
    ProxyDescriptor(
        endpoint_prefix="https://api.allorigins.win/get?url=",
        must_unwrap=True,
        label="allorigins.win",
    ),
    ProxyDescriptor(
        endpoint_prefix="https://corsproxy.io/?",
        must_unwrap=False,
        label="corsproxy.io",
    ),
]

# TOML [section] -> fields it may override
_TOML_SECTIONS = {
    "api": ("api_base_url", "stations_file", "state_file", "refresh_interval_seconds"),
    "batching": (
        "batch_size",
        "batch_delay_ms",
        "max_platform_ids",
        "max_departures_per_group",
    ),
    "proxy_server": (
        "host",
        "port",
        "proxy_max_attempts",
        "proxy_initial_backoff_ms",
        "proxy_timeout_seconds",
        "proxy_cache_max_age_seconds",
        "proxy_user_agent",
        "proxy_rate_limit_per_minute",
    ),
}


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Wiener Linien API configuration
    api_base_url: str = Field(
        default="https://www.wienerlinien.at", description="Base URL of the monitor API"
    )
    proxies: list[ProxyDescriptor] = Field(
        default_factory=lambda: list(DEFAULT_PROXIES),
        description="CORS proxies in failover order; an empty prefix requests the API directly",
    )

    # Station data and client state
    stations_file: str = Field(
        default="data/stations_full.json", description="Path to the static station dataset"
    )
    state_file: str = Field(
        default=".wl_departures_state.json",
        description="Path to the JSON file holding favorites and recent searches",
    )

    # Batching configuration
    batch_size: int = Field(default=5, description="Platforms fetched concurrently per batch")
    batch_delay_ms: int = Field(default=300, description="Pause between batches in milliseconds")
    max_platform_ids: int = Field(
        default=15, description="Maximum number of platforms fetched per station"
    )
    max_departures_per_group: int = Field(
        default=3, description="Departures shown per line/platform/destination group"
    )
    refresh_interval_seconds: float = Field(
        default=10.0, description="Interval between background refreshes in seconds"
    )

    # Edge proxy server configuration
    host: str = Field(default="0.0.0.0", description="Host to bind the proxy server to")
    port: int = Field(default=8787, description="Port to bind the proxy server to")
    proxy_max_attempts: int = Field(default=3, description="Upstream attempts per request")
    proxy_initial_backoff_ms: int = Field(
        default=200, description="Backoff before the second attempt; doubles afterwards"
    )
    proxy_timeout_seconds: float = Field(default=10.0, description="Per-attempt upstream timeout")
    proxy_cache_max_age_seconds: int = Field(
        default=30, description="Cache-Control max-age of pass-through responses"
    )
    proxy_user_agent: str = Field(
        default="WannfahrmaLight/1.0", description="User-Agent sent to the upstream API"
    )
    proxy_rate_limit_per_minute: int = Field(
        default=100,
        description="Maximum requests per client IP per minute (0 disables rate limiting)",
    )

    # Optional TOML config file
    config_file: str | None = Field(
        default=None,
        description="Path to a TOML file overriding API, batching and proxy settings",
    )

    @field_validator("batch_size", "max_platform_ids", "max_departures_per_group", "proxy_max_attempts")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate counts are at least 1."""
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @field_validator("batch_delay_ms", "proxy_initial_backoff_ms", "proxy_rate_limit_per_minute")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        """Validate delays and limits are not negative."""
        if v < 0:
            raise ValueError("value must not be negative")
        return v

    @field_validator("refresh_interval_seconds", "proxy_timeout_seconds")
    @classmethod
    def validate_positive_seconds(cls, v: float) -> float:
        """Validate durations are positive."""
        if v <= 0:
            raise ValueError("duration must be positive")
        return v

    @classmethod
    def for_testing(cls, **overrides: Any) -> "AppConfig":
        """Create a configuration that ignores .env files."""
        return cls(_env_file=None, **overrides)  # type: ignore[call-arg]

    def load_toml_overrides(self) -> dict[str, Any]:
        """Load config_file and apply its settings to this configuration.

        Supported tables are [api], [batching] and [proxy_server]; [[proxies]]
        entries replace the proxy list. Does nothing when config_file is unset.

        Returns:
            The parsed TOML data.
        """
        if not self.config_file:
            return {}

        config_path = Path(self.config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)

        updates: dict[str, Any] = {}
        for section, fields in _TOML_SECTIONS.items():
            table = toml_data.get(section, {})
            if not isinstance(table, dict):
                raise ValueError(f"TOML config '{section}' must be a table")
            for name in fields:
                if name in table:
                    updates[name] = table[name]

        if "proxies" in toml_data:
            proxies = toml_data["proxies"]
            if not isinstance(proxies, list) or not proxies:
                raise ValueError("TOML config 'proxies' must be a non-empty list")
            updates["proxies"] = [ProxyDescriptor.model_validate(p) for p in proxies]

        # Re-validate through the model so TOML values get the same checks as env vars
        validated = self.model_validate({**self.model_dump(), **updates})
        for name in updates:
            setattr(self, name, getattr(validated, name))

        return toml_data
