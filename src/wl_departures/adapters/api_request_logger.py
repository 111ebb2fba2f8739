"""Outbound request logging, enabled with WL_LOG_REQUESTS=true."""

import json
import logging
import os

logger = logging.getLogger(__name__)

_SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key"}


def should_log_requests() -> bool:
    """Check if request logging is enabled via the WL_LOG_REQUESTS environment variable."""
    return os.getenv("WL_LOG_REQUESTS", "").lower() == "true"


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Mask credentials in a header mapping."""
    return {k: "***REDACTED***" if k.lower() in _SENSITIVE_HEADERS else v for k, v in headers.items()}


def log_api_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    via: str | None = None,
) -> None:
    """Log an outbound request if WL_LOG_REQUESTS is enabled.

    Args:
        method: HTTP method.
        url: Full request URL, including any proxy prefix.
        headers: Request headers; credentials are redacted.
        via: Label of the proxy the request goes through.
    """
    if not should_log_requests():
        return

    log_parts = [f"{method} {url}"]
    if via:
        log_parts.append(f"Via: {via}")
    if headers:
        log_parts.append(f"Headers: {json.dumps(redact_headers(headers), indent=2)}")

    logger.info("API Request:\n" + "\n".join(log_parts))
