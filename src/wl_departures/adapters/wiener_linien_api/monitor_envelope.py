"""Monitor API response envelopes.

The monitor endpoint wraps its monitors in one of two shapes:

    {"data": {"monitors": [...]}}
    {"message": {"value": {"monitors": [...]}}}

Both are modelled explicitly and resolved by extract_monitors.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from wl_departures.domain.models.monitor import Monitor


class _Envelope(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class MonitorList(_Envelope):
    """Container holding the monitor array."""

    monitors: list[Monitor] = Field(default_factory=list)

    @field_validator("monitors", mode="before")
    @classmethod
    def default_monitors(cls, v: Any) -> Any:
        """Treat null monitors as empty."""
        return [] if v is None else v


class DataEnvelope(_Envelope):
    """Payload variant {"data": {"monitors": [...]}}."""

    data: MonitorList


class MessageValue(_Envelope):
    """Inner object of the message variant."""

    value: MonitorList


class MessageEnvelope(_Envelope):
    """Payload variant {"message": {"value": {"monitors": [...]}}}."""

    message: MessageValue


MonitorEnvelope = DataEnvelope | MessageEnvelope


def parse_envelope(payload: Any) -> MonitorEnvelope | None:
    """Identify the envelope variant of a payload.

    The data variant wins when it carries a monitor list; otherwise the message
    variant is used. Returns None when the payload has neither.

    Raises:
        ValidationError: If a recognised envelope holds malformed monitors.
    """
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("monitors"), list):
        return DataEnvelope.model_validate(payload)
    message = payload.get("message")
    if isinstance(message, dict) and isinstance(message.get("value"), dict):
        return MessageEnvelope.model_validate(payload)
    return None


def extract_monitors(payload: Any) -> list[Monitor]:
    """Return the monitors of a monitor API payload, or [] for unknown shapes."""
    envelope = parse_envelope(payload)
    if isinstance(envelope, DataEnvelope):
        return list(envelope.data.monitors)
    if isinstance(envelope, MessageEnvelope):
        return list(envelope.message.value.monitors)
    return []


__all__ = [
    "DataEnvelope",
    "MessageEnvelope",
    "MonitorEnvelope",
    "extract_monitors",
    "parse_envelope",
]
