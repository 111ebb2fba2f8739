"""Proxy descriptor domain model."""

from pydantic import BaseModel, ConfigDict


class ProxyDescriptor(BaseModel):
    """A CORS proxy the monitor API can be reached through.

    An empty endpoint prefix means the API is requested directly.
    """

    model_config = ConfigDict(frozen=True)

    endpoint_prefix: str
    must_unwrap: bool = False  # Response is {"contents": "<json string>"}
    label: str
