"""Client state adapters."""

from wl_departures.adapters.client_state.json_client_state_store import (
    MAX_RECENT_SEARCHES,
    JsonClientStateStore,
)

__all__ = ["MAX_RECENT_SEARCHES", "JsonClientStateStore"]
