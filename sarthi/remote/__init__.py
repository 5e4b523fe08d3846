"""Remote suggestion backend: wire protocol, connection state machine and client."""

from sarthi.remote.client import RemoteSuggestionClient
from sarthi.remote.state import ConnectionPhase, ConnectionState, transition

__all__ = [
    "ConnectionPhase",
    "ConnectionState",
    "RemoteSuggestionClient",
    "transition",
]
