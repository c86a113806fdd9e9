from .messages import EconomyMessage, RequestSnapshot, Snapshot, SupplyDelta, parse_message
from .protocol import PeerPhase, ReplicationProtocol
from .transport import EventBusTransport, MessageTransport

__all__ = [
    "EconomyMessage",
    "EventBusTransport",
    "MessageTransport",
    "PeerPhase",
    "ReplicationProtocol",
    "RequestSnapshot",
    "Snapshot",
    "SupplyDelta",
    "parse_message",
]
