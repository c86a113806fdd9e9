"""
Messaging collaborator seen by the replication protocol.

The real peer-to-peer transport belongs to the host; EventBusTransport binds a
peer to an InMemoryEventBus so several peers can share one process (tests,
local tooling).
"""

from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

from supply_economy.event_bus import InMemoryEventBus, SubscriptionHandle

from .messages import EconomyMessage

MessageHandler = Callable[[EconomyMessage], Awaitable[Any]]


class MessageTransport(Protocol):
    async def broadcast(self, message: EconomyMessage) -> None:
        """Fire-and-forget delivery to every other peer."""
        ...

    async def register(self, handler: MessageHandler) -> None:
        """Route inbound messages to handler."""
        ...

    def stats(self) -> Dict[str, Any]:
        """Delivery counters for diagnostics; may be empty."""
        ...


class EventBusTransport:
    def __init__(self, bus: InMemoryEventBus):
        self.bus = bus
        self._handle: Optional[SubscriptionHandle] = None

    async def broadcast(self, message: EconomyMessage) -> None:
        await self.bus.publish(message)

    async def register(self, handler: MessageHandler) -> None:
        if self._handle is not None:
            await self.bus.unsubscribe(self._handle)
        self._handle = await self.bus.subscribe(EconomyMessage, handler)

    def stats(self) -> Dict[str, Any]:
        return self.bus.get_stats()
