"""
In-process message fabric shared by economy peers running in one process.

Peers subscribe with EconomyMessage (or a subclass) and every peer sees every
broadcast, its own included; filtering by sender is left to the receiver.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, MutableMapping, Tuple, Union

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Awaitable[None]]
Selector = Union[type, str]
SubscriptionHandle = Tuple[Selector, Handler]


class InMemoryEventBus:
    """
    Delivers each published message to every matching subscriber and waits
    for all of them. A subscriber that raises is logged and counted; the others
    still receive the message.

    A selector is a message class (subclasses match) or a class name.
    """

    def __init__(self) -> None:
        self._subscribers: MutableMapping[Selector, List[Handler]] = {}
        self._events_published: int = 0
        self._handler_errors: int = 0

    async def publish(self, event: Any) -> None:
        self._events_published += 1
        handlers = self._matching_handlers(event, type(event).__name__)
        if handlers:
            await asyncio.gather(*(self._safe_invoke(h, event) for h in handlers))

    async def subscribe(self, event_selector: Selector, handler: Any) -> SubscriptionHandle:
        """Returns the handle to pass to unsubscribe(). Plain callables are accepted too."""
        if not callable(handler):
            raise TypeError("handler must be callable")
        if not isinstance(event_selector, (type, str)):
            raise TypeError(
                f"Unsupported event selector type: {type(event_selector)}. Use type or str."
            )
        async_handler = self._wrap_handler(handler)
        self._subscribers.setdefault(event_selector, []).append(async_handler)
        return (event_selector, async_handler)

    async def unsubscribe(self, handle: SubscriptionHandle) -> None:
        selector, handler = handle
        handlers = self._subscribers.get(selector, [])
        if handler in handlers:
            handlers.remove(handler)
        if not handlers:
            self._subscribers.pop(selector, None)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "events_published": self._events_published,
            "handler_errors": self._handler_errors,
            "subscribers": sum(len(v) for v in self._subscribers.values()),
        }

    # Internals

    def _matching_handlers(self, event: Any, event_type: str) -> List[Handler]:
        matched: List[Handler] = []
        for selector, handlers in self._subscribers.items():
            if isinstance(selector, str):
                if selector == event_type:
                    matched.extend(handlers)
            elif isinstance(event, selector):
                matched.extend(handlers)
        return matched

    @staticmethod
    def _wrap_handler(handler: Any) -> Handler:
        if inspect.iscoroutinefunction(handler):
            return handler

        async def _shim(event: Any) -> None:
            result = handler(event)
            if inspect.isawaitable(result):
                await result

        return _shim

    async def _safe_invoke(self, handler: Handler, event: Any) -> None:
        try:
            await handler(event)
        except Exception as e:
            self._handler_errors += 1
            logger.error(
                "Event handler failed for %s: %s", type(event).__name__, e, exc_info=True
            )
