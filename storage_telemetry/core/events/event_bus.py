"""
Event bus between the poll loop and its consumers (push channel, diagnostics).
"""
import asyncio
import logging
from collections import defaultdict
from typing import Awaitable, Callable, DefaultDict, List, Type

from storage_telemetry.core.events.domain_event import DomainEvent

EventHandler = Callable[[DomainEvent], Awaitable[None]]


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or getattr(handler, "__name__", repr(handler))


class DomainEventBus:
    """
    Asynchronous publish/subscribe bus keyed on the exact event class.

    Handlers for one event run concurrently; a failing handler is logged and
    never stops the others or the publisher.
    """

    def __init__(self) -> None:
        self._subscriptions: DefaultDict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        async with self._lock:
            self._subscriptions[event_type].append(handler)
        logging.debug(f"{_handler_name(handler)} subscribed to {event_type.__name__}")

    async def unsubscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        async with self._lock:
            subscribed = self._subscriptions.get(event_type, [])
            if handler in subscribed:
                subscribed.remove(handler)

    def handler_count(self, event_type: Type[DomainEvent]) -> int:
        return len(self._subscriptions.get(event_type, []))

    async def publish(self, event: DomainEvent) -> None:
        handlers = tuple(self._subscriptions.get(type(event), ()))
        if not handlers:
            logging.debug(f"{event.name} published without subscribers")
            return

        await asyncio.gather(*(self._deliver(handler, event) for handler in handlers))

    @staticmethod
    async def _deliver(handler: EventHandler, event: DomainEvent) -> None:
        try:
            await handler(event)
        except Exception as e:
            logging.error(
                f"Subscriber {_handler_name(handler)} failed on {event.name} ({event.event_id}): {e}",
                exc_info=True,
            )
