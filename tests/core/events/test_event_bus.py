import pytest

from storage_telemetry.core.events.event_bus import DomainEventBus
from storage_telemetry.core.events.storage_events import StorageLoadUpdatedEvent
from storage_telemetry.models import StorageLoadSnapshot


@pytest.fixture
def event():
    return StorageLoadUpdatedEvent(snapshot=StorageLoadSnapshot())


@pytest.mark.asyncio
async def test_subscribed_handler_receives_event(event):
    bus = DomainEventBus()
    received = []

    async def handler(e):
        received.append(e)

    await bus.subscribe(StorageLoadUpdatedEvent, handler)
    await bus.publish(event)

    assert received == [event]
    assert event.event_id
    assert event.timestamp is not None


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_others(event):
    bus = DomainEventBus()
    received = []

    async def broken(e):
        raise RuntimeError("handler failed")

    async def working(e):
        received.append(e)

    await bus.subscribe(StorageLoadUpdatedEvent, broken)
    await bus.subscribe(StorageLoadUpdatedEvent, working)
    await bus.publish(event)

    assert received == [event]


@pytest.mark.asyncio
async def test_unsubscribed_handler_is_not_called(event):
    bus = DomainEventBus()
    received = []

    async def handler(e):
        received.append(e)

    await bus.subscribe(StorageLoadUpdatedEvent, handler)
    await bus.unsubscribe(StorageLoadUpdatedEvent, handler)
    await bus.publish(event)

    assert received == []


@pytest.mark.asyncio
async def test_publish_without_handlers(event):
    await DomainEventBus().publish(event)


@pytest.mark.asyncio
async def test_handler_count():
    bus = DomainEventBus()

    async def handler(e):
        pass

    assert bus.handler_count(StorageLoadUpdatedEvent) == 0
    await bus.subscribe(StorageLoadUpdatedEvent, handler)
    assert bus.handler_count(StorageLoadUpdatedEvent) == 1
