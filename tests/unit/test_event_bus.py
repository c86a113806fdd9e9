import pytest

from supply_economy.event_bus import InMemoryEventBus
from supply_economy.services.replication.messages import EconomyMessage, RequestSnapshot, SupplyDelta


@pytest.mark.asyncio
async def test_class_selector_matches_subclasses():
    bus = InMemoryEventBus()
    seen = []

    async def handler(event):
        seen.append(event)

    await bus.subscribe(EconomyMessage, handler)
    await bus.publish(RequestSnapshot(sender_id="a"))
    await bus.publish(SupplyDelta(sender_id="a", item_id="24", amount=1, version=1))
    await bus.publish("not a message")

    assert [type(e).__name__ for e in seen] == ["RequestSnapshot", "SupplyDelta"]


@pytest.mark.asyncio
async def test_string_selector_and_sync_handler():
    bus = InMemoryEventBus()
    seen = []

    await bus.subscribe("SupplyDelta", seen.append)
    await bus.publish(RequestSnapshot(sender_id="a"))
    await bus.publish(SupplyDelta(sender_id="a", item_id="24", amount=1, version=1))

    assert len(seen) == 1


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_others():
    bus = InMemoryEventBus()
    seen = []

    async def broken(event):
        raise ValueError("bad handler")

    await bus.subscribe(EconomyMessage, broken)
    await bus.subscribe(EconomyMessage, seen.append)
    await bus.publish(RequestSnapshot(sender_id="a"))

    assert len(seen) == 1
    assert bus.get_stats()["handler_errors"] == 1


@pytest.mark.asyncio
async def test_unsubscribe():
    bus = InMemoryEventBus()
    seen = []

    handle = await bus.subscribe(EconomyMessage, seen.append)
    await bus.unsubscribe(handle)
    await bus.publish(RequestSnapshot(sender_id="a"))

    assert seen == []
    assert bus.get_stats()["subscribers"] == 0


@pytest.mark.asyncio
async def test_stats_count_published_events():
    bus = InMemoryEventBus()
    await bus.subscribe("Snapshot", lambda event: None)

    for version in (1, 2, 3):
        await bus.publish(SupplyDelta(sender_id="a", item_id="24", amount=1, version=version))

    assert bus.get_stats() == {"events_published": 3, "handler_errors": 0, "subscribers": 1}


@pytest.mark.asyncio
async def test_subscribe_rejects_bad_arguments():
    bus = InMemoryEventBus()
    with pytest.raises(TypeError):
        await bus.subscribe(EconomyMessage, "not callable")
    with pytest.raises(TypeError):
        await bus.subscribe(42, print)
