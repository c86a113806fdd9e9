import pytest

from supply_economy.core.outcome import OutcomeStatus
from supply_economy.handlers import EconomyHooks
from supply_economy.services.replication.messages import RequestSnapshot, Snapshot


@pytest.mark.asyncio
async def test_host_callbacks_never_raise(make_service, monkeypatch):
    service = make_service(is_authority=True)
    hooks = EconomyHooks(service)
    await hooks.on_save_loaded()

    async def boom():
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(service, "advance_one_day", boom)

    outcome = await hooks.on_day_started()

    assert outcome.status is OutcomeStatus.FAILED
    assert "disk on fire" in outcome.error


@pytest.mark.asyncio
async def test_failed_save_keeps_advanced_day(make_service, monkeypatch):
    service = make_service(is_authority=True)
    hooks = EconomyHooks(service)
    await hooks.on_save_loaded()
    version = service.state.version

    async def full_disk(key, data):
        raise OSError("no space left on device")

    monkeypatch.setattr(service.gate.backend, "write", full_disk)

    outcome = await hooks.on_day_started()

    assert outcome.status is OutcomeStatus.FAILED
    assert service.state.version == version + 1
    assert service.gate.saves == 1


@pytest.mark.asyncio
async def test_garbage_message_is_contained(make_service):
    hooks = EconomyHooks(make_service(is_authority=False))
    await hooks.on_save_loaded()

    outcome = await hooks.on_message_received(b'{"kind": "snapshot", "sender_id": 12}')

    assert outcome.status is OutcomeStatus.FAILED


@pytest.mark.asyncio
async def test_day_ending_ships_stacks(make_service):
    service = make_service(is_authority=True)
    hooks = EconomyHooks(service)
    await hooks.on_save_loaded()
    service.state.get_item("24").supply = 100
    service.state.get_item("613").supply = 100
    catalog = service.catalog

    outcome = await hooks.on_day_ending(
        [(catalog.item_ref("24"), 10), (catalog.item_ref("344", "613"), 4), (catalog.item_ref("500"), 1)]
    )

    assert outcome.ok
    assert outcome.value == 2
    assert service.state.get_item("24").supply == 110
    assert service.state.get_item("613").supply == 104


@pytest.mark.asyncio
async def test_lifecycle_hooks_drive_service(make_service):
    service = make_service(is_authority=True)
    hooks = EconomyHooks(service)

    assert (await hooks.on_save_loaded()).ok
    version = service.state.version
    assert (await hooks.on_day_started()).ok
    assert (await hooks.on_season_started()).ok
    assert (await hooks.on_year_started()).ok
    assert (await hooks.on_console_reset()).ok
    assert service.state.version == version + 5

    assert (await hooks.on_save_unloaded()).ok
    assert service.state is None


@pytest.mark.asyncio
async def test_message_hook_accepts_json(make_service, bus):
    host = make_service(is_authority=True)
    hooks = EconomyHooks(host)
    await hooks.on_save_loaded()
    seen = []
    await bus.subscribe(Snapshot, seen.append)

    outcome = await hooks.on_message_received(RequestSnapshot(sender_id="farmhand").model_dump_json())

    assert outcome.ok
    assert [e.version for e in seen] == [host.state.version]


@pytest.mark.asyncio
async def test_replica_hooks_skip_mutations(make_service):
    hooks = EconomyHooks(make_service(is_authority=False))
    await hooks.on_save_loaded()

    assert (await hooks.on_day_started()).status is OutcomeStatus.SKIPPED
    assert (await hooks.on_console_reset()).status is OutcomeStatus.SKIPPED
