import threading
from unittest.mock import MagicMock

import pytest

from lifecycle import ActorRegistry
from models.enums import ReclamationOrigin


def _handle(actor_id):
    handle = MagicMock()
    handle.id = actor_id
    handle.is_alive = True
    return handle


def test_instance_is_singleton():
    assert ActorRegistry.instance() is ActorRegistry.instance()


def test_publish_only_once(registry):
    registry.publish([_handle(1), _handle(2)])

    with pytest.raises(RuntimeError):
        registry.publish([_handle(3)])

    assert registry.ids() == (1, 2)


def test_publish_rejects_duplicate_ids(registry):
    with pytest.raises(ValueError):
        registry.publish([_handle(1), _handle(1)])
    assert not registry.is_published


def test_for_each_keeps_going_after_failures(registry):
    registry.publish([_handle(i) for i in range(1, 6)])
    visited = []

    def visit(handle):
        visited.append(handle.id)
        if handle.id in (2, 4):
            raise RuntimeError("boom")

    failures = registry.for_each(visit)

    assert visited == [1, 2, 3, 4, 5]
    assert set(failures) == {2, 4}


def test_reclaim_destroys_in_spawn_order(world, registry, spawned):
    report = registry.reclaim(world, ReclamationOrigin.GRACEFUL)

    assert world.destroy_calls == [h.id for h in spawned]
    assert world.alive_ids() == []
    assert report.destroyed == 10
    assert report.failures == {}


def test_reclaim_runs_at_most_once(world, registry, spawned):
    first = registry.reclaim(world, ReclamationOrigin.GRACEFUL)
    second = registry.reclaim(world, ReclamationOrigin.EMERGENCY)

    assert first is not None
    assert second is None
    assert len(world.destroy_calls) == 10
    assert registry.gate.holder is ReclamationOrigin.GRACEFUL


def test_reclaim_continues_past_destroy_failures(world, registry, spawned):
    broken = spawned[2].id
    world.fail_destroy_for({broken})

    report = registry.reclaim(world, ReclamationOrigin.GRACEFUL)

    assert list(report.failures) == [broken]
    assert report.destroyed == 9
    assert len(world.destroy_calls) == 10
    assert world.alive_ids() == [broken]


def test_reclaim_skips_dead_actors(world, registry, spawned):
    world.destroy_actor(spawned[0])
    world.destroy_calls.clear()

    report = registry.reclaim(world, ReclamationOrigin.GRACEFUL)

    assert report.skipped == 1
    assert report.destroyed == 9
    assert spawned[0].id not in world.destroy_calls


def test_reclaim_attempts_destroy_when_liveness_unknown(world, registry, spawned):
    world.disconnect()

    report = registry.reclaim(world, ReclamationOrigin.GRACEFUL)

    assert world.destroy_calls == [h.id for h in spawned]
    assert len(report.failures) == 10


def test_concurrent_graceful_and_emergency_passes(world, registry, spawned):
    barrier = threading.Barrier(2)
    reports = {}

    def reclaim(origin):
        barrier.wait()
        reports[origin] = registry.reclaim(world, origin)

    threads = [
        threading.Thread(target=reclaim, args=(origin,))
        for origin in (ReclamationOrigin.GRACEFUL, ReclamationOrigin.EMERGENCY)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    completed = [r for r in reports.values() if r is not None]
    assert len(completed) == 1
    assert sorted(world.destroy_calls) == sorted(h.id for h in spawned)
    assert len(set(world.destroy_calls)) == len(world.destroy_calls)
