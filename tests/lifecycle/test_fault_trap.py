import asyncio
import sys
import threading

import pytest

from lifecycle import FaultTrap
from models.enums import ReclamationOrigin, ShutdownReason


@pytest.fixture
def trap(flag, registry, world, exit_recorder):
    trap = FaultTrap(flag, registry, world, exit_fn=exit_recorder)
    yield trap
    trap.uninstall()


def test_fault_without_shutdown_triggers_emergency(trap, flag, world, spawned, exit_recorder):
    handled = trap.handle_fault(RuntimeError("planner crashed"), where="test")

    assert handled is True
    assert trap.triggered
    assert exit_recorder.codes == [1]
    assert flag.reason is ShutdownReason.FAULT
    assert sorted(world.destroy_calls) == sorted(h.id for h in spawned)
    assert trap.report.origin is ReclamationOrigin.EMERGENCY


def test_fault_during_shutdown_is_ignored(trap, flag, world, spawned, exit_recorder):
    flag.request(ShutdownReason.INTERRUPT)

    handled = trap.handle_fault(RuntimeError("late failure"), where="test")

    assert handled is False
    assert exit_recorder.codes == []
    assert world.destroy_calls == []
    assert len(world.alive_ids()) == 10


def test_second_fault_does_not_reclaim_again(trap, world, spawned, exit_recorder):
    trap.handle_fault(RuntimeError("first"), where="test")
    trap.handle_fault(RuntimeError("second"), where="test")

    assert exit_recorder.codes == [1]
    assert len(world.destroy_calls) == 10


def test_emergency_skipped_when_graceful_pass_already_ran(trap, registry, world, spawned, exit_recorder):
    registry.reclaim(world, ReclamationOrigin.GRACEFUL)

    trap.handle_fault(RuntimeError("after graceful"), where="test")

    assert trap.report is None
    assert len(world.destroy_calls) == 10


def test_thread_exception_reaches_trap(trap, world, spawned, exit_recorder):
    trap.install()

    def crash():
        raise ValueError("stage failure")

    worker = threading.Thread(target=crash, name="pipeline-stage-0")
    worker.start()
    worker.join()

    assert exit_recorder.codes == [1]
    assert len(world.destroy_calls) == 10


def test_thread_system_exit_is_not_a_fault(trap, world, spawned, exit_recorder):
    trap.install()

    worker = threading.Thread(target=sys.exit)
    worker.start()
    worker.join()

    assert exit_recorder.codes == []
    assert world.destroy_calls == []


def test_main_thread_hook(trap, world, spawned, exit_recorder):
    trap.install()

    sys.excepthook(KeyError, KeyError("missing"), None)

    assert exit_recorder.codes == [1]


def test_uninstall_restores_hooks(trap):
    previous_sys, previous_thread = sys.excepthook, threading.excepthook

    trap.install()
    assert sys.excepthook is not previous_sys
    trap.uninstall()

    assert sys.excepthook is previous_sys
    assert threading.excepthook is previous_thread


@pytest.mark.asyncio
async def test_loop_callback_exception_reaches_trap(trap, world, spawned, exit_recorder):
    loop = asyncio.get_running_loop()
    trap.watch_loop(loop)

    def broken_callback():
        raise RuntimeError("callback failure")

    try:
        loop.call_soon(broken_callback)
        await asyncio.sleep(0.01)
    finally:
        loop.set_exception_handler(None)

    assert exit_recorder.codes == [1]
    assert len(world.destroy_calls) == 10
