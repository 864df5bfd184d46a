import subprocess
import sys
import threading
from pathlib import Path

import pytest

import main_asyncio
from lifecycle import ActorRegistry, ShutdownFlag
from models.enums import ShutdownReason
from runtime import RuntimeInfo
from simulation import connect

from conftest import wait_until

CONFIG = """
supervisor:
  poll_interval: 0.05
pipeline:
  worker_count: 2
  cycle_interval: 0.01
simulation:
  spawn_points: 20
logging:
  level: DEBUG
  use_colors: false
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "traffic_manager.yaml"
    path.write_text(CONFIG, encoding="utf-8")
    return str(path)


@pytest.fixture
def captured(monkeypatch):
    """Expose the flag and world that run() creates internally."""
    seen = {}

    def make_flag():
        seen["flag"] = ShutdownFlag()
        return seen["flag"]

    def connect_and_keep(config, offline=False):
        seen["world"] = connect(config, offline=offline)
        return seen["world"]

    monkeypatch.setattr(main_asyncio, "ShutdownFlag", make_flag)
    monkeypatch.setattr(main_asyncio, "connect", connect_and_keep)
    return seen


class WhenPublished(threading.Thread):
    """
    Runs `action` once the registry is published.

    If publication never happens the session is interrupted anyway, so a
    broken wiring fails the test instead of leaving run() waiting forever.
    """

    def __init__(self, registry, captured, action, timeout=5.0):
        super().__init__(daemon=True)
        self._registry = registry
        self._captured = captured
        self._action = action
        self._timeout = timeout
        self.published = None

    def run(self):
        self.published = wait_until(lambda: self._registry.is_published, timeout=self._timeout)
        if self.published:
            self._action()
        else:
            wait_until(lambda: "flag" in self._captured, timeout=self._timeout)
            self._captured["flag"].request(ShutdownReason.INTERRUPT)


@pytest.fixture
def session_registry(monkeypatch):
    """Registry handed to run(); records which registry run_session actually received."""
    registry = ActorRegistry()
    registry.used = []
    original = main_asyncio.run_session

    async def spy(config, client, flag, used, fault_trap):
        registry.used.append(used)
        return await original(config, client, flag, used, fault_trap)

    monkeypatch.setattr(main_asyncio, "run_session", spy)
    return registry


def test_offline_session_interrupted(config_file, captured, session_registry):
    registry = session_registry
    helper = WhenPublished(registry, captured, lambda: captured["flag"].request(ShutdownReason.INTERRUPT))
    helper.start()

    exit_code = main_asyncio.run(["--offline", "--config", config_file, "-n", "10", "-s", "3"], registry=registry)
    helper.join(timeout=10.0)

    assert registry.used == [registry]
    assert helper.published is True
    world = captured["world"]
    assert exit_code == 0
    assert len(registry) == 10
    assert sorted(world.destroy_calls) == sorted(registry.ids())
    assert world.alive_ids() == []
    assert world.timeout == 2.0


def test_offline_session_simulator_lost(config_file, captured, session_registry):
    registry = session_registry
    helper = WhenPublished(registry, captured, lambda: captured["world"].disconnect())
    helper.start()

    exit_code = main_asyncio.run(["--offline", "--config", config_file, "-n", "5"], registry=registry)
    helper.join(timeout=10.0)

    assert registry.used == [registry]
    assert helper.published is True
    assert exit_code == 0
    assert captured["flag"].reason is ShutdownReason.CONNECTION_LOST
    assert sorted(captured["world"].destroy_calls) == sorted(registry.ids())


def test_empty_injected_registry_is_not_replaced(config_file, captured, session_registry):
    registry = session_registry
    assert len(registry) == 0
    helper = WhenPublished(registry, captured, lambda: captured["flag"].request(ShutdownReason.INTERRUPT))
    helper.start()

    main_asyncio.run(["--offline", "--config", config_file, "-n", "3"], registry=registry)
    helper.join(timeout=10.0)

    assert registry.used[0] is registry
    assert registry.used[0] is not ActorRegistry.instance()
    assert registry.is_published


CRASHING_SESSION = """
import sys
sys.path.insert(0, {src!r})

import main_asyncio
from traffic import TrafficPipeline


def crash(self, actor):
    raise RuntimeError("stage crashed")


TrafficPipeline._apply_target_speed = crash
main_asyncio.main()
"""


def test_stage_crash_exits_one_after_destroying_actors(config_file):
    src = str(Path(__file__).resolve().parent.parent / "src")

    result = subprocess.run(
        [sys.executable, "-c", CRASHING_SESSION.format(src=src),
         "--offline", "--config", config_file, "-n", "10", "-s", "3"],
        capture_output=True,
        text=True,
        encoding="utf-8",
        timeout=60,
    )

    assert result.returncode == 1
    assert "EMERGENCY: attempted=10, destroyed=10, skipped=0, failed=0" in result.stdout
    assert "Emergency shutdown complete" in result.stdout


def test_help_exits_zero():
    with pytest.raises(SystemExit) as exc_info:
        main_asyncio.run(["-h"], registry=ActorRegistry())
    assert exc_info.value.code == 0


def test_missing_carla_is_a_startup_failure(config_file, monkeypatch):
    monkeypatch.setattr(RuntimeInfo, "has_carla", staticmethod(lambda: False))

    assert main_asyncio.run(["--config", config_file], registry=ActorRegistry()) == 1


def test_pipeline_start_failure_exits_one(config_file, captured, monkeypatch):
    registry = ActorRegistry()

    def refuse(self):
        raise RuntimeError("no stage threads available")

    monkeypatch.setattr(main_asyncio.TrafficPipeline, "start", refuse)

    exit_code = main_asyncio.run(["--offline", "--config", config_file, "-n", "4"], registry=registry)

    assert exit_code == 1
    assert captured["flag"].reason is ShutdownReason.STARTUP_FAILED
    assert captured["world"].alive_ids() == []
