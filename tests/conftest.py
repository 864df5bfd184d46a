import sys
import threading
import time

import pytest

from lifecycle import ActorRegistry, ShutdownFlag
from models.config import PipelineConfig
from simulation import SimulatedWorld, spawn_traffic
from utils.logger import configure_logger
from models.enums import LogLevel


@pytest.fixture(autouse=True)
def plain_logger():
    """No ANSI colors in captured output."""
    configure_logger(LogLevel.DEBUG, use_colors=False)
    yield
    configure_logger(LogLevel.INFO, use_colors=True)


@pytest.fixture(autouse=True)
def restore_exception_hooks(monkeypatch):
    """FaultTrap.install() replaces process-wide hooks; put them back after each test."""
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setattr(threading, "excepthook", threading.excepthook)


@pytest.fixture
def world():
    """Simulated endpoint with 20 spawn points."""
    return SimulatedWorld(spawn_points=20)


@pytest.fixture
def flag():
    return ShutdownFlag()


@pytest.fixture
def registry():
    """Private registry (the process-wide instance is left untouched)."""
    return ActorRegistry()


@pytest.fixture
def spawned(world, registry):
    """10 actors spawned and published."""
    handles = spawn_traffic(world, 10, seed=7)
    registry.publish(handles)
    return handles


@pytest.fixture
def pipeline_config():
    return PipelineConfig(worker_count=2, cycle_interval=0.01, start_timeout=2.0)


class ExitRecorder:
    """Stands in for os._exit so an emergency shutdown does not kill pytest."""

    def __init__(self):
        self.codes = []

    def __call__(self, code: int) -> None:
        self.codes.append(code)


@pytest.fixture
def exit_recorder():
    return ExitRecorder()


def wait_until(predicate, timeout: float = 2.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()
