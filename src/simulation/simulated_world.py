"""
In-process simulator used by --offline runs and by the test suite.

Behaves like a remote endpoint: actor state lives here, handles only carry
an id and ask the world whether they are alive. Failures can be injected to
exercise the connection-loss and reclamation-error paths.
"""

from __future__ import annotations

import random
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from models.enums import LogCategory
from models.errors import ConnectionLostError, ReclamationError
from utils.logger import get_logger

log = get_logger().for_category(LogCategory.SIMULATION)


@dataclass(frozen=True)
class SimulatedActor:
    """Handle to an actor living in a SimulatedWorld."""
    id: int
    spawn_index: int
    world: "SimulatedWorld"

    @property
    def is_alive(self) -> bool:
        return self.world.is_alive(self.id)


class SimulatedWorld:
    """
    Thread-safe fake simulator.

    Failure injection:
        world.disconnect()               -> liveness and remote calls raise ConnectionLostError
        world.fail_destroy_for({3, 7})   -> destroying those ids raises ReclamationError
        world.fail_spawn_after(5)        -> the 6th spawn raises ConnectionLostError

    Inspection:
        world.destroy_calls   -> ids in the order destroy was requested
        world.alive_ids()     -> ids still alive
    """

    def __init__(self, spawn_points: int = 200, host: str = "localhost", port: int = 2000):
        self.host = host
        self.port = port
        self.timeout: Optional[float] = None
        self._spawn_points = spawn_points
        self._lock = threading.Lock()
        self._next_id = 1
        self._alive: Dict[int, SimulatedActor] = {}
        self._occupied: Set[int] = set()
        self._speeds: Dict[int, float] = {}
        self._connected = True
        self._destroy_failures: Set[int] = set()
        self._spawn_budget: Optional[int] = None
        self.destroy_calls: List[int] = []
        self.liveness_queries = 0

    # ----------------------------------------------------------------------
    # FAILURE INJECTION
    # ----------------------------------------------------------------------
    def disconnect(self) -> None:
        with self._lock:
            self._connected = False
        log.debug("SimulatedWorld: connection dropped")

    def fail_destroy_for(self, actor_ids) -> None:
        with self._lock:
            self._destroy_failures.update(actor_ids)

    def fail_spawn_after(self, count: int) -> None:
        with self._lock:
            self._spawn_budget = count

    # ----------------------------------------------------------------------
    # INSPECTION
    # ----------------------------------------------------------------------
    def is_alive(self, actor_id: int) -> bool:
        with self._lock:
            self._check_connected()
            return actor_id in self._alive

    def alive_ids(self) -> List[int]:
        with self._lock:
            return list(self._alive)

    def speed_of(self, actor_id: int) -> Optional[float]:
        with self._lock:
            return self._speeds.get(actor_id)

    # ----------------------------------------------------------------------
    # ISimulationClient
    # ----------------------------------------------------------------------
    def set_timeout(self, seconds: float) -> None:
        self.timeout = seconds

    def spawn_point_count(self) -> int:
        return self._spawn_points

    def try_spawn_actor(self, spawn_index: int, rng: random.Random) -> Optional[SimulatedActor]:
        with self._lock:
            self._check_connected()
            if self._spawn_budget is not None:
                if self._spawn_budget <= 0:
                    raise ConnectionLostError("time-out while waiting for the simulator")
                self._spawn_budget -= 1
            if spawn_index in self._occupied:
                return None
            actor = SimulatedActor(id=self._next_id, spawn_index=spawn_index, world=self)
            self._next_id += 1
            self._alive[actor.id] = actor
            self._occupied.add(spawn_index)
            return actor

    def destroy_actor(self, handle: SimulatedActor) -> None:
        with self._lock:
            self.destroy_calls.append(handle.id)
            self._check_connected()
            if handle.id in self._destroy_failures:
                raise ReclamationError(handle.id, "simulator refused to destroy actor")
            actor = self._alive.pop(handle.id, None)
            if actor is None:
                raise ReclamationError(handle.id, "actor already destroyed")
            self._occupied.discard(actor.spawn_index)
            self._speeds.pop(handle.id, None)

    def query_liveness(self) -> None:
        with self._lock:
            self.liveness_queries += 1
            self._check_connected()

    def apply_target_speed(self, handle: SimulatedActor, speed_mps: float) -> None:
        with self._lock:
            self._check_connected()
            if handle.id not in self._alive:
                raise RuntimeError(f"Actor {handle.id} no longer exists")
            self._speeds[handle.id] = speed_mps

    def _check_connected(self) -> None:
        if not self._connected:
            raise ConnectionLostError(
                f"time-out of {self.timeout}s while waiting for the simulator at {self.host}:{self.port}"
            )
