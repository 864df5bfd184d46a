"""
Simulation endpoint protocols
=============================
Minimal contract the supervisor needs from a remote simulator.
Any backend (CARLA, the offline SimulatedWorld) implements these.
"""

import random
from typing import Optional, Protocol


class ActorHandle(Protocol):
    """
    One remote actor.

    `is_alive` is answered by the simulator, so it may be slow or raise
    when the connection is gone.
    """

    @property
    def id(self) -> int:
        ...

    @property
    def is_alive(self) -> bool:
        ...


class ISimulationClient(Protocol):
    """Remote calls consumed by spawning, reclamation, polling and the pipeline."""

    def set_timeout(self, seconds: float) -> None:
        ...

    def spawn_point_count(self) -> int:
        ...

    def try_spawn_actor(self, spawn_index: int, rng: random.Random) -> Optional[ActorHandle]:
        """Spawn at the given point. Returns None when the point is occupied."""
        ...

    def destroy_actor(self, handle: ActorHandle) -> None:
        """Raises ReclamationError (or a transport error) on failure."""
        ...

    def query_liveness(self) -> None:
        """Lightweight round trip. Raises ConnectionLostError when the simulator is gone."""
        ...

    def apply_target_speed(self, handle: ActorHandle, speed_mps: float) -> None:
        ...
