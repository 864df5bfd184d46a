"""
Simulation endpoint
-------------------

Remote simulator interface, backends, and the spawning step.
"""

from .protocols import ActorHandle, ISimulationClient
from .simulated_world import SimulatedWorld, SimulatedActor
from .spawner import spawn_traffic, make_rng
from .connection import connect

__all__ = [
    "ActorHandle",
    "ISimulationClient",
    "SimulatedWorld",
    "SimulatedActor",
    "spawn_traffic",
    "make_rng",
    "connect",
]
