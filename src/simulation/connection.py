"""
Simulator connection factory

Picks the backend for the session: the in-process SimulatedWorld when
running offline, CARLA otherwise. Any failure here is a startup failure.
"""

from __future__ import annotations

from models.config import AppConfig
from models.enums import LogCategory
from models.errors import StartupError
from runtime.runtime_info import RuntimeInfo
from simulation.protocols import ISimulationClient
from simulation.simulated_world import SimulatedWorld
from utils.logger import get_logger

log = get_logger().for_category(LogCategory.SIMULATION)


def connect(config: AppConfig, offline: bool = False) -> ISimulationClient:
    """
    Establish the simulator connection.

    Raises:
        StartupError: simulator unreachable or CARLA client not installed
    """
    conn = config.connection

    if offline:
        log.info(
            "Using offline simulated world",
            spawn_points=config.simulation.spawn_points,
        )
        world = SimulatedWorld(
            spawn_points=config.simulation.spawn_points,
            host=conn.host,
            port=conn.port,
        )
        world.set_timeout(conn.startup_timeout)
        return world

    if not RuntimeInfo.has_carla():
        raise StartupError(
            "CARLA Python API is not installed (pip install '.[carla]') "
            "- use --offline to run against the simulated world"
        )

    from simulation.carla_client import CarlaSimulationClient

    log.info(f"Connecting to simulator at {conn.host}:{conn.port}...")
    try:
        return CarlaSimulationClient(conn.host, conn.port, conn.startup_timeout)
    except Exception as e:
        raise StartupError(f"Cannot reach simulator at {conn.host}:{conn.port}: {e}") from e
