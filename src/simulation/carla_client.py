"""
CARLA backend for the simulation endpoint.

Requires the `carla` Python API (install the `carla` extra). The CARLA
client reports time-outs and lost connections as RuntimeError; they are
translated to ConnectionLostError here so the supervisor can tell them apart
from genuine faults.
"""

from __future__ import annotations

import random
from typing import List, Optional

import carla

from models.enums import LogCategory
from models.errors import ConnectionLostError, ReclamationError
from utils.logger import get_logger

log = get_logger().for_category(LogCategory.SIMULATION)


class CarlaActorHandle:
    """Wraps a carla.Actor; is_alive is a remote query."""

    def __init__(self, actor: "carla.Actor"):
        self.actor = actor

    @property
    def id(self) -> int:
        return self.actor.id

    @property
    def is_alive(self) -> bool:
        try:
            return self.actor.is_alive
        except RuntimeError as e:
            raise ConnectionLostError(str(e)) from e


class CarlaSimulationClient:
    """ISimulationClient over carla.Client / carla.World."""

    def __init__(self, host: str, port: int, timeout: float, vehicle_filter: str = "vehicle.*"):
        self._client = carla.Client(host, port)
        self._client.set_timeout(timeout)
        try:
            self._world = self._client.get_world()
            self._spawn_points: List["carla.Transform"] = self._world.get_map().get_spawn_points()
            self._blueprints = list(self._world.get_blueprint_library().filter(vehicle_filter))
        except RuntimeError as e:
            raise ConnectionLostError(str(e)) from e

        log.info(
            "Connected to CARLA",
            host=host,
            port=port,
            spawn_points=len(self._spawn_points),
            blueprints=len(self._blueprints),
        )

    def set_timeout(self, seconds: float) -> None:
        self._client.set_timeout(seconds)

    def spawn_point_count(self) -> int:
        return len(self._spawn_points)

    def try_spawn_actor(self, spawn_index: int, rng: random.Random) -> Optional[CarlaActorHandle]:
        blueprint = rng.choice(self._blueprints)
        if blueprint.has_attribute("color"):
            color = rng.choice(blueprint.get_attribute("color").recommended_values)
            blueprint.set_attribute("color", color)
        try:
            actor = self._world.try_spawn_actor(blueprint, self._spawn_points[spawn_index])
        except RuntimeError as e:
            raise ConnectionLostError(str(e)) from e
        return CarlaActorHandle(actor) if actor is not None else None

    def destroy_actor(self, handle: CarlaActorHandle) -> None:
        try:
            destroyed = handle.actor.destroy()
        except RuntimeError as e:
            raise ConnectionLostError(str(e)) from e
        if not destroyed:
            raise ReclamationError(handle.id, "simulator refused to destroy actor")

    def query_liveness(self) -> None:
        try:
            self._world.get_settings()
        except RuntimeError as e:
            raise ConnectionLostError(str(e)) from e

    def apply_target_speed(self, handle: CarlaActorHandle, speed_mps: float) -> None:
        try:
            handle.actor.enable_constant_velocity(carla.Vector3D(speed_mps, 0.0, 0.0))
        except RuntimeError as e:
            raise ConnectionLostError(str(e)) from e
