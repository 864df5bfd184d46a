"""
Traffic spawning

Single-shot setup step that runs before the supervisor starts. Spawn points
are shuffled with a seeded RNG so a given seed reproduces the same layout.
"""

from __future__ import annotations

import random
from typing import List, Optional

from models.enums import LogCategory
from models.errors import StartupError
from simulation.protocols import ActorHandle, ISimulationClient
from utils.logger import get_logger

log = get_logger().for_category(LogCategory.SIMULATION)


def make_rng(seed: int) -> random.Random:
    """Negative seed means: seed from system entropy / clock."""
    return random.Random(seed if seed >= 0 else None)


def spawn_traffic(
    client: ISimulationClient,
    target_count: int,
    seed: int = -1,
    rng: Optional[random.Random] = None,
) -> List[ActorHandle]:
    """
    Spawn up to target_count actors on distinct spawn points.

    target_count == 0 fills every available spawn point. Occupied points are
    skipped; a shortfall is logged as a warning. If the simulator fails
    midway, actors spawned so far are destroyed before StartupError is raised.

    Returns:
        Handles in spawn order.
    """
    rng = rng or make_rng(seed)
    available = client.spawn_point_count()
    wanted = available if target_count == 0 else target_count

    indices = list(range(available))
    rng.shuffle(indices)

    spawned: List[ActorHandle] = []
    try:
        for index in indices:
            if len(spawned) >= wanted:
                break
            actor = client.try_spawn_actor(index, rng)
            if actor is not None:
                spawned.append(actor)
    except Exception as e:
        log.error(f"Spawning failed after {len(spawned)} actors: {e}")
        _discard(client, spawned)
        raise StartupError(f"Failed to spawn traffic: {e}") from e

    if len(spawned) < wanted:
        log.warn(
            "Spawned fewer actors than requested",
            requested=wanted,
            spawned=len(spawned),
            spawn_points=available,
        )
    else:
        log.info(f"Spawned {len(spawned)} actors")

    return spawned


def _discard(client: ISimulationClient, actors: List[ActorHandle]) -> None:
    for actor in actors:
        try:
            client.destroy_actor(actor)
        except Exception as e:
            log.error(f"Could not destroy actor {actor.id} after failed spawn: {e}")
