from __future__ import annotations

import asyncio
from typing import Optional

from lifecycle.actor_registry import ActorRegistry, ReclamationReport
from lifecycle.protocols import IShutdownHandler
from models.enums import LogCategory, ReclamationOrigin
from simulation.protocols import ISimulationClient
from utils.logger import get_logger

log = get_logger().for_category(LogCategory.SHUTDOWN)


class ActorReclamationHandler(IShutdownHandler):
    """
    Graceful release of every spawned actor.

    Goes through the registry's reclamation gate, so it becomes a no-op if
    the fault trap already ran an emergency pass.

    Priority: 10 (runs last, after the pipeline stopped)
    """

    shutdown_timeout = None

    def __init__(self, registry: ActorRegistry, client: ISimulationClient):
        self.registry = registry
        self.client = client
        self.report: Optional[ReclamationReport] = None

    @property
    def shutdown_priority(self) -> int:
        return 10

    async def shutdown(self) -> None:
        self.report = await asyncio.to_thread(
            self.registry.reclaim, self.client, ReclamationOrigin.GRACEFUL
        )
        if self.report is None:
            log.warn("Actors were already released by an emergency shutdown")
