from __future__ import annotations

import asyncio

from lifecycle.protocols import IShutdownHandler, IWorkerSubsystem
from models.enums import LogCategory
from utils.logger import get_logger

log = get_logger().for_category(LogCategory.SHUTDOWN)


class WorkerShutdownHandler(IShutdownHandler):
    """
    Stops the traffic pipeline.

    Runs BEFORE actor reclamation so no pipeline thread is still driving an
    actor when it is destroyed. No timeout: reclamation must not start
    while stop() is in flight.

    Priority: 100 (runs first)
    """

    shutdown_timeout = None

    def __init__(self, worker: IWorkerSubsystem):
        """
        Initialize worker shutdown handler.

        Args:
            worker: Pipeline (or any IWorkerSubsystem) to stop
        """
        self.worker = worker

    @property
    def shutdown_priority(self) -> int:
        """Pipeline stops first."""
        return 100

    async def shutdown(self) -> None:
        """Stop the pipeline and wait for its threads."""
        log.info("Stopping traffic pipeline...")
        await asyncio.to_thread(self.worker.stop)
        log.info("Traffic pipeline stopped")
