"""
Lifecycle protocols

IWorkerSubsystem is the only view the supervisor has of the traffic
pipeline. IShutdownHandler lets components take part in the stopping
sequence run by ShutdownCoordinator.
"""

from typing import Optional, Protocol


class IWorkerSubsystem(Protocol):
    """
    Opaque concurrent engine driving the spawned actors.

    No assumption is made about its internal threads. The supervisor only
    guarantees that stop() has returned before actors are destroyed.
    """

    def start(self) -> None:
        """Block until the subsystem is running. Raises on failure (fatal)."""
        ...

    def stop(self) -> None:
        """Block until fully stopped. Must be safe to call more than once."""
        ...


class IShutdownHandler(Protocol):
    """
    Protocol for components that take part in the stopping sequence.

    Example:
        class WorkerShutdownHandler:
            shutdown_timeout = None   # wait as long as it takes

            @property
            def shutdown_priority(self) -> int:
                return 100  # Shutdown first

            async def shutdown(self) -> None:
                await asyncio.to_thread(self.worker.stop)
    """

    shutdown_timeout: Optional[float]

    @property
    def shutdown_priority(self) -> int:
        """
        Higher priority shuts down earlier.
        """
        ...

    async def shutdown(self) -> None:
        """
        Called during coordinated shutdown.
        """
        ...
