"""
Shutdown coordinator that runs the stopping sequence of a session.

Executes the registered shutdown handlers in priority order with per-handler
timeouts and error isolation: one failing handler never prevents the next
one from running.
"""

import asyncio
from typing import List, Optional

from models.enums import LogCategory, ShutdownReason
from utils.logger import get_logger

log = get_logger().for_category(LogCategory.SHUTDOWN)

_USE_DEFAULT = object()


class ShutdownCoordinator:
    """
    Coordinates the STOPPING phase of a session.

    Maintains a list of shutdown handlers and executes them in priority order.
    A handler may define `shutdown_timeout` to override the coordinator
    default; None means wait until it finishes.

    Example:
        coordinator = ShutdownCoordinator()
        coordinator.register(WorkerShutdownHandler(pipeline))             # priority 100
        coordinator.register(ActorReclamationHandler(registry, client))   # priority 10

        await coordinator.shutdown_all(ShutdownReason.INTERRUPT)
    """

    def __init__(self, timeout_per_handler: Optional[float] = 30.0):
        """
        Initialize shutdown coordinator.

        Args:
            timeout_per_handler: Default timeout for each handler (seconds), None = unlimited
        """
        self._handlers: List = []
        self._timeout_per_handler = timeout_per_handler
        self.completed: List[str] = []
        self.failed: List[str] = []

    def register(self, handler) -> None:
        """
        Register a shutdown handler.

        Handler must have:
        - shutdown_priority property (int)
        - async shutdown() method

        Args:
            handler: Object implementing IShutdownHandler protocol
        """
        if not hasattr(handler, "shutdown_priority"):
            raise ValueError(f"Handler {handler} missing shutdown_priority property")
        if not hasattr(handler, "shutdown"):
            raise ValueError(f"Handler {handler} missing shutdown() method")

        self._handlers.append(handler)
        log.debug(f"Registered shutdown handler: {handler.__class__.__name__}")

    def _timeout_for(self, handler) -> Optional[float]:
        timeout = getattr(handler, "shutdown_timeout", _USE_DEFAULT)
        return self._timeout_per_handler if timeout is _USE_DEFAULT else timeout

    async def shutdown_all(self, reason: Optional[ShutdownReason] = None) -> None:
        """
        Execute all handlers in descending priority order.

        Timeouts and exceptions are logged; the sequence always reaches the
        last handler. Cancellation of the caller propagates.
        """
        log.info("🛑 Initiating shutdown sequence...")
        log.info(f"   Reason: {reason.name if reason else 'UNKNOWN'}")

        sorted_handlers = sorted(
            self._handlers, key=lambda h: h.shutdown_priority, reverse=True
        )

        for handler in sorted_handlers:
            handler_name = handler.__class__.__name__
            priority = handler.shutdown_priority
            timeout = self._timeout_for(handler)

            try:
                log.debug(f"Shutting down {handler_name} (priority={priority})...")

                await asyncio.wait_for(handler.shutdown(), timeout=timeout)

                self.completed.append(handler_name)
                log.debug(f"✓ {handler_name} shutdown complete")

            except asyncio.TimeoutError:
                self.failed.append(handler_name)
                log.error(f"⚠️  {handler_name} shutdown timeout ({timeout}s)")

            except asyncio.CancelledError:
                log.debug(f"{handler_name} shutdown was cancelled")
                raise

            except Exception as e:
                self.failed.append(handler_name)
                log.error(f"❌ Error shutting down {handler_name}: {e}", exc_info=True)

        if self.failed:
            log.warn(
                "Shutdown sequence finished with failures",
                completed=", ".join(self.completed) or "-",
                failed=", ".join(self.failed),
            )
        else:
            log.info("✓ Shutdown sequence complete", completed=", ".join(self.completed) or "-")
