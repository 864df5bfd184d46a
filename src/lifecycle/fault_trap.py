"""
Fault trap: last line of defence against leaked simulator actors.

Hooks every place where Python reports an exception nobody handled:

- sys.excepthook        -> main thread
- threading.excepthook  -> pipeline threads and any other thread
- loop exception handler -> asyncio callbacks and orphaned tasks

If no shutdown is in progress, the fault is treated as a crash: the actors
are destroyed (through the registry's exactly-once gate) and the process
exits with status 1 without resuming normal operation.
"""

from __future__ import annotations

import asyncio
import os
import sys
import threading
import traceback
from typing import Callable, List, Optional

from lifecycle.actor_registry import ActorRegistry, ReclamationReport
from lifecycle.shutdown_flag import ShutdownFlag
from models.enums import EXIT_FAILURE, LogCategory, ReclamationOrigin, ShutdownReason
from simulation.protocols import ISimulationClient
from utils.logger import get_logger

log = get_logger().for_category(LogCategory.FAULT)


class FaultTrap:
    """
    Process-wide unhandled-exception handler.

    Example:
        trap = FaultTrap(flag, ActorRegistry.instance(), client)
        trap.install()                            # at process start
        trap.watch_loop(asyncio.get_running_loop())

    Args:
        flag: shared shutdown flag; a fault raised while it is already set
              belongs to a shutdown in progress and is only logged
        registry: actors to release
        client: simulator endpoint used for destroy calls
        exit_fn: process terminator, os._exit by default (does not wait for
                 pipeline threads that may still be running)
    """

    def __init__(
        self,
        flag: ShutdownFlag,
        registry: ActorRegistry,
        client: ISimulationClient,
        exit_fn: Callable[[int], None] = os._exit,
    ):
        self._flag = flag
        self._registry = registry
        self._client = client
        self._exit_fn = exit_fn
        self._previous_sys_hook = None
        self._previous_thread_hook = None
        self._installed = False
        self.report: Optional[ReclamationReport] = None
        self.triggered = False

    # ----------------------------------------------------------------------
    # INSTALLATION
    # ----------------------------------------------------------------------
    def install(self) -> None:
        if self._installed:
            return
        self._previous_sys_hook = sys.excepthook
        self._previous_thread_hook = threading.excepthook
        sys.excepthook = self._on_main_thread_exception
        threading.excepthook = self._on_thread_exception
        self._installed = True
        log.debug("Fault trap installed (sys, threading)")

    def watch_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Route unhandled asyncio callback/task errors to the trap."""
        loop.set_exception_handler(self._on_loop_exception)

    def uninstall(self) -> None:
        if not self._installed:
            return
        sys.excepthook = self._previous_sys_hook
        threading.excepthook = self._previous_thread_hook
        self._installed = False

    # ----------------------------------------------------------------------
    # HOOKS
    # ----------------------------------------------------------------------
    def _on_main_thread_exception(self, exc_type, exc_value, exc_tb) -> None:
        self.handle_fault(exc_value, where="main thread")

    def _on_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        if issubclass(args.exc_type, SystemExit):
            return
        name = args.thread.name if args.thread is not None else "unknown thread"
        self.handle_fault(args.exc_value, where=f"thread {name}")

    def _on_loop_exception(self, loop: asyncio.AbstractEventLoop, context: dict) -> None:
        exc = context.get("exception")
        if exc is None or isinstance(exc, asyncio.CancelledError):
            loop.default_exception_handler(context)
            return
        self.handle_fault(exc, where=f"event loop ({context.get('message', 'callback')})")

    # ----------------------------------------------------------------------
    # FAULT HANDLING
    # ----------------------------------------------------------------------
    def handle_fault(self, exc: Optional[BaseException], where: str) -> bool:
        """
        React to an unhandled exception.

        Returns:
            True if an emergency shutdown was performed (exit_fn was called),
            False if a shutdown was already in progress
        """
        log.error(
            f"Unhandled {type(exc).__name__} in {where}: {exc}",
            details=_format_traceback(exc),
        )

        if not self._flag.request(ShutdownReason.FAULT):
            log.warn(
                "Shutdown already in progress, leaving actor cleanup to it",
                reason=self._flag.reason.name,
            )
            return False

        self.triggered = True
        log.error("TrafficManager encountered a problem!")
        self.report = self._registry.reclaim(self._client, ReclamationOrigin.EMERGENCY)
        log.error("Emergency shutdown complete, exiting", exit_code=EXIT_FAILURE)
        self._exit_fn(EXIT_FAILURE)
        return True


def _format_traceback(exc: Optional[BaseException]) -> List[str]:
    if exc is None:
        return []
    lines = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return [line.rstrip() for chunk in lines for line in chunk.splitlines() if line.strip()]
