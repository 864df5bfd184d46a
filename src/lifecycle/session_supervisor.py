"""
Session supervisor: owns the control loop of one traffic session.

    NOT_STARTED ──start()──▶ RUNNING ──flag──▶ STOPPING ──▶ STOPPED
         │                                        ▲
         └──────────── start failed ──────────────┘

Termination sources all converge on the shutdown flag:
- SignalRelay sets it on SIGINT/SIGTERM
- the poll loop sets it when the liveness query reports a lost connection
- the FaultTrap sets it before an emergency exit

The flag is only observed after the poll sleep, so shutdown latency is
bounded by the poll interval.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

from lifecycle.actor_registry import ReclamationReport
from lifecycle.handlers import ActorReclamationHandler, WorkerShutdownHandler
from lifecycle.session import Session
from lifecycle.shutdown_coordinator import ShutdownCoordinator
from lifecycle.shutdown_flag import ShutdownFlag
from models.enums import EXIT_OK, LogCategory, SessionState, ShutdownReason
from models.errors import ConnectionLostError, StartupError
from utils.logger import get_logger

log = get_logger().for_category(LogCategory.LIFECYCLE)


class SessionSupervisor:
    """
    Drives a Session through its lifecycle.

    Example:
        session = Session(registry=registry, worker=pipeline, client=client)
        supervisor = SessionSupervisor(session, flag, poll_interval=1.0)
        exit_code = await supervisor.run()
    """

    def __init__(
        self,
        session: Session,
        flag: ShutdownFlag,
        poll_interval: float = 1.0,
        coordinator: Optional[ShutdownCoordinator] = None,
    ):
        self.session = session
        self._flag = flag
        self._poll_interval = poll_interval
        self._coordinator = coordinator or ShutdownCoordinator()
        self._reclamation = ActorReclamationHandler(session.registry, session.client)
        self._coordinator.register(WorkerShutdownHandler(session.worker))
        self._coordinator.register(self._reclamation)
        self.stopping_entered_at: Optional[float] = None

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def report(self) -> Optional[ReclamationReport]:
        """Graceful reclamation report (None if not run or pre-empted by the fault trap)."""
        return self._reclamation.report

    async def run(self) -> int:
        """
        Run the session to completion.

        Returns:
            EXIT_OK after a graceful stop (interrupt or connection loss)

        Raises:
            StartupError: the pipeline could not be started (actors are released first)
            RuntimeError: registry not published
        """
        if not self.session.registry.is_published:
            raise RuntimeError("Actor registry must be published before the session starts")

        await self._start()

        try:
            await self._poll_until_shutdown()
        except asyncio.CancelledError:
            self._flag.request(ShutdownReason.INTERRUPT)
            await self._stop()
            raise

        await self._stop()

        if self._flag.reason is ShutdownReason.CONNECTION_LOST:
            log.info("TrafficManager stopped after losing the simulator")
        else:
            log.info("TrafficManager stopped by user")
        return EXIT_OK

    # ----------------------------------------------------------------------
    # PHASES
    # ----------------------------------------------------------------------
    async def _start(self) -> None:
        try:
            await asyncio.to_thread(self.session.worker.start)
        except Exception as e:
            log.error(f"Failed to start traffic pipeline: {e}")
            self._flag.request(ShutdownReason.STARTUP_FAILED)
            await self._stop()
            raise StartupError(f"Traffic pipeline failed to start: {e}") from e

        self.session.transition(SessionState.RUNNING)
        log.info("TrafficManager started", actors=len(self.session.registry))

    async def _poll_until_shutdown(self) -> None:
        """
        Sleep, check the flag, query liveness. Repeat until the flag is set.

        Only ConnectionLostError is handled here; anything else escapes as
        an unhandled fault.
        """
        while not self._flag.is_set():
            await asyncio.sleep(self._poll_interval)
            if self._flag.is_set():
                break
            try:
                await asyncio.to_thread(self.session.client.query_liveness)
            except ConnectionLostError as e:
                log.error("Simulator has stopped running, stopping TrafficManager", error=str(e))
                self._flag.request(ShutdownReason.CONNECTION_LOST)

        log.info(f"Shutdown requested ({self._flag.reason.name})")

    async def _stop(self) -> None:
        self.session.transition(SessionState.STOPPING)
        self.stopping_entered_at = time.monotonic()
        await self._coordinator.shutdown_all(self._flag.reason)
        self.session.transition(SessionState.STOPPED)
