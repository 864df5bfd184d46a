"""
Actor Registry
--------------

Authoritative list of the simulator actors this process must release.

Features:
- Published exactly once, before the pipeline or any fault hook can read it
- Read-only afterwards (entries are never added or removed)
- Best-effort iteration: one failing entry never stops the rest
- Exactly-once reclamation through a ReclamationGate, shared by the
  graceful path (supervisor) and the emergency path (fault trap)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, Optional, Tuple

from lifecycle.reclamation_gate import ReclamationGate
from models.enums import LogCategory, ReclamationOrigin
from simulation.protocols import ActorHandle, ISimulationClient
from utils.logger import get_logger

log = get_logger().for_category(LogCategory.REGISTRY)


# ---------------------------------------------------------------------------
# RECLAMATION REPORT
# ---------------------------------------------------------------------------

@dataclass
class ReclamationReport:
    """Outcome of one reclamation pass."""
    origin: ReclamationOrigin
    attempted: int = 0
    destroyed: int = 0
    skipped: int = 0  # already dead on the simulator side
    failures: Dict[int, str] = field(default_factory=dict)

    def summary(self) -> str:
        return (
            f"{self.origin.name}: attempted={self.attempted}, destroyed={self.destroyed}, "
            f"skipped={self.skipped}, failed={len(self.failures)}"
        )


# ---------------------------------------------------------------------------
# ACTOR REGISTRY
# ---------------------------------------------------------------------------

class ActorRegistry:
    """
    Process-wide registry of spawned actors.

    Shared by the SessionSupervisor (main thread) and the FaultTrap (any
    thread). Contents are an immutable tuple after publish(), so readers
    need no lock.
    """

    _instance: Optional["ActorRegistry"] = None

    def __init__(self) -> None:
        self._handles: Tuple[ActorHandle, ...] = ()
        self._published = False
        self._gate = ReclamationGate()

    # -----------------------------
    # Singleton accessor
    # -----------------------------
    @classmethod
    def instance(cls) -> "ActorRegistry":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    # -----------------------------
    # Publication
    # -----------------------------
    def publish(self, handles: Iterable[ActorHandle]) -> None:
        """
        Store the spawned handles. Callable once.

        Raises:
            RuntimeError: already published
            ValueError: two handles share an actor id
        """
        if self._published:
            raise RuntimeError("ActorRegistry already published")

        handles = tuple(handles)
        seen = set()
        for handle in handles:
            if handle.id in seen:
                raise ValueError(f"Duplicate actor id {handle.id} in registry")
            seen.add(handle.id)

        self._handles = handles
        self._published = True
        log.info(f"Published {len(handles)} actors")

    @property
    def is_published(self) -> bool:
        return self._published

    @property
    def gate(self) -> ReclamationGate:
        return self._gate

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[ActorHandle]:
        return iter(self._handles)

    def ids(self) -> Tuple[int, ...]:
        return tuple(h.id for h in self._handles)

    # -----------------------------
    # Iteration
    # -----------------------------
    def for_each(self, visit: Callable[[ActorHandle], None]) -> Dict[int, Exception]:
        """
        Call visit(handle) for every entry in spawn order.

        Exceptions raised by visit are logged and collected, never raised.

        Returns:
            actor id -> exception for every failed visit
        """
        failures: Dict[int, Exception] = {}
        for handle in self._handles:
            try:
                visit(handle)
            except Exception as e:
                failures[handle.id] = e
                log.error(f"Actor {handle.id}: {e}")
        return failures

    # -----------------------------
    # Reclamation
    # -----------------------------
    def reclaim(self, client: ISimulationClient, origin: ReclamationOrigin) -> Optional[ReclamationReport]:
        """
        Destroy every live actor, at most once per registry.

        An actor whose liveness cannot be queried is destroyed anyway.

        Returns:
            The report, or None if another pass already ran (or is running)
        """
        if not self._gate.try_enter(origin):
            log.debug(
                f"{origin.name} reclamation skipped: already performed by {self._gate.holder.name}"
            )
            return None

        report = ReclamationReport(origin=origin)
        log.info(f"Destroying {len(self._handles)} spawned actors ({origin.name.lower()})")

        def destroy(handle: ActorHandle) -> None:
            try:
                alive = handle.is_alive
            except Exception as e:
                log.warn(f"Actor {handle.id}: liveness unknown ({e}), destroying anyway")
                alive = True

            if not alive:
                report.skipped += 1
                return

            report.attempted += 1
            client.destroy_actor(handle)
            report.destroyed += 1

        for actor_id, error in self.for_each(destroy).items():
            report.failures[actor_id] = str(error)

        if report.failures:
            log.warn("Reclamation finished with errors", details=[report.summary()])
        else:
            log.info("Reclamation complete", details=[report.summary()])
        return report
