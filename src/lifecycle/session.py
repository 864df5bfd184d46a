"""Session aggregate: everything one control session owns."""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List

from lifecycle.actor_registry import ActorRegistry
from lifecycle.protocols import IWorkerSubsystem
from models.enums import LogCategory, SessionState
from simulation.protocols import ISimulationClient
from utils.logger import get_logger

log = get_logger().for_category(LogCategory.LIFECYCLE)

_TRANSITIONS: Dict[SessionState, FrozenSet[SessionState]] = {
    SessionState.NOT_STARTED: frozenset({SessionState.RUNNING, SessionState.STOPPING}),
    SessionState.RUNNING: frozenset({SessionState.STOPPING}),
    SessionState.STOPPING: frozenset({SessionState.STOPPED}),
    SessionState.STOPPED: frozenset(),
}


@dataclass
class Session:
    """
    Registry + worker subsystem + simulator connection, plus the lifecycle state.

    NOT_STARTED -> STOPPING is the aborted-start path (pipeline failed to
    start but actors were already spawned).
    """
    registry: ActorRegistry
    worker: IWorkerSubsystem
    client: ISimulationClient
    state: SessionState = SessionState.NOT_STARTED
    history: List[SessionState] = field(default_factory=lambda: [SessionState.NOT_STARTED])

    def transition(self, target: SessionState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal session transition {self.state.name} -> {target.name}")
        log.debug(f"Session {self.state.name} → {target.name}")
        self.state = target
        self.history.append(target)
