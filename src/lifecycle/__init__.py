"""
Lifecycle subsystem
-------------------

Exports the public API for:
- the shutdown flag and the exactly-once reclamation gate
- the actor registry
- signal relay and fault trap
- the session supervisor and its stopping sequence

External code should import from:
    from lifecycle import SessionSupervisor, ActorRegistry, ShutdownFlag
    from lifecycle.handlers import WorkerShutdownHandler
"""

from .shutdown_flag import ShutdownFlag
from .reclamation_gate import ReclamationGate
from .actor_registry import ActorRegistry, ReclamationReport
from .protocols import IShutdownHandler, IWorkerSubsystem
from .shutdown_coordinator import ShutdownCoordinator
from . import handlers
from .session import Session
from .signal_relay import SignalRelay
from .fault_trap import FaultTrap
from .session_supervisor import SessionSupervisor

__all__ = [
    "ShutdownFlag",
    "ReclamationGate",
    "ActorRegistry",
    "ReclamationReport",
    "IShutdownHandler",
    "IWorkerSubsystem",
    "ShutdownCoordinator",
    "handlers",
    "Session",
    "SignalRelay",
    "FaultTrap",
    "SessionSupervisor",
]
