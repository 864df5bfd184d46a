"""
Enums for the traffic supervisor lifecycle
"""

from enum import Enum, auto


class SessionState(Enum):
    """
    Lifecycle of a control session

    NOT_STARTED: registry published, pipeline not running yet
    RUNNING: pipeline started, supervisor polling the simulator
    STOPPING: pipeline being stopped, actors being released
    STOPPED: terminal
    """
    NOT_STARTED = auto()
    RUNNING = auto()
    STOPPING = auto()
    STOPPED = auto()


class ShutdownReason(Enum):
    """Why the shutdown flag was raised"""
    INTERRUPT = auto()        # SIGINT / SIGTERM from the operator
    CONNECTION_LOST = auto()  # Liveness query failed
    FAULT = auto()            # Unhandled exception in some thread
    STARTUP_FAILED = auto()   # Pipeline could not be started


class ReclamationOrigin(Enum):
    """Which path released the actors"""
    GRACEFUL = auto()   # Supervisor thread, after the pipeline stopped
    EMERGENCY = auto()  # Fault trap, from whichever thread faulted


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()      # Configuration loading, CLI parsing
    SYSTEM = auto()      # Startup, exit codes
    SIMULATION = auto()  # Simulator connection, spawning
    PIPELINE = auto()    # Worker threads
    REGISTRY = auto()    # Actor registry, reclamation
    LIFECYCLE = auto()   # Session state machine, polling
    SHUTDOWN = auto()    # Shutdown coordinator and handlers
    FAULT = auto()       # Fault trap


# Process exit codes
EXIT_OK = 0
EXIT_FAILURE = 1
