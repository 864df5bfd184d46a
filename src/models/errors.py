"""
Error taxonomy

Configuration problems are never raised (they fall back to defaults), so
only the runtime failure kinds have exception types.
"""


class TrafficManagerError(Exception):
    """Base class for all traffic supervisor errors."""


class StartupError(TrafficManagerError):
    """Session could not reach RUNNING (simulator unreachable, spawn or pipeline start failed)."""


class ConnectionLostError(TrafficManagerError):
    """The simulator stopped answering after the session was set up."""


class ReclamationError(TrafficManagerError):
    """A single actor could not be destroyed."""

    def __init__(self, actor_id: int, message: str):
        super().__init__(f"Actor {actor_id}: {message}")
        self.actor_id = actor_id
