from .worker_shutdown_handler import WorkerShutdownHandler
from .actor_reclamation_handler import ActorReclamationHandler

__all__ = [
    "WorkerShutdownHandler",
    "ActorReclamationHandler",
]
