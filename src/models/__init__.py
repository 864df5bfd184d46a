"""
Models package - Data models for the traffic supervisor
"""

from .enums import SessionState, ShutdownReason, ReclamationOrigin, LogLevel, LogCategory, EXIT_OK, EXIT_FAILURE
from .config import AppConfig, ConnectionConfig, TrafficConfig, SupervisorConfig, PipelineConfig, SimulationConfig, LoggingConfig
from .errors import TrafficManagerError, StartupError, ConnectionLostError, ReclamationError

__all__ = [
    'SessionState',
    'ShutdownReason',
    'ReclamationOrigin',
    'LogLevel',
    'LogCategory',
    'EXIT_OK',
    'EXIT_FAILURE',
    'AppConfig',
    'ConnectionConfig',
    'TrafficConfig',
    'SupervisorConfig',
    'PipelineConfig',
    'SimulationConfig',
    'LoggingConfig',
    'TrafficManagerError',
    'StartupError',
    'ConnectionLostError',
    'ReclamationError',
]
