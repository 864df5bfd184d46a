"""Worker subsystem: the concurrent pipeline driving spawned traffic"""

from .pipeline import TrafficPipeline, Stage

__all__ = ["TrafficPipeline", "Stage"]
