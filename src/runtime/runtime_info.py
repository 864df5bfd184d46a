import os
import sys
import importlib.util


class RuntimeInfo:
    @classmethod
    def is_linux(cls) -> bool:
        return sys.platform.startswith("linux")

    @classmethod
    def is_windows(cls) -> bool:
        return sys.platform.startswith("win")

    @classmethod
    def core_count(cls) -> int:
        """CPU cores available to this process (affinity-aware on Linux)."""
        if hasattr(os, "sched_getaffinity"):
            try:
                return max(1, len(os.sched_getaffinity(0)))
            except OSError:
                pass
        return os.cpu_count() or 1

    @classmethod
    def has_carla(cls) -> bool:
        return cls.has_module("carla")

    @classmethod
    def has_module(cls, module_name: str) -> bool:
        try:
            return importlib.util.find_spec(module_name) is not None
        except (ImportError, ValueError):
            return False
