"""
Shutdown flag shared by the signal relay, the fault trap and the supervisor.
"""

import threading
from typing import Optional

from models.enums import ShutdownReason


class ShutdownFlag:
    """
    Monotonic false -> true flag, never reset.

    request() is a test-and-set: exactly one caller observes True, and its
    reason is the one recorded. Safe to call from any thread.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: Optional[ShutdownReason] = None

    def request(self, reason: ShutdownReason) -> bool:
        """
        Raise the flag.

        Returns:
            True if this call raised it, False if it was already set
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason
            self._event.set()
            return True

    def is_set(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[ShutdownReason]:
        return self._reason

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the flag is raised. Returns is_set()."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        state = self._reason.name if self._reason else "clear"
        return f"ShutdownFlag({state})"
