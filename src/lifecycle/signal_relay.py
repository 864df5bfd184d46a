"""
Signal relay: turns SIGINT / SIGTERM into a shutdown flag write.
"""

import asyncio
import signal
from typing import Tuple

from lifecycle.shutdown_flag import ShutdownFlag
from models.enums import ShutdownReason


class SignalRelay:
    """
    Installs OS signal handlers on the running asyncio loop.

    The handler only raises the shutdown flag. It must not touch the
    pipeline, the registry or the logger: the supervisor observes the flag
    at its next poll and does all the work.

    Example:
        relay = SignalRelay(flag)
        relay.install(asyncio.get_running_loop())
    """

    SIGNALS: Tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)

    def __init__(self, flag: ShutdownFlag):
        self._flag = flag
        self._installed = False

    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in self.SIGNALS:
            loop.add_signal_handler(sig, self._relay)
        self._installed = True

    def uninstall(self, loop: asyncio.AbstractEventLoop) -> None:
        if not self._installed:
            return
        for sig in self.SIGNALS:
            loop.remove_signal_handler(sig)
        self._installed = False

    def _relay(self) -> None:
        self._flag.request(ShutdownReason.INTERRUPT)
