import asyncio
import os
import signal
import sys

import pytest

from lifecycle import SignalRelay
from models.enums import ShutdownReason


@pytest.mark.asyncio
@pytest.mark.skipif(sys.platform.startswith("win"), reason="loop signal handlers are POSIX only")
async def test_sigterm_sets_flag(flag):
    loop = asyncio.get_running_loop()
    relay = SignalRelay(flag)
    relay.install(loop)

    try:
        os.kill(os.getpid(), signal.SIGTERM)
        for _ in range(50):
            if flag.is_set():
                break
            await asyncio.sleep(0.01)
    finally:
        relay.uninstall(loop)

    assert flag.is_set()
    assert flag.reason is ShutdownReason.INTERRUPT


def test_relay_only_writes_the_flag(flag):
    relay = SignalRelay(flag)

    relay._relay()
    relay._relay()

    assert flag.reason is ShutdownReason.INTERRUPT


def test_relay_keeps_earlier_reason(flag):
    flag.request(ShutdownReason.CONNECTION_LOST)

    SignalRelay(flag)._relay()

    assert flag.reason is ShutdownReason.CONNECTION_LOST
