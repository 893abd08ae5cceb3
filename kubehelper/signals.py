"""Graceful shutdown on SIGINT and SIGTERM."""

from __future__ import annotations

import logging
import os
import signal
import threading

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)
FORCED_EXIT_CODE = 130

_lock = threading.Lock()
_installed = False


def setup_signal_event() -> threading.Event:
    """Install shutdown handlers and return an event set on the first signal.

    A second signal terminates the process at once with exit code 130.
    The handlers can be installed only once per process; a second call
    raises RuntimeError.
    """
    global _installed
    with _lock:
        if _installed:
            raise RuntimeError("signal handlers are already set up")
        _installed = True

    event = threading.Event()
    received = 0

    def handle(signum, frame) -> None:
        nonlocal received
        received += 1
        if received == 1:
            event.set()
            print(flush=True)
            return
        logger.warning("forced to stop.")
        os._exit(FORCED_EXIT_CODE)

    for sig in SHUTDOWN_SIGNALS:
        signal.signal(sig, handle)
    return event