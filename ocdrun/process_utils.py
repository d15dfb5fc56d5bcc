"""Shared process-management utilities for ocdrun."""

from __future__ import annotations

import logging
import subprocess
import threading
import time

logger = logging.getLogger(__name__)


def signal_terminate(proc: subprocess.Popen) -> bool:
    """Ask *proc* to exit (SIGTERM on POSIX, TerminateProcess on Windows).

    Returns ``False`` if the process was already gone.
    """
    try:
        proc.terminate()
        return True
    except OSError:
        # Already reaped.
        return False


def signal_kill(proc: subprocess.Popen) -> bool:
    """Force-kill *proc*. Returns ``False`` if the process was already gone."""
    try:
        proc.kill()
        return True
    except OSError:
        return False


def wait_event_non_cancelable(event: threading.Event, timeout_s: float) -> bool:
    """Wait up to *timeout_s* for *event*, ignoring ``KeyboardInterrupt``.

    Used while tearing a process down: an interrupt arriving during the wait
    is logged and dropped so cleanup always runs to the end. The total wait
    never exceeds *timeout_s*.

    Returns:
        ``True`` if the event was set before the deadline.
    """
    deadline = time.monotonic() + timeout_s
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return event.is_set()
        try:
            return event.wait(remaining)
        except KeyboardInterrupt:
            logger.warning("Interrupt ignored while waiting for OpenOCD to exit")
