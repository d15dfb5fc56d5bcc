"""Single-slot result cell for one OpenOCD run.

A run can print several decisive lines before it exits, e.g. a warning that
is later followed by the success marker. The cell therefore keeps the *last*
decisive write: ``resolve()`` always replaces the stored value. Readers get
whatever value is stored at the moment they read; typical callers read once
the process has terminated.

Writers race from two places (the output reader classifying a line and the
termination handler applying the fallback), so every access goes through one
condition variable.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .models import RunStatus

logger = logging.getLogger(__name__)


class RunResult:
    """Thread-safe set-or-replace cell holding at most one :class:`RunStatus`.

    Usage:
        result = RunResult()
        result.resolve(RunStatus.WARNING)   # from the reader thread
        result.resolve(RunStatus.SUCCESS)   # replaces the warning
        status = result.wait(timeout=5.0)   # -> RunStatus.SUCCESS
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._status: Optional[RunStatus] = None
        self._resolve_count = 0
        self._consumed = False
        self._callbacks: list[Callable[[RunStatus], None]] = []

    def resolve(self, status: RunStatus) -> None:
        """Store *status*, replacing any previous value."""
        with self._cond:
            previous = self._status
            self._status = status
            self._resolve_count += 1
            if previous is not None and previous is not status and self._consumed:
                logger.debug("Run result changed after it was read: %s -> %s", previous.value, status.value)
            self._cond.notify_all()
            callbacks = list(self._callbacks)
        self._run_callbacks(callbacks, status)

    def resolve_if_unset(self, status: RunStatus) -> bool:
        """Store *status* only if nothing was stored yet.

        Returns:
            True if this call set the value.
        """
        with self._cond:
            if self._status is not None:
                return False
            self._status = status
            self._resolve_count += 1
            self._cond.notify_all()
            callbacks = list(self._callbacks)
        self._run_callbacks(callbacks, status)
        return True

    def done(self) -> bool:
        with self._cond:
            return self._status is not None

    def poll(self) -> Optional[RunStatus]:
        """Return the stored status without blocking, or None if unresolved."""
        with self._cond:
            if self._status is not None:
                self._consumed = True
            return self._status

    def wait(self, timeout: Optional[float] = None) -> RunStatus:
        """Block until a status is stored and return it.

        Raises:
            TimeoutError: If *timeout* seconds pass without a status.
        """
        with self._cond:
            if not self._cond.wait_for(lambda: self._status is not None, timeout=timeout):
                raise TimeoutError(f"run result not available after {timeout}s")
            self._consumed = True
            return self._status  # type: ignore[return-value]

    def add_done_callback(self, fn: Callable[[RunStatus], None]) -> None:
        """Call *fn* with the status on every future resolve.

        If a status is already stored, *fn* is called with it immediately.
        """
        with self._cond:
            self._callbacks.append(fn)
            current = self._status
        if current is not None:
            self._run_callbacks([fn], current)

    @property
    def consumed(self) -> bool:
        """True once a reader has observed a value."""
        with self._cond:
            return self._consumed

    @property
    def resolve_count(self) -> int:
        with self._cond:
            return self._resolve_count

    def __repr__(self) -> str:
        with self._cond:
            status = self._status.value if self._status else None
        return f"RunResult(status={status!r})"

    @staticmethod
    def _run_callbacks(callbacks: list[Callable[[RunStatus], None]], status: RunStatus) -> None:
        for fn in callbacks:
            try:
                fn(status)
            except Exception:
                logger.exception("Run result callback %r failed", fn)
