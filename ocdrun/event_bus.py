"""Fan-out of process output and lifecycle events to listeners.

Dispatch is synchronous on the calling thread (normally the output reader)
and follows registration order. A listener that raises is logged and
skipped; the remaining listeners and the reader loop keep going.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Iterable, Optional

from .interfaces import ProcessListener
from .models import OutputLine

if TYPE_CHECKING:
    from .supervisor import ProcessHandle

logger = logging.getLogger(__name__)


class OutputEventBus:
    """Ordered list of :class:`ProcessListener` with per-listener isolation."""

    def __init__(self, listeners: Iterable[ProcessListener] = ()) -> None:
        self._lock = threading.Lock()
        self._listeners: list[ProcessListener] = []
        for listener in listeners:
            self.subscribe(listener)

    def subscribe(self, listener: ProcessListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: ProcessListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    @property
    def listeners(self) -> list[ProcessListener]:
        with self._lock:
            return list(self._listeners)

    def dispatch_started(self, handle: "ProcessHandle") -> None:
        self._dispatch("on_started", handle)

    def dispatch_text(self, line: OutputLine) -> None:
        self._dispatch("on_text", line)

    def dispatch_will_terminate(self, handle: "ProcessHandle", will_be_destroyed: bool = True) -> None:
        self._dispatch("on_will_terminate", handle, will_be_destroyed)

    def dispatch_terminated(self, handle: "ProcessHandle", exit_code: Optional[int]) -> None:
        self._dispatch("on_terminated", handle, exit_code)

    def _dispatch(self, method: str, *args) -> int:
        """Call *method* on every listener; return how many raised."""
        failures = 0
        for listener in self.listeners:
            try:
                getattr(listener, method)(*args)
            except Exception:
                failures += 1
                logger.exception("Listener %s failed in %s", type(listener).__name__, method)
        return failures
