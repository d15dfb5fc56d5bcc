"""
Mock implementations for testing.

These mocks allow testing the supervisor and listeners without an OpenOCD
binary or a debug adapter.
"""

from __future__ import annotations

import queue
import subprocess
import threading
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from .errors import LaunchFailure
from .interfaces import ClockInterface, NotificationKind, Notifier, ProcessLauncherInterface, ProcessListener
from .models import OutputLine, RunConfiguration

_EOF = object()


class _MockStream:
    """Blocking, line-iterable byte stream fed by :class:`MockProcess`."""

    def __init__(self, q: "queue.Queue") -> None:
        self._queue = q
        self.closed = False

    def __iter__(self):
        while True:
            item = self._queue.get()
            if item is _EOF:
                return
            yield item

    def close(self) -> None:
        self.closed = True


class MockProcess:
    """
    Popen stand-in with scripted output.

    Lines passed to the constructor are available immediately. Unless
    ``hold_open`` is set, the process then exits with ``exit_code``.
    With ``hold_open`` the test drives it with emit()/exit(), or the
    supervisor ends it through terminate().
    """

    def __init__(
        self,
        lines: Iterable[str] = (),
        exit_code: int = 0,
        pid: int = 4242,
        hold_open: bool = False,
        exit_on_terminate: bool = True,
        terminate_exit_code: int = -15,
    ):
        self.pid = pid
        self.returncode: Optional[int] = None
        self._queue: "queue.Queue" = queue.Queue()
        self._exited = threading.Event()
        self._lock = threading.Lock()
        self._exit_on_terminate = exit_on_terminate
        self._terminate_exit_code = terminate_exit_code
        self.stdout = _MockStream(self._queue)
        self.terminate_calls = 0
        self.kill_calls = 0

        for line in lines:
            self.emit(line)
        if not hold_open:
            self.exit(exit_code)

    def emit(self, line: str) -> None:
        """Queue a line of output (newline appended)."""
        self._queue.put(line.encode("utf-8") + b"\n")

    def emit_raw(self, data: bytes) -> None:
        self._queue.put(data)

    def exit(self, code: int = 0) -> None:
        """End the output stream and exit with *code* (first call wins)."""
        with self._lock:
            if self._exited.is_set():
                return
            self.returncode = code
            self._exited.set()
        self._queue.put(_EOF)

    def poll(self) -> Optional[int]:
        return self.returncode

    def wait(self, timeout: Optional[float] = None) -> int:
        if not self._exited.wait(timeout):
            raise subprocess.TimeoutExpired("mock-openocd", timeout)
        return self.returncode  # type: ignore[return-value]

    def terminate(self) -> None:
        self.terminate_calls += 1
        if self._exit_on_terminate:
            self.exit(self._terminate_exit_code)

    def kill(self) -> None:
        self.kill_calls += 1
        self.exit(-9)


class MockLauncher(ProcessLauncherInterface):
    """
    Launcher that hands out queued :class:`MockProcess` objects.

    When the queue is empty a process that exits immediately with code 0 is
    returned.
    """

    def __init__(self, processes: Iterable[MockProcess] = ()):
        self._processes: List[MockProcess] = list(processes)
        self._fail_with: Optional[OSError] = None
        self.spawned: List[Tuple[RunConfiguration, MockProcess]] = []

    def add_process(self, proc: MockProcess) -> None:
        self._processes.append(proc)

    def set_fail_on_spawn(self, exc: Optional[OSError]) -> None:
        """Make spawn() raise LaunchFailure wrapping *exc*."""
        self._fail_with = exc

    @property
    def spawn_count(self) -> int:
        return len(self.spawned)

    def spawn(self, config: RunConfiguration) -> MockProcess:
        if self._fail_with is not None:
            raise LaunchFailure(
                f"Failed to start {config.executable}: {self._fail_with}", config.executable
            ) from self._fail_with
        proc = self._processes.pop(0) if self._processes else MockProcess()
        self.spawned.append((config, proc))
        return proc


class MockNotifier(Notifier):
    """Records notifications instead of showing them."""

    def __init__(self):
        self.notifications: List[Tuple[NotificationKind, str]] = []

    def notify(self, kind: NotificationKind, message: str) -> None:
        self.notifications.append((kind, message))

    def kinds(self) -> List[NotificationKind]:
        return [kind for kind, _ in self.notifications]


class RecordingListener(ProcessListener):
    """Records every event it receives as ``(event, payload)`` tuples."""

    def __init__(self):
        self.events: List[tuple] = []
        self._lock = threading.Lock()
        self.terminated = threading.Event()

    def on_started(self, handle) -> None:
        self._record(("started", handle.pid))

    def on_text(self, line: OutputLine) -> None:
        self._record(("text", line.text))

    def on_will_terminate(self, handle, will_be_destroyed: bool) -> None:
        self._record(("will_terminate", will_be_destroyed))

    def on_terminated(self, handle, exit_code: Optional[int]) -> None:
        self._record(("terminated", exit_code))
        self.terminated.set()

    def texts(self) -> List[str]:
        with self._lock:
            return [payload for name, payload in self.events if name == "text"]

    def names(self) -> List[str]:
        with self._lock:
            return [name for name, _ in self.events]

    def _record(self, event: tuple) -> None:
        with self._lock:
            self.events.append(event)


class MockClock(ClockInterface):
    """Clock frozen at a fixed instant."""

    def __init__(self, start_time: Optional[datetime] = None):
        self._now = start_time or datetime(2024, 1, 1, 12, 0, 0)

    def now(self) -> datetime:
        return self._now

    def set_time(self, dt: datetime) -> None:
        self._now = dt
