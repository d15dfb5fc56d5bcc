"""OpenOCD process supervisor.

Owns at most one live OpenOCD process. A background thread reads the merged
stdout/stderr stream line by line and drives the :class:`OutputEventBus`;
the run's outcome is reported through the :class:`RunResult` returned by
:meth:`ProcessSupervisor.start`.

Architecture:
    OpenOCD (subprocess, stderr merged into stdout)
        └─ ProcessHandle._read_loop (thread "ocdrun-reader-<pid>")
            └─ OutputEventBus
                ├─ ResultFollower -> RunResult
                └─ caller listeners (notifier, console, event log)

Process lifecycle:
    NOT_STARTED -> RUNNING -> TERMINATING -> TERMINATED
                         \\________________/
                          (exit on its own)
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional, Union

from .errors import AlreadyRunning
from .event_bus import OutputEventBus
from .implementations import SubprocessLauncher
from .interfaces import ProcessLauncherInterface, ProcessListener
from .listeners import ResultFollower
from .models import OutputLine, OutputSource, ProcessState, RunConfiguration
from .process_utils import signal_kill, signal_terminate, wait_event_non_cancelable
from .result import RunResult

logger = logging.getLogger(__name__)

# Bounded wait after requesting termination.
STOP_TIMEOUT_S = 1.0


def _decode(raw: Union[bytes, str]) -> str:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    return raw.rstrip("\r\n")


class ProcessHandle:
    """One spawned OpenOCD process and its output reader.

    Created by :class:`ProcessSupervisor`; listeners only get a reference to
    it through the lifecycle events.
    """

    def __init__(self, proc, config: RunConfiguration, bus: OutputEventBus) -> None:
        self._proc = proc
        self._config = config
        self._bus = bus
        self._lock = threading.Lock()
        self._state = ProcessState.NOT_STARTED
        self._exit_code: Optional[int] = None
        self._exited = False
        self._terminated = threading.Event()
        self._reader: Optional[threading.Thread] = None

    @property
    def pid(self) -> Optional[int]:
        return getattr(self._proc, "pid", None)

    @property
    def config(self) -> RunConfiguration:
        return self._config

    @property
    def state(self) -> ProcessState:
        with self._lock:
            return self._state

    @property
    def exit_code(self) -> Optional[int]:
        with self._lock:
            return self._exit_code

    @property
    def is_terminated(self) -> bool:
        return self.state is ProcessState.TERMINATED

    @property
    def is_terminating(self) -> bool:
        return self.state is ProcessState.TERMINATING

    def start_reading(self) -> None:
        with self._lock:
            if self._state is not ProcessState.NOT_STARTED:
                raise RuntimeError(f"process reader already started (state={self._state.value})")
            self._state = ProcessState.RUNNING
        self._reader = threading.Thread(
            target=self._read_loop,
            daemon=True,
            name=f"ocdrun-reader-{self.pid}",
        )
        self._reader.start()

    def destroy(self) -> bool:
        """Request termination.

        The signal goes out immediately; ``will_terminate`` is dispatched
        later by the reader thread, after the remaining output.

        Returns ``False`` if termination was already requested or the
        process has already exited.
        """
        with self._lock:
            if self._exited or self._state in (ProcessState.TERMINATING, ProcessState.TERMINATED):
                return False
            self._state = ProcessState.TERMINATING
        signal_terminate(self._proc)
        return True

    def kill(self) -> None:
        signal_kill(self._proc)

    def wait_for(self, timeout_s: Optional[float] = None, *, cancelable: bool = True) -> bool:
        """Wait for the process to reach TERMINATED.

        With ``cancelable=False`` a ``KeyboardInterrupt`` during the wait is
        swallowed; *timeout_s* is required in that mode.
        """
        if cancelable:
            return self._terminated.wait(timeout_s)
        if timeout_s is None:
            raise ValueError("non-cancelable wait requires a timeout")
        return wait_event_non_cancelable(self._terminated, timeout_s)

    def _read_loop(self) -> None:
        self._bus.dispatch_started(self)
        stream = self._proc.stdout
        try:
            if stream is not None:
                for raw in stream:
                    self._bus.dispatch_text(OutputLine(_decode(raw), OutputSource.STDOUT))
        except (OSError, ValueError) as e:
            # Stream closed under us (e.g. killed mid-read).
            logger.warning("OpenOCD output stream closed: %s", e)
        finally:
            if stream is not None:
                try:
                    stream.close()
                except OSError:
                    pass
            self._finish()

    def _finish(self) -> None:
        exit_code = self._proc.wait()
        logger.info("OpenOCD (pid %s) exited with code %s", self.pid, exit_code)
        with self._lock:
            self._exited = True
            destroyed = self._state is ProcessState.TERMINATING
        if destroyed:
            self._bus.dispatch_will_terminate(self, True)
        self._bus.dispatch_text(
            OutputLine(f"Process finished with exit code {exit_code}", OutputSource.SYSTEM)
        )
        with self._lock:
            self._exit_code = exit_code
            self._state = ProcessState.TERMINATED
        try:
            self._bus.dispatch_terminated(self, exit_code)
        finally:
            self._terminated.set()

    def __repr__(self) -> str:
        return f"ProcessHandle(pid={self.pid}, state={self.state.value})"


class ProcessSupervisor:
    """Starts, watches and stops a single OpenOCD process at a time.

    Usage:
        supervisor = ProcessSupervisor()
        bus, result = supervisor.start(config, listeners=[ConsoleListener()])
        ...
        supervisor.stop()
        status = result.wait(timeout=1.0)

    Args:
        launcher: Spawns the process (default: :class:`SubprocessLauncher`).
        listeners: Listeners attached to every run, after the result follower.
        stop_timeout_s: Bounded wait used by :meth:`stop`.
    """

    def __init__(
        self,
        launcher: Optional[ProcessLauncherInterface] = None,
        listeners: Iterable[ProcessListener] = (),
        stop_timeout_s: float = STOP_TIMEOUT_S,
    ) -> None:
        self._launcher = launcher or SubprocessLauncher()
        self._listeners: list[ProcessListener] = list(listeners)
        self._stop_timeout_s = stop_timeout_s
        self._lock = threading.Lock()
        self._handle: Optional[ProcessHandle] = None

    def add_listener(self, listener: ProcessListener) -> None:
        """Attach *listener* to every run started after this call."""
        with self._lock:
            self._listeners.append(listener)

    @property
    def handle(self) -> Optional[ProcessHandle]:
        with self._lock:
            return self._handle

    def start(
        self,
        config: RunConfiguration,
        listeners: Iterable[ProcessListener] = (),
    ) -> tuple[OutputEventBus, RunResult]:
        """Spawn OpenOCD and begin streaming its output.

        Returns immediately after the process is created.

        Raises:
            AlreadyRunning: The previous process has not terminated yet.
            LaunchFailure: The process could not be spawned.
        """
        with self._lock:
            current = self._handle
            if current is not None and not current.is_terminated:
                logger.info("OpenOCD is already running (pid %s)", current.pid)
                raise AlreadyRunning(current.pid)

            result = RunResult()
            bus = OutputEventBus([ResultFollower(result), *self._listeners, *listeners])

            logger.info("Starting OpenOCD: %s", " ".join(config.command_line()))
            proc = self._launcher.spawn(config)
            handle = ProcessHandle(proc, config, bus)
            self._handle = handle
            handle.start_reading()

        return bus, result

    def stop(self) -> bool:
        """Terminate the running process and wait for it (bounded).

        Sends nothing if no process runs or termination is already underway;
        in the latter case it only waits (bounded) for the reader to finish.
        Interrupts during the wait are ignored.

        Returns:
            ``True`` if no process is left running.
        """
        handle = self.handle
        if handle is None:
            return True
        if not handle.destroy():
            return handle.is_terminated or handle.wait_for(self._stop_timeout_s, cancelable=False)

        if handle.wait_for(self._stop_timeout_s, cancelable=False):
            return True

        logger.warning(
            "OpenOCD (pid %s) did not exit within %.1fs, killing",
            handle.pid,
            self._stop_timeout_s,
        )
        handle.kill()
        return False

    def is_running(self) -> bool:
        handle = self.handle
        return handle is not None and not handle.is_terminated

    def wait(self, timeout_s: Optional[float] = None) -> bool:
        """Wait for the current process to terminate.

        Returns ``True`` if it terminated (or none was started).
        """
        handle = self.handle
        if handle is None:
            return True
        return handle.wait_for(timeout_s)
