"""
Interfaces for the OpenOCD run supervisor

Abstract base classes that define contracts for all pluggable components.
This enables dependency injection and mock-based testing without an
OpenOCD binary or a debug adapter attached.
"""

from __future__ import annotations

import subprocess
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .models import OutputLine, RunConfiguration

if TYPE_CHECKING:
    from .supervisor import ProcessHandle


class ProcessListener(ABC):
    """
    Receives output lines and lifecycle events of one process.

    Implementations:
    - ResultFollower: classifies lines and resolves the RunResult
    - NotificationListener: user-facing success/failure banners
    - ConsoleListener: renders the console
    - EventLogListener: appends events to a JSONL log

    Only ``on_text`` is required; the lifecycle hooks default to no-ops.
    Every hook runs on the run's reader thread, one event at a time, so a
    listener attached to a single run needs no locking of its own.
    """

    def on_started(self, handle: "ProcessHandle") -> None:
        """Process was spawned and output reading is about to begin."""
        pass

    @abstractmethod
    def on_text(self, line: OutputLine) -> None:
        """A line of output is available."""
        pass

    def on_will_terminate(self, handle: "ProcessHandle", will_be_destroyed: bool) -> None:
        """Termination was requested; sent once the output is drained."""
        pass

    def on_terminated(self, handle: "ProcessHandle", exit_code: Optional[int]) -> None:
        """Process exited and its output stream is drained."""
        pass


class ProcessLauncherInterface(ABC):
    """
    Abstract interface for spawning the external process.

    Implementations:
    - SubprocessLauncher: subprocess.Popen with merged stdout/stderr
    - MockLauncher: scripted fake processes for testing
    """

    @abstractmethod
    def spawn(self, config: RunConfiguration) -> subprocess.Popen:
        """Start the process described by *config*.

        The returned object must expose ``pid``, ``stdout`` (binary,
        line-iterable), ``poll()``, ``wait(timeout)``, ``terminate()`` and
        ``kill()``.

        Raises:
            LaunchFailure: If the process could not be created.
        """
        pass


class NotificationKind(Enum):
    """Kind of user-facing notification."""
    SUCCESS = "success"
    FAILURE = "failure"


class Notifier(ABC):
    """
    Abstract interface for user notifications (banners, balloons, toasts).

    Implementations:
    - LoggingNotifier: writes notifications to the log
    - ConsoleNotifier (cli): prints a banner to stderr
    """

    @abstractmethod
    def notify(self, kind: NotificationKind, message: str) -> None:
        """Show a notification."""
        pass


class ClockInterface(ABC):
    """
    Abstract interface for time operations.

    Enables deterministic timestamps in tests.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get current datetime."""
        pass
