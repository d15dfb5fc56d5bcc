"""Exceptions raised synchronously by ocdrun.

Anything that happens after a process has been spawned is reported through
:class:`ocdrun.result.RunResult`, never through these exceptions.
"""

from __future__ import annotations

from typing import Optional


class OcdRunError(RuntimeError):
    """Base class for errors that abort a run before it starts."""


class ConfigurationMissing(OcdRunError):
    """A required path or setting is absent, so no command line can be built."""

    def __init__(self, message: str, title: str = "OpenOCD config error") -> None:
        super().__init__(message)
        self.title = title


class LaunchFailure(OcdRunError):
    """The operating system refused to spawn the process."""

    def __init__(self, message: str, executable: Optional[str] = None) -> None:
        super().__init__(message)
        self.executable = executable


class AlreadyRunning(OcdRunError):
    """A previous process owned by the same supervisor is still live."""

    def __init__(self, pid: Optional[int] = None) -> None:
        msg = "OpenOCD is already running"
        if pid is not None:
            msg += f" (pid {pid})"
        super().__init__(msg)
        self.pid = pid
