"""
Real implementations of interfaces for production use.

These classes wrap actual system resources (processes, clocks, logging)
and implement the abstract interfaces.
"""

from __future__ import annotations

import logging
import os
import subprocess
from datetime import datetime
from typing import Optional

from .errors import LaunchFailure
from .interfaces import ClockInterface, NotificationKind, Notifier, ProcessLauncherInterface
from .models import RunConfiguration

logger = logging.getLogger(__name__)


class SubprocessLauncher(ProcessLauncherInterface):
    """
    Spawns the process with subprocess.Popen.

    stderr is merged into stdout so the reader sees output in the order
    OpenOCD printed it. The parent environment is inherited, with
    ``config.env`` applied on top.
    """

    def spawn(self, config: RunConfiguration) -> subprocess.Popen:
        cmd = config.command_line()
        run_env = {**os.environ, **config.env} if config.env else None
        try:
            return subprocess.Popen(
                cmd,
                cwd=config.work_dir,
                env=run_env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                start_new_session=True,
            )
        except (OSError, ValueError) as e:
            logger.error("OpenOCD failed to start: %s", e)
            raise LaunchFailure(f"Failed to start {config.executable}: {e}", config.executable) from e


class RealClock(ClockInterface):
    """Real clock using system time."""

    def now(self) -> datetime:
        return datetime.now()


class LoggingNotifier(Notifier):
    """Notifier that writes to the ``ocdrun.notifications`` logger."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self._log = log or logging.getLogger("ocdrun.notifications")

    def notify(self, kind: NotificationKind, message: str) -> None:
        if kind is NotificationKind.SUCCESS:
            self._log.info(message)
        else:
            self._log.error(message)
