"""High-level OpenOCD runner: settings in, run status out."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from .command_line import build_run_configuration
from .interfaces import Notifier, ProcessListener
from .listeners import NotificationListener
from .models import RunStatus
from .result import RunResult
from .settings import OpenOcdSettings
from .supervisor import STOP_TIMEOUT_S, ProcessSupervisor

logger = logging.getLogger(__name__)


class OpenOcdRunner:
    """Builds OpenOCD command lines from settings and supervises the runs.

    Usage:
        runner = OpenOcdRunner(OpenOcdSettings.load())
        status = runner.flash("build/zephyr.elf", timeout_s=60)

    Args:
        settings: OpenOCD home, board config and ports.
        supervisor: Process supervisor (default: a new one).
        notifier: If given, a :class:`NotificationListener` is attached to
            every run.
    """

    def __init__(
        self,
        settings: OpenOcdSettings,
        supervisor: Optional[ProcessSupervisor] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self._settings = settings
        self._supervisor = supervisor or ProcessSupervisor()
        self._notifier = notifier

    @property
    def settings(self) -> OpenOcdSettings:
        return self._settings

    @property
    def supervisor(self) -> ProcessSupervisor:
        return self._supervisor

    def start(
        self,
        file_to_load: Optional[Union[str, Path]] = None,
        additional_command: Optional[str] = None,
        shutdown: bool = False,
        listeners: Iterable[ProcessListener] = (),
    ) -> RunResult:
        """Start OpenOCD and return the run's result cell.

        Raises:
            ConfigurationMissing: Settings are incomplete.
            AlreadyRunning: A previous OpenOCD is still live.
            LaunchFailure: OpenOCD could not be spawned.
        """
        config = build_run_configuration(
            self._settings,
            file_to_load=file_to_load,
            additional_command=additional_command,
            shutdown=shutdown,
        )
        run_listeners = list(listeners)
        if self._notifier is not None:
            run_listeners.append(NotificationListener(self._notifier))
        _, result = self._supervisor.start(config, listeners=run_listeners)
        return result

    def stop(self) -> bool:
        return self._supervisor.stop()

    def is_running(self) -> bool:
        return self._supervisor.is_running()

    def flash(
        self,
        file_to_load: Union[str, Path],
        additional_command: Optional[str] = None,
        timeout_s: Optional[float] = None,
        listeners: Iterable[ProcessListener] = (),
    ) -> RunStatus:
        """Program *file_to_load* and wait for OpenOCD to shut down.

        If OpenOCD does not exit within *timeout_s* it is stopped and the
        run counts as ERROR, whatever it printed before.
        """
        result = self.start(
            file_to_load=file_to_load,
            additional_command=additional_command,
            shutdown=True,
            listeners=listeners,
        )
        return self.wait_for_result(result, timeout_s)

    def wait_for_result(self, result: RunResult, timeout_s: Optional[float] = None) -> RunStatus:
        """Wait for the current process to exit, then read *result*."""
        try:
            terminated = self._supervisor.wait(timeout_s)
        except KeyboardInterrupt:
            logger.info("Interrupted, stopping OpenOCD")
            self._supervisor.stop()
            raise
        if not terminated:
            logger.warning("OpenOCD did not finish within %ss, stopping it", timeout_s)
            self._supervisor.stop()
            self._supervisor.wait(STOP_TIMEOUT_S)
            result.resolve(RunStatus.ERROR)
            return RunStatus.ERROR
        # The follower resolves the result before waiters are released.
        return result.wait(timeout=STOP_TIMEOUT_S)
