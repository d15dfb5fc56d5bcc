"""Commands that start OpenOCD."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from ocdrun.errors import ConfigurationMissing, OcdRunError
from ocdrun.event_log import RunEventLog
from ocdrun.implementations import LoggingNotifier
from ocdrun.interfaces import Notifier, ProcessListener
from ocdrun.listeners import ConsoleListener, EventLogListener
from ocdrun.runner import OpenOcdRunner
from ocdrun.settings import OpenOcdSettings
from ocdrun.supervisor import STOP_TIMEOUT_S, ProcessSupervisor
from ocdrun.cli.helpers import EXIT_NOT_STARTED, ConsoleNotifier, _exit_code_for, _print

logger = logging.getLogger(__name__)


def _listeners(json_mode: bool, events_path: Optional[str]) -> list[ProcessListener]:
    listeners: list[ProcessListener] = []
    if not json_mode:
        listeners.append(ConsoleListener(sys.stdout))
    if events_path:
        listeners.append(EventLogListener(RunEventLog(events_path)))
    return listeners


def _notifier(json_mode: bool) -> Notifier:
    return LoggingNotifier() if json_mode else ConsoleNotifier()


def _not_started(e: OcdRunError, *, json_mode: bool) -> int:
    payload = {"status": "not_started", "error": str(e), "error_type": type(e).__name__}
    if isinstance(e, ConfigurationMissing):
        payload["title"] = e.title
    _print(payload, json_mode=json_mode)
    return EXIT_NOT_STARTED


def cmd_flash(
    *,
    settings: OpenOcdSettings,
    file: str,
    command: Optional[str],
    timeout_s: float,
    events_path: Optional[str],
    json_mode: bool,
    supervisor: Optional[ProcessSupervisor] = None,
) -> int:
    """Program a firmware image and wait for OpenOCD to shut down.

    Args:
        settings: Resolved OpenOCD settings.
        file: Firmware image to program.
        command: Extra OpenOCD command run after ``program``.
        timeout_s: Seconds to wait before stopping OpenOCD.
        events_path: Optional JSONL event log.
        json_mode: Emit machine-parseable JSON output.
        supervisor: Injected supervisor (tests).

    Returns:
        Exit code: 0 on success, 1 on warning or failure, 2 if OpenOCD
        could not be started.
    """
    runner = OpenOcdRunner(settings, supervisor=supervisor, notifier=_notifier(json_mode))
    try:
        status = runner.flash(
            file,
            additional_command=command,
            timeout_s=timeout_s,
            listeners=_listeners(json_mode, events_path),
        )
    except OcdRunError as e:
        return _not_started(e, json_mode=json_mode)

    handle = runner.supervisor.handle
    _print(
        {
            "status": status.value,
            "file": file,
            "exit_code": handle.exit_code if handle else None,
        },
        json_mode=json_mode,
    )
    return _exit_code_for(status)


def cmd_run(
    *,
    settings: OpenOcdSettings,
    file: Optional[str],
    command: Optional[str],
    events_path: Optional[str],
    json_mode: bool,
    supervisor: Optional[ProcessSupervisor] = None,
) -> int:
    """Start OpenOCD and stream its output until it exits or Ctrl+C.

    Returns:
        Exit code: 0 if the run ended with the success marker, 1 otherwise,
        2 if OpenOCD could not be started.
    """
    runner = OpenOcdRunner(settings, supervisor=supervisor, notifier=_notifier(json_mode))
    try:
        result = runner.start(
            file_to_load=file,
            additional_command=command,
            listeners=_listeners(json_mode, events_path),
        )
    except OcdRunError as e:
        return _not_started(e, json_mode=json_mode)

    try:
        runner.supervisor.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping OpenOCD")
        runner.stop()

    status = runner.wait_for_result(result, timeout_s=STOP_TIMEOUT_S)
    handle = runner.supervisor.handle
    _print(
        {
            "status": status.value,
            "exit_code": handle.exit_code if handle else None,
        },
        json_mode=json_mode,
    )
    return _exit_code_for(status)
