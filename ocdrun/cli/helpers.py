"""Shared utilities for ocdrun CLI commands."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Optional, TextIO

from ocdrun.interfaces import NotificationKind, Notifier
from ocdrun.models import RunStatus
from ocdrun.settings import OpenOcdSettings

EXIT_SUCCESS = 0
EXIT_RUN_FAILED = 1
EXIT_NOT_STARTED = 2


def _print(obj: Any, *, json_mode: bool) -> None:
    if json_mode:
        print(json.dumps(obj, indent=2, sort_keys=True))
    else:
        if isinstance(obj, str):
            print(obj)
        else:
            print(json.dumps(obj, indent=2, sort_keys=True))


def _configure_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _resolve_settings(
    settings_path: Optional[str],
    *,
    openocd_home: Optional[str] = None,
    board: Optional[str] = None,
    gdb_port: Optional[int] = None,
    telnet_port: Optional[int] = None,
) -> OpenOcdSettings:
    """Resolve settings.

    Priority (highest first):
    1. Command-line flags
    2. OCDRUN_* environment variables
    3. Settings file (--settings, default ~/.config/ocdrun/settings.json)
    """
    settings = OpenOcdSettings.load(settings_path).from_env()
    return settings.with_overrides(
        openocd_home=openocd_home,
        board_config_file=board,
        gdb_port=gdb_port,
        telnet_port=telnet_port,
    )


def _exit_code_for(status: RunStatus) -> int:
    return EXIT_SUCCESS if status is RunStatus.SUCCESS else EXIT_RUN_FAILED


class ConsoleNotifier(Notifier):
    """Prints notification banners to stderr."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream or sys.stderr

    def notify(self, kind: NotificationKind, message: str) -> None:
        label = "OK" if kind is NotificationKind.SUCCESS else "FAILED"
        print(f"[{label}] {message}", file=self._stream)
