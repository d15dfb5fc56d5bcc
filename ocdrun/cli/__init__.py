"""
ocdrun: CLI for running OpenOCD and reporting the programming result.

Main commands:
- flash: Program a firmware file, shut OpenOCD down, report the result
- run: Start OpenOCD and stream its output until it exits or Ctrl+C
- command-line: Show the OpenOCD invocation built from settings
- config: Show (and optionally save) resolved settings

Entry points:
- ocdrun: Main CLI entry point (installed via pip)
- Can also be imported and called programmatically via main(argv)
"""

from __future__ import annotations

from ocdrun.cli.helpers import (
    _print,
    _resolve_settings,
    ConsoleNotifier,
)
from ocdrun.cli.run_cmds import cmd_flash, cmd_run
from ocdrun.cli.config_cmds import cmd_command_line, cmd_config
from ocdrun.cli.dispatch import main

__all__ = [
    "main",
    "cmd_flash",
    "cmd_run",
    "cmd_command_line",
    "cmd_config",
    "ConsoleNotifier",
    "_print",
    "_resolve_settings",
]
