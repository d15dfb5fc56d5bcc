"""Build the OpenOCD command line from settings.

The resulting :class:`RunConfiguration` is the only thing the supervisor
sees. Every missing piece raises :class:`ConfigurationMissing` before any
process exists.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union

from .errors import ConfigurationMissing
from .models import RunConfiguration
from .settings import DEFAULT_GDB_PORT, DEFAULT_TELNET_PORT, OpenOcdSettings

logger = logging.getLogger(__name__)

SCRIPTS_PATH_SHORT = "scripts"
SCRIPTS_PATH_LONG = "share/openocd/" + SCRIPTS_PATH_SHORT
BIN_OPENOCD = "bin/openocd" + (".exe" if sys.platform == "win32" else "")


def find_openocd_scripts(openocd_home: Union[str, Path]) -> Optional[Path]:
    """Locate the scripts directory under an OpenOCD install root."""
    home = Path(openocd_home)
    for rel in (SCRIPTS_PATH_LONG, SCRIPTS_PATH_SHORT):
        candidate = home / rel
        if candidate.is_dir():
            return candidate
    return None


def _require_openocd_home(settings: OpenOcdSettings) -> Path:
    if not settings.openocd_home or not Path(settings.openocd_home).is_dir():
        raise ConfigurationMissing("Please open settings and fix OpenOCD home")
    return Path(settings.openocd_home)


def _program_command(
    file_to_load: Optional[Union[str, Path]],
    additional_command: Optional[str],
    shutdown: bool,
) -> str:
    command = ""
    if file_to_load is not None:
        # OpenOCD's Tcl parser wants forward slashes, even on Windows.
        path = os.path.abspath(str(file_to_load)).replace(os.sep, "/")
        command += f'program "{path}";'
    if additional_command is not None:
        command += additional_command + ";"
    if shutdown:
        command += "shutdown"
    return command


def build_run_configuration(
    settings: OpenOcdSettings,
    file_to_load: Optional[Union[str, Path]] = None,
    additional_command: Optional[str] = None,
    shutdown: bool = False,
) -> RunConfiguration:
    """Translate settings plus per-run options into an OpenOCD invocation.

    Args:
        settings: OpenOCD home, board config and ports.
        file_to_load: Firmware image to program, if any.
        additional_command: Extra OpenOCD command appended after ``program``.
        shutdown: Append ``shutdown`` so OpenOCD exits when done.

    Raises:
        ConfigurationMissing: Board config, OpenOCD home, binary or scripts
            directory is missing.
    """
    board_config_file = settings.board_config_file
    if board_config_file is None or not board_config_file.strip():
        raise ConfigurationMissing(
            "Board Config file is not defined.\nPlease open OpenOCD settings and choose one.",
            title="OpenOCD run error",
        )

    home = _require_openocd_home(settings)
    binary = home / BIN_OPENOCD
    if not binary.is_file():
        raise ConfigurationMissing(f"OpenOCD binary not found at {binary}. Please fix OpenOCD home")

    if settings.scripts_dir:
        scripts = Path(settings.scripts_dir)
        if not scripts.is_dir():
            raise ConfigurationMissing(f"OpenOCD scripts directory not found: {scripts}")
    else:
        scripts = find_openocd_scripts(home)
        if scripts is None:
            raise ConfigurationMissing(f"OpenOCD scripts not found under {home}. Please fix OpenOCD home")

    args = ["-c", "tcl_port disabled", "-s", str(scripts.absolute())]

    if settings.gdb_port != DEFAULT_GDB_PORT:
        args += ["-c", f"gdb_port {settings.gdb_port}"]
    if settings.telnet_port != DEFAULT_TELNET_PORT:
        args += ["-c", f"telnet_port {settings.telnet_port}"]

    args += ["-f", board_config_file]

    command = _program_command(file_to_load, additional_command, shutdown)
    if command:
        args += ["-c", command]

    config = RunConfiguration(
        executable=str(binary.absolute()),
        work_dir=str(binary.absolute().parent),
        args=tuple(args),
        file_to_load=str(file_to_load) if file_to_load is not None else None,
        additional_command=additional_command,
        shutdown=shutdown,
    )
    logger.debug("OpenOCD command line: %s", config.command_line())
    return config
