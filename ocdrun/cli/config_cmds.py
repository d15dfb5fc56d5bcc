"""Commands that inspect configuration without starting OpenOCD."""

from __future__ import annotations

from typing import Optional

from ocdrun.command_line import build_run_configuration
from ocdrun.errors import ConfigurationMissing
from ocdrun.settings import OpenOcdSettings, default_settings_path
from ocdrun.cli.helpers import EXIT_NOT_STARTED, _print


def cmd_command_line(
    *,
    settings: OpenOcdSettings,
    file: Optional[str],
    command: Optional[str],
    shutdown: bool,
    json_mode: bool,
) -> int:
    """Print the OpenOCD invocation that ``flash``/``run`` would use.

    Returns:
        Exit code: 0, or 2 if the settings are incomplete.
    """
    try:
        config = build_run_configuration(
            settings,
            file_to_load=file,
            additional_command=command,
            shutdown=shutdown,
        )
    except ConfigurationMissing as e:
        _print({"error": str(e), "title": e.title}, json_mode=json_mode)
        return EXIT_NOT_STARTED

    _print(
        {"argv": config.command_line(), **config.to_dict()},
        json_mode=json_mode,
    )
    return 0


def cmd_config(
    *,
    settings: OpenOcdSettings,
    settings_path: Optional[str],
    save: bool,
    json_mode: bool,
) -> int:
    """Show the resolved settings, optionally persisting them.

    Returns:
        Exit code: always 0.
    """
    path = settings_path or str(default_settings_path())
    if save:
        settings.save(path)
    _print({"settings_path": path, "saved": save, "settings": settings.to_dict()}, json_mode=json_mode)
    return 0
