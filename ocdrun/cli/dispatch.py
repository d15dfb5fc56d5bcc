"""Command dispatch for the ocdrun CLI."""

from __future__ import annotations

import sys
from typing import Optional

from ocdrun.cli.parser import _build_parser, _preprocess_argv
from ocdrun.cli.helpers import _configure_logging


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the ``ocdrun`` CLI.

    Args:
        argv: Argument list to parse.  Defaults to ``sys.argv[1:]``.

    Returns:
        Exit code: 0 on success, non-zero on error.
    """
    if argv is None:
        argv = sys.argv[1:]

    argv = _preprocess_argv(argv)

    # Late import to allow tests to monkeypatch ocdrun.cli.cmd_xxx and ocdrun.cli._resolve_settings
    import ocdrun.cli as cli

    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    settings = cli._resolve_settings(
        args.settings,
        openocd_home=args.openocd_home,
        board=args.board,
        gdb_port=args.gdb_port,
        telnet_port=args.telnet_port,
    )

    if args.cmd == "flash":
        return cli.cmd_flash(
            settings=settings,
            file=args.file,
            command=args.command,
            timeout_s=args.timeout,
            events_path=args.events,
            json_mode=args.json,
        )
    if args.cmd == "run":
        return cli.cmd_run(
            settings=settings,
            file=args.file,
            command=args.command,
            events_path=args.events,
            json_mode=args.json,
        )
    if args.cmd == "command-line":
        return cli.cmd_command_line(
            settings=settings,
            file=args.file,
            command=args.command,
            shutdown=args.shutdown,
            json_mode=args.json,
        )
    if args.cmd == "config":
        return cli.cmd_config(
            settings=settings,
            settings_path=args.settings,
            save=args.save,
            json_mode=args.json,
        )

    parser.error(f"unknown command: {args.cmd}")
    return 2
