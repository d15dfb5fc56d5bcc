"""Argument parser for the ocdrun CLI."""

from __future__ import annotations

import argparse

from ocdrun import __version__

# Global flags that may appear anywhere on the command line.
_GLOBAL_SWITCHES = {"--json", "-v", "--verbose", "-vv"}
_GLOBAL_VALUE_FLAGS = {"--settings", "--openocd-home", "--board", "--gdb-port", "--telnet-port"}


def _preprocess_argv(argv: list[str]) -> list[str]:
    """Move global flags in front of the subcommand.

    argparse only accepts parent-parser flags before the subcommand; users
    tend to type ``ocdrun flash fw.elf --json``. Flags taking a value are
    moved together with it, in both ``--flag value`` and ``--flag=value``
    form.

    Args:
        argv: Raw argument list (without ``sys.argv[0]``).

    Returns:
        Reordered argument list with global flags moved to the front.
    """
    global_args: list[str] = []
    rest: list[str] = []
    i = 0
    while i < len(argv):
        token = argv[i]
        if token == "--":
            rest.extend(argv[i:])
            break
        if token in _GLOBAL_SWITCHES:
            global_args.append(token)
            i += 1
            continue
        name = token.split("=", 1)[0]
        if name in _GLOBAL_VALUE_FLAGS:
            if "=" in token:
                global_args.append(token)
                i += 1
                continue
            if i + 1 >= len(argv):
                # Let argparse report the missing value.
                rest.append(token)
                i += 1
                continue
            global_args.extend([token, argv[i + 1]])
            i += 2
            continue
        rest.append(token)
        i += 1

    return global_args + rest


def _build_parser() -> argparse.ArgumentParser:
    """Build the full argparse parser with all subcommands."""
    parser = argparse.ArgumentParser(prog="ocdrun", description="Run OpenOCD and report the programming result")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__} (openocd-runner)",
    )
    parser.add_argument("--json", action="store_true", help="Output machine-parseable JSON")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-v info, -vv debug)")
    parser.add_argument("--settings", default=None, help="Settings file (default: ~/.config/ocdrun/settings.json)")
    parser.add_argument("--openocd-home", default=None, help="OpenOCD install root (contains bin/openocd)")
    parser.add_argument("--board", default=None, help="Board config file passed with -f")
    parser.add_argument("--gdb-port", type=int, default=None, help="GDB server port")
    parser.add_argument("--telnet-port", type=int, default=None, help="Telnet port")

    sub = parser.add_subparsers(dest="cmd", required=True)

    p_flash = sub.add_parser("flash", help="Program a firmware file and shut OpenOCD down")
    p_flash.add_argument("file", help="Firmware image (ELF, HEX or BIN)")
    p_flash.add_argument("--command", default=None, help="Extra OpenOCD command run after programming")
    p_flash.add_argument("--timeout", type=float, default=120.0, help="Seconds to wait for OpenOCD to finish")
    p_flash.add_argument("--events", default=None, help="Append run events to this JSONL file")

    p_run = sub.add_parser("run", help="Start OpenOCD and stream its output until it exits or Ctrl+C")
    p_run.add_argument("--command", default=None, help="Extra OpenOCD command run after init")
    p_run.add_argument("--file", default=None, help="Firmware image to program before serving")
    p_run.add_argument("--events", default=None, help="Append run events to this JSONL file")

    p_cmdline = sub.add_parser("command-line", help="Print the OpenOCD command line without running it")
    p_cmdline.add_argument("--file", default=None, help="Firmware image to program")
    p_cmdline.add_argument("--command", default=None, help="Extra OpenOCD command")
    p_cmdline.add_argument("--shutdown", action="store_true", help="Append 'shutdown'")

    p_config = sub.add_parser("config", help="Show resolved settings")
    p_config.add_argument("--save", action="store_true", help="Write the resolved settings to the settings file")

    return parser
