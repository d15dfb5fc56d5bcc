"""OpenOCD settings: where OpenOCD lives and which board to drive.

Settings are stored as JSON (``~/.config/ocdrun/settings.json`` by default)
and can be overridden from the environment or per run.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_GDB_PORT = 3333
DEFAULT_TELNET_PORT = 4444

ENV_OPENOCD_HOME = "OCDRUN_OPENOCD_HOME"
ENV_BOARD_CONFIG = "OCDRUN_BOARD_CONFIG"
ENV_GDB_PORT = "OCDRUN_GDB_PORT"
ENV_TELNET_PORT = "OCDRUN_TELNET_PORT"


def default_settings_path() -> Path:
    config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
    return Path(config_home) / "ocdrun" / "settings.json"


@dataclass(frozen=True)
class OpenOcdSettings:
    """Global OpenOCD settings.

    Attributes:
        openocd_home: OpenOCD install root (contains ``bin/openocd``).
        board_config_file: Board config passed with ``-f``.
        gdb_port: GDB server port; only passed when not the default.
        telnet_port: Telnet port; only passed when not the default.
        scripts_dir: Explicit scripts directory, else found under the home.
    """

    openocd_home: Optional[str] = None
    board_config_file: Optional[str] = None
    gdb_port: int = DEFAULT_GDB_PORT
    telnet_port: int = DEFAULT_TELNET_PORT
    scripts_dir: Optional[str] = None

    @classmethod
    def load(cls, path: Union[str, Path, None] = None) -> "OpenOcdSettings":
        """Load settings from JSON; missing or unreadable files give defaults."""
        path = Path(path) if path else default_settings_path()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.debug("No settings at %s, using defaults", path)
            return cls()
        except (OSError, ValueError) as e:
            logger.warning("Unreadable settings file %s (%s), using defaults", path, e)
            return cls()
        if not isinstance(data, dict):
            logger.warning("Settings file %s does not hold an object, using defaults", path)
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown settings keys in %s: %s", path, ", ".join(unknown))
        return cls(**{k: v for k, v in data.items() if k in known})

    def save(self, path: Union[str, Path, None] = None) -> Path:
        """Write settings as JSON; the file is replaced in one step."""
        path = Path(path) if path else default_settings_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        staged = path.with_name(path.name + ".new")
        staged.write_text(json.dumps(self.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
        os.replace(staged, path)
        return path

    def with_overrides(self, **overrides) -> "OpenOcdSettings":
        """Copy with every non-None override applied.

        Mirrors a run configuration overriding the global board file and
        ports.
        """
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def from_env(self, environ: Optional[Mapping[str, str]] = None) -> "OpenOcdSettings":
        """Copy with ``OCDRUN_*`` environment variables applied."""
        env = os.environ if environ is None else environ
        return self.with_overrides(
            openocd_home=env.get(ENV_OPENOCD_HOME) or None,
            board_config_file=env.get(ENV_BOARD_CONFIG) or None,
            gdb_port=_int_env(env, ENV_GDB_PORT),
            telnet_port=_int_env(env, ENV_TELNET_PORT),
        )

    def to_dict(self) -> dict:
        return asdict(self)


def _int_env(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = env.get(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return None
