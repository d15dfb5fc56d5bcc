"""Value types shared by the supervisor, the bus and the listeners."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional


class RunStatus(Enum):
    """Terminal outcome of one run."""
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class ProcessState(Enum):
    """Lifecycle of a spawned process."""
    NOT_STARTED = "not_started"
    RUNNING = "running"
    TERMINATING = "terminating"
    TERMINATED = "terminated"


class OutputSource(Enum):
    """Where an output line came from."""
    STDOUT = "stdout"
    STDERR = "stderr"
    SYSTEM = "system"


@dataclass(frozen=True)
class OutputLine:
    """One line of process output, without its line terminator."""
    text: str
    source: OutputSource = OutputSource.STDOUT


@dataclass(frozen=True)
class RunConfiguration:
    """How to invoke OpenOCD for a single run.

    ``args`` is forwarded verbatim. ``file_to_load``, ``additional_command``
    and ``shutdown`` are already folded into ``args`` by
    :func:`ocdrun.command_line.build_run_configuration`; they are kept for
    reporting only.

    ``env`` holds overrides applied on top of the inherited parent
    environment.
    """

    executable: str
    work_dir: Optional[str] = None
    args: tuple[str, ...] = ()
    file_to_load: Optional[str] = None
    additional_command: Optional[str] = None
    shutdown: bool = False
    env: Optional[Mapping[str, str]] = field(default=None, compare=False)

    def command_line(self) -> list[str]:
        return [self.executable, *self.args]

    def to_dict(self) -> dict:
        return {
            "executable": self.executable,
            "work_dir": self.work_dir,
            "args": list(self.args),
            "file_to_load": self.file_to_load,
            "additional_command": self.additional_command,
            "shutdown": self.shutdown,
        }
