"""
JSONL log of OpenOCD runs.

One record per lifecycle event or output line, so agents and other processes
can tail a run without attaching to the supervisor. Appends hold an
exclusive file lock; several runs may share one log.

Record layout::

    {"schema_version": 1, "sequence": 7, "timestamp": "...", "run_id": "...",
     "type": "output", "level": "warning", "data": {...}}
"""

from __future__ import annotations

import json
import threading
import uuid
from pathlib import Path
from typing import Optional, Sequence, Union

import portalocker

from .implementations import RealClock
from .interfaces import ClockInterface
from .markers import Classification

SCHEMA_VERSION = 1

_LEVELS = {
    Classification.FAILURE: "error",
    Classification.WARNING: "warning",
}


class RunEventLog:
    """Typed run events appended to a JSONL file.

    Sequence numbers are unique per file and continue from the last record
    already in it.
    """

    def __init__(self, path: Union[str, Path], clock: Optional[ClockInterface] = None) -> None:
        self._path = Path(path)
        self._clock = clock or RealClock()
        self._lock = threading.Lock()
        self._run_id: Optional[str] = None
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._sequence = _last_sequence(self._path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def run_id(self) -> Optional[str]:
        return self._run_id

    def run_started(self, pid: Optional[int], command: Sequence[str], run_id: Optional[str] = None) -> dict:
        """Open a new run; later records carry its ``run_id``."""
        with self._lock:
            self._run_id = run_id or uuid.uuid4().hex[:12]
        return self._append("run_started", "info", {"pid": pid, "command": list(command)})

    def output(self, text: str, source: str, classification: Classification) -> dict:
        return self._append(
            "output",
            _LEVELS.get(classification, "info"),
            {"text": text, "source": source, "classification": classification.value},
        )

    def run_terminating(self, pid: Optional[int], destroyed: bool) -> dict:
        return self._append("run_terminating", "info", {"pid": pid, "destroyed": destroyed})

    def run_terminated(self, pid: Optional[int], exit_code: Optional[int]) -> dict:
        level = "info" if exit_code == 0 else "warning"
        return self._append("run_terminated", level, {"pid": pid, "exit_code": exit_code})

    def _append(self, event_type: str, level: str, data: dict) -> dict:
        with self._lock:
            self._sequence += 1
            record = {
                "schema_version": SCHEMA_VERSION,
                "sequence": self._sequence,
                "timestamp": self._clock.now().isoformat(),
                "run_id": self._run_id,
                "type": event_type,
                "level": level,
                "data": data,
            }
            line = json.dumps(record, sort_keys=True) + "\n"
            with self._path.open("a", encoding="utf-8") as f:
                portalocker.lock(f, portalocker.LOCK_EX)
                try:
                    f.write(line)
                    f.flush()
                finally:
                    portalocker.unlock(f)
        return record


def _last_sequence(path: Path) -> int:
    """Sequence of the last well-formed record in *path*, or 0."""
    try:
        lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    except FileNotFoundError:
        return 0
    for line in reversed(lines):
        if not line.strip():
            continue
        try:
            return int(json.loads(line)["sequence"])
        except (ValueError, TypeError, KeyError):
            return 0
    return 0
