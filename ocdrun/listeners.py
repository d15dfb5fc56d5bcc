"""Listeners attached to an OpenOCD run's output bus."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Optional, TextIO

from .event_log import RunEventLog
from .interfaces import NotificationKind, Notifier, ProcessListener
from .markers import Classification, classify_line, status_for
from .models import OutputLine, OutputSource, RunStatus
from .result import RunResult

if TYPE_CHECKING:
    from .supervisor import ProcessHandle

logger = logging.getLogger(__name__)


class ResultFollower(ProcessListener):
    """Feeds decisive lines into a :class:`RunResult`.

    Every decisive line replaces the stored status. If the process exits
    without printing one, the result falls back to ERROR.
    """

    def __init__(self, result: RunResult) -> None:
        self._result = result

    @property
    def result(self) -> RunResult:
        return self._result

    def on_text(self, line: OutputLine) -> None:
        if line.source is OutputSource.SYSTEM:
            return
        status = status_for(classify_line(line.text))
        if status is not None:
            logger.debug("Decisive line (%s): %s", status.value, line.text.strip())
            self._result.resolve(status)

    def on_terminated(self, handle: "ProcessHandle", exit_code: Optional[int]) -> None:
        if self._result.resolve_if_unset(RunStatus.ERROR):
            logger.info("OpenOCD exited (code %s) without a result marker", exit_code)


class NotificationListener(ProcessListener):
    """Turns marker lines into user notifications.

    Failure and warning lines produce a failure notification, the success
    marker a success notification. A run that ends without any notification
    gets a failure notification on exit.
    """

    def __init__(self, notifier: Notifier) -> None:
        self._notifier = notifier
        self._notified = False

    def on_started(self, handle: "ProcessHandle") -> None:
        self._notified = False

    def on_text(self, line: OutputLine) -> None:
        if line.source is OutputSource.SYSTEM:
            return
        classification = classify_line(line.text)
        text = line.text.strip()
        if classification is Classification.FAILURE:
            self._send(NotificationKind.FAILURE, f"MCU programming failed: {text}")
        elif classification is Classification.WARNING:
            self._send(NotificationKind.FAILURE, f"OpenOCD reported an error: {text}")
        elif classification is Classification.SUCCESS:
            self._send(NotificationKind.SUCCESS, "MCU programming finished")

    def on_terminated(self, handle: "ProcessHandle", exit_code: Optional[int]) -> None:
        if not self._notified:
            self._send(NotificationKind.FAILURE, f"OpenOCD exited with code {exit_code} before reporting a result")

    def _send(self, kind: NotificationKind, message: str) -> None:
        self._notified = True
        self._notifier.notify(kind, message)


class ConsoleListener(ProcessListener):
    """Renders OpenOCD output to a text stream.

    Failure and warning lines are highlighted red and the success marker
    green; supervisor messages are dimmed. Colors are only used when the
    stream is a TTY unless ``color`` is given explicitly.
    """

    RED = "\033[31m"
    GREEN = "\033[32m"
    DIM = "\033[2m"
    RESET = "\033[0m"

    def __init__(self, stream: Optional[TextIO] = None, color: Optional[bool] = None) -> None:
        self._stream = stream or sys.stdout
        if color is None:
            isatty = getattr(self._stream, "isatty", None)
            color = bool(isatty and isatty())
        self._color = color

    def on_text(self, line: OutputLine) -> None:
        self._stream.write(self.render(line) + "\n")
        self._stream.flush()

    def render(self, line: OutputLine) -> str:
        if not self._color:
            return line.text
        if line.source is OutputSource.SYSTEM:
            return f"{self.DIM}{line.text}{self.RESET}"
        classification = classify_line(line.text)
        if classification in (Classification.FAILURE, Classification.WARNING):
            return f"{self.RED}{line.text}{self.RESET}"
        if classification is Classification.SUCCESS:
            return f"{self.GREEN}{line.text}{self.RESET}"
        return line.text


class EventLogListener(ProcessListener):
    """Records run lifecycle and output in a :class:`RunEventLog`."""

    def __init__(self, log: RunEventLog) -> None:
        self._log = log

    def on_started(self, handle: "ProcessHandle") -> None:
        self._log.run_started(handle.pid, handle.config.command_line())

    def on_text(self, line: OutputLine) -> None:
        self._log.output(line.text, line.source.value, classify_line(line.text))

    def on_will_terminate(self, handle: "ProcessHandle", will_be_destroyed: bool) -> None:
        self._log.run_terminating(handle.pid, will_be_destroyed)

    def on_terminated(self, handle: "ProcessHandle", exit_code: Optional[int]) -> None:
        self._log.run_terminated(handle.pid, exit_code)
