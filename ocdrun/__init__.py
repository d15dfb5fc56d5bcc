"""
OpenOCD run supervisor

Launches OpenOCD, streams its console output to listeners and classifies
the run's outcome (success, warning, error) from the output markers.
"""

__version__ = "0.1.0"

from .errors import OcdRunError, ConfigurationMissing, LaunchFailure, AlreadyRunning
from .models import RunStatus, ProcessState, OutputSource, OutputLine, RunConfiguration
from .markers import Classification, classify_line, status_for
from .result import RunResult
from .interfaces import ProcessListener, ProcessLauncherInterface, Notifier, NotificationKind
from .event_bus import OutputEventBus
from .supervisor import ProcessSupervisor, ProcessHandle, STOP_TIMEOUT_S
from .settings import OpenOcdSettings
from .command_line import build_run_configuration, find_openocd_scripts
from .runner import OpenOcdRunner

__all__ = [
    "__version__",
    "OcdRunError",
    "ConfigurationMissing",
    "LaunchFailure",
    "AlreadyRunning",
    "RunStatus",
    "ProcessState",
    "OutputSource",
    "OutputLine",
    "RunConfiguration",
    "Classification",
    "classify_line",
    "status_for",
    "RunResult",
    "ProcessListener",
    "ProcessLauncherInterface",
    "Notifier",
    "NotificationKind",
    "OutputEventBus",
    "ProcessSupervisor",
    "ProcessHandle",
    "STOP_TIMEOUT_S",
    "OpenOcdSettings",
    "build_run_configuration",
    "find_openocd_scripts",
    "OpenOcdRunner",
]
