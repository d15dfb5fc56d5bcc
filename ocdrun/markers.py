"""
Marker classification for OpenOCD console output.

OpenOCD does not report a structured result. Whether programming worked is
only visible from a handful of literal strings it prints. This module maps a
single line to a classification; it keeps no state between calls.

Precedence on a line that matches more than one category:

1. any failure string            -> FAILURE
2. the success string            -> SUCCESS
3. "Error: " prefix              -> WARNING, unless an ignored string is present
4. anything else                 -> NONE
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from .models import RunStatus


SUCCESS_TEXT = "** Programming Finished **"

FAIL_STRINGS = (
    "** Programming Failed **",
    "communication failure",
    "** OpenOCD init failed **",
)

ERROR_PREFIX = "Error: "

# Harmless "Error: " lines printed during normal operation.
IGNORED_STRINGS = (
    "clearing lockup after double fault",
    "LIB_USB_NOT_SUPPORTED",
)


class Classification(Enum):
    """Meaning of a single output line."""
    FAILURE = "failure"
    SUCCESS = "success"
    WARNING = "warning"
    NONE = "none"


_STATUS_BY_CLASSIFICATION = {
    Classification.FAILURE: RunStatus.ERROR,
    Classification.SUCCESS: RunStatus.SUCCESS,
    Classification.WARNING: RunStatus.WARNING,
}


def contains_one_of(text: Optional[str], samples: Iterable[str]) -> bool:
    """Return True if *text* contains any of *samples* (case-sensitive)."""
    if not text:
        return False
    return any(sample in text for sample in samples)


def classify_line(line: Optional[str]) -> Classification:
    """Classify one line of OpenOCD output."""
    text = (line or "").strip()
    if not text:
        return Classification.NONE
    if contains_one_of(text, FAIL_STRINGS):
        return Classification.FAILURE
    if SUCCESS_TEXT in text:
        return Classification.SUCCESS
    if text.startswith(ERROR_PREFIX) and not contains_one_of(text, IGNORED_STRINGS):
        return Classification.WARNING
    return Classification.NONE


def status_for(classification: Classification) -> Optional[RunStatus]:
    """Run status a classification decides, or None if it is not decisive."""
    return _STATUS_BY_CLASSIFICATION.get(classification)
