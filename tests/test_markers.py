"""Tests for OpenOCD output marker classification."""

from __future__ import annotations

import pytest

from ocdrun.markers import (
    ERROR_PREFIX,
    FAIL_STRINGS,
    IGNORED_STRINGS,
    SUCCESS_TEXT,
    Classification,
    classify_line,
    contains_one_of,
    status_for,
)
from ocdrun.models import RunStatus


class TestClassifyLine:
    """Precedence: failure > success > error prefix (unless ignored) > none."""

    @pytest.mark.parametrize("marker", FAIL_STRINGS)
    def test_failure_strings_anywhere_in_line(self, marker):
        assert classify_line(marker) is Classification.FAILURE
        assert classify_line(f"Info : something {marker} trailing text") is Classification.FAILURE

    def test_success_exact_and_substring(self):
        assert classify_line(SUCCESS_TEXT) is Classification.SUCCESS
        assert classify_line(f"  {SUCCESS_TEXT}  \r\n") is Classification.SUCCESS
        assert classify_line(f"Info : {SUCCESS_TEXT} in 1.2s") is Classification.SUCCESS

    def test_failure_wins_over_success_on_same_line(self):
        line = f"{SUCCESS_TEXT} ... ** Programming Failed **"
        assert classify_line(line) is Classification.FAILURE

    def test_error_prefix_is_warning(self):
        assert classify_line("Error: timed out while waiting for target halted") is Classification.WARNING

    @pytest.mark.parametrize("ignored", IGNORED_STRINGS)
    def test_ignored_strings_suppress_error_prefix(self, ignored):
        assert classify_line(f"{ERROR_PREFIX}{ignored}") is Classification.NONE

    def test_ignored_strings_do_not_suppress_failure(self):
        line = "communication failure (LIB_USB_NOT_SUPPORTED)"
        assert classify_line(line) is Classification.FAILURE

    def test_error_prefix_must_start_line(self):
        assert classify_line("Info : got Error: later in the line") is Classification.NONE

    def test_case_sensitive(self):
        assert classify_line("** programming finished **") is Classification.NONE
        assert classify_line("error: lowercase prefix") is Classification.NONE
        assert classify_line("COMMUNICATION FAILURE") is Classification.NONE

    @pytest.mark.parametrize("line", ["", "   ", None, "Info : Listening on port 3333 for gdb connections"])
    def test_inert_lines(self, line):
        assert classify_line(line) is Classification.NONE


class TestStatusFor:
    def test_mapping(self):
        assert status_for(Classification.FAILURE) is RunStatus.ERROR
        assert status_for(Classification.SUCCESS) is RunStatus.SUCCESS
        assert status_for(Classification.WARNING) is RunStatus.WARNING
        assert status_for(Classification.NONE) is None


class TestContainsOneOf:
    def test_empty_text_never_matches(self):
        assert contains_one_of("", ["a"]) is False
        assert contains_one_of(None, ["a"]) is False

    def test_any_sample(self):
        assert contains_one_of("abc", ["x", "b"]) is True
        assert contains_one_of("abc", ["x", "y"]) is False
