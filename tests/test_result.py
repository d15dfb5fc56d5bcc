"""Tests for the RunResult set-or-replace cell."""

from __future__ import annotations

import threading
import time

import pytest

from ocdrun.models import RunStatus
from ocdrun.result import RunResult


class TestRunResult:
    def test_unresolved_poll_returns_none(self):
        result = RunResult()
        assert result.poll() is None
        assert result.done() is False
        assert result.consumed is False

    def test_wait_times_out(self):
        result = RunResult()
        with pytest.raises(TimeoutError):
            result.wait(timeout=0.05)

    def test_last_write_wins(self):
        result = RunResult()
        result.resolve(RunStatus.WARNING)
        result.resolve(RunStatus.SUCCESS)
        assert result.wait(timeout=0) is RunStatus.SUCCESS
        assert result.resolve_count == 2

    def test_resolve_after_read_is_accepted(self):
        result = RunResult()
        result.resolve(RunStatus.SUCCESS)
        assert result.poll() is RunStatus.SUCCESS
        assert result.consumed is True
        result.resolve(RunStatus.ERROR)
        assert result.poll() is RunStatus.ERROR

    def test_resolve_if_unset_only_sets_once(self):
        result = RunResult()
        assert result.resolve_if_unset(RunStatus.ERROR) is True
        assert result.resolve_if_unset(RunStatus.SUCCESS) is False
        assert result.poll() is RunStatus.ERROR

    def test_fallback_does_not_override_marker(self):
        result = RunResult()
        result.resolve(RunStatus.SUCCESS)
        assert result.resolve_if_unset(RunStatus.ERROR) is False
        assert result.wait(timeout=0) is RunStatus.SUCCESS

    def test_wait_unblocks_when_resolved_from_other_thread(self):
        result = RunResult()

        def later():
            time.sleep(0.05)
            result.resolve(RunStatus.WARNING)

        t = threading.Thread(target=later)
        t.start()
        try:
            assert result.wait(timeout=2.0) is RunStatus.WARNING
        finally:
            t.join()

    def test_concurrent_writers_leave_one_value(self):
        result = RunResult()
        barrier = threading.Barrier(2)

        def marker():
            barrier.wait()
            result.resolve(RunStatus.SUCCESS)

        def fallback():
            barrier.wait()
            result.resolve_if_unset(RunStatus.ERROR)

        threads = [threading.Thread(target=marker), threading.Thread(target=fallback)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert result.wait(timeout=0) in (RunStatus.SUCCESS, RunStatus.ERROR)
        assert 1 <= result.resolve_count <= 2


class TestDoneCallbacks:
    def test_callback_called_on_each_resolve(self):
        result = RunResult()
        seen = []
        result.add_done_callback(seen.append)
        result.resolve(RunStatus.WARNING)
        result.resolve(RunStatus.SUCCESS)
        assert seen == [RunStatus.WARNING, RunStatus.SUCCESS]

    def test_callback_added_after_resolve_fires_immediately(self):
        result = RunResult()
        result.resolve(RunStatus.ERROR)
        seen = []
        result.add_done_callback(seen.append)
        assert seen == [RunStatus.ERROR]

    def test_failing_callback_does_not_break_resolve(self):
        result = RunResult()

        def boom(status):
            raise RuntimeError("boom")

        result.add_done_callback(boom)
        result.resolve(RunStatus.SUCCESS)
        assert result.poll() is RunStatus.SUCCESS
