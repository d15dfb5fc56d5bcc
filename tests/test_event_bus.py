"""Tests for OutputEventBus dispatch order and failure isolation."""

from __future__ import annotations

from types import SimpleNamespace

from ocdrun.event_bus import OutputEventBus
from ocdrun.interfaces import ProcessListener
from ocdrun.mocks import RecordingListener
from ocdrun.models import OutputLine


class _Exploding(ProcessListener):
    def __init__(self):
        self.calls = 0

    def on_text(self, line):
        self.calls += 1
        raise RuntimeError("listener bug")

    def on_terminated(self, handle, exit_code):
        raise ValueError("also broken")


class _Ordered(ProcessListener):
    def __init__(self, name, log):
        self._name = name
        self._log = log

    def on_text(self, line):
        self._log.append((self._name, line.text))


class TestOutputEventBus:
    def test_dispatch_in_registration_order(self):
        log = []
        bus = OutputEventBus([_Ordered("a", log), _Ordered("b", log)])
        bus.dispatch_text(OutputLine("one"))
        bus.dispatch_text(OutputLine("two"))
        assert log == [("a", "one"), ("b", "one"), ("a", "two"), ("b", "two")]

    def test_failing_listener_does_not_block_others(self):
        exploding = _Exploding()
        recorder = RecordingListener()
        bus = OutputEventBus([exploding, recorder])
        handle = SimpleNamespace(pid=7)

        bus.dispatch_text(OutputLine("first"))
        bus.dispatch_text(OutputLine("second"))
        bus.dispatch_terminated(handle, 1)

        assert exploding.calls == 2
        assert recorder.texts() == ["first", "second"]
        assert ("terminated", 1) in recorder.events

    def test_failure_is_logged(self, caplog):
        bus = OutputEventBus([_Exploding()])
        with caplog.at_level("ERROR", logger="ocdrun.event_bus"):
            bus.dispatch_text(OutputLine("x"))
        assert "_Exploding" in caplog.text

    def test_default_lifecycle_hooks_are_noops(self):
        log = []
        bus = OutputEventBus([_Ordered("a", log)])
        handle = SimpleNamespace(pid=1)
        bus.dispatch_started(handle)
        bus.dispatch_will_terminate(handle, True)
        bus.dispatch_terminated(handle, 0)
        assert log == []

    def test_subscribe_is_idempotent_and_unsubscribe_removes(self):
        recorder = RecordingListener()
        bus = OutputEventBus()
        bus.subscribe(recorder)
        bus.subscribe(recorder)
        assert bus.listeners == [recorder]
        bus.unsubscribe(recorder)
        bus.dispatch_text(OutputLine("ignored"))
        assert recorder.events == []
