# tests/unit/telemetry/test_console_sink.py
"""Tests for ConsoleSink."""

import io
import json
from typing import Any

import pytest

from scmpulse.contracts import CheckoutEvent
from scmpulse.telemetry.errors import TelemetrySinkError
from scmpulse.telemetry.sinks.console import ConsoleSink


@pytest.fixture
def event() -> CheckoutEvent:
    return CheckoutEvent(
        title="Job demo/main build #42 checkout finished on agent",
        text="%%%\nbody\n%%%",
        host="agent",
        tags=("job:demo/main", "team:ci"),
        aggregation_key="demo/main",
    )


def _payload_lines(text: str) -> list[str]:
    """Sink output lines, without any debug log lines."""
    return [line for line in text.splitlines() if line.startswith(('{"type"', "[event]", "[counter]"))]


def _configured(**options: Any) -> ConsoleSink:
    sink = ConsoleSink()
    sink.configure(options)
    return sink


class TestConsoleSinkConfiguration:
    def test_name(self) -> None:
        assert ConsoleSink().name == "console"

    @pytest.mark.parametrize(
        ("options", "match"),
        [
            ({"format": "xml"}, "Invalid format"),
            ({"format": 1}, "'format' must be a string"),
            ({"output": "file"}, "Invalid output"),
            ({"output": None}, "'output' must be a string"),
        ],
    )
    def test_invalid_options_rejected(self, options: dict[str, Any], match: str) -> None:
        with pytest.raises(TelemetrySinkError, match=match):
            ConsoleSink().configure(options)


class TestConsoleSinkOutput:
    def test_json_event(self, event: CheckoutEvent, capsys: pytest.CaptureFixture[str]) -> None:
        _configured().send_event(event)

        [line] = _payload_lines(capsys.readouterr().out)
        record = json.loads(line)
        assert record == {
            "type": "event",
            "title": event.title,
            "text": event.text,
            "host": "agent",
            "tags": ["job:demo/main", "team:ci"],
            "aggregation_key": "demo/main",
            "alert_type": "info",
            "priority": "low",
            "source_type_name": "jenkins",
            "date_happened": None,
        }

    def test_json_counter(self, capsys: pytest.CaptureFixture[str]) -> None:
        _configured().increment_counter("jenkins.scm.checkout", "agent", ("job:demo/main",))

        [line] = _payload_lines(capsys.readouterr().out)
        assert json.loads(line) == {
            "type": "counter",
            "metric": "jenkins.scm.checkout",
            "host": "agent",
            "tags": ["job:demo/main"],
            "value": 1,
        }

    def test_pretty_output(self, event: CheckoutEvent, capsys: pytest.CaptureFixture[str]) -> None:
        sink = _configured(format="pretty")

        sink.send_event(event)
        sink.increment_counter("jenkins.scm.checkout", "agent", event.tags)

        assert _payload_lines(capsys.readouterr().out) == [
            f"[event] {event.title} (host=agent, tags=job:demo/main,team:ci)",
            "[counter] jenkins.scm.checkout +1 (host=agent, tags=job:demo/main,team:ci)",
        ]

    def test_stderr_output(self, event: CheckoutEvent, capsys: pytest.CaptureFixture[str]) -> None:
        _configured(output="stderr").send_event(event)

        captured = capsys.readouterr()
        assert _payload_lines(captured.out) == []
        [line] = _payload_lines(captured.err)
        assert json.loads(line)["type"] == "event"

    def test_closed_stream_raises_sink_error(self, event: CheckoutEvent, monkeypatch: pytest.MonkeyPatch) -> None:
        stream = io.StringIO()
        monkeypatch.setattr("sys.stdout", stream)
        sink = _configured()
        stream.close()

        with pytest.raises(TelemetrySinkError, match="write to stdout failed"):
            sink.send_event(event)

    def test_flush_and_close_are_safe(self) -> None:
        sink = _configured()

        sink.flush()
        sink.close()
        sink.close()
