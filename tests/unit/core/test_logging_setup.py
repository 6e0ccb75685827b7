# tests/unit/core/test_logging_setup.py
"""Tests for configure_logging()."""

import io
import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from scmpulse.core.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestConfigureLogging:
    def test_json_lines_carry_event_fields(self) -> None:
        stream = io.StringIO()
        configure_logging(json_output=True, stream=stream)

        structlog.get_logger("scmpulse.test").warning("Sink failed", sink="datadog")

        record = json.loads(stream.getvalue())
        assert record["event"] == "Sink failed"
        assert record["sink"] == "datadog"
        assert record["level"] == "warning"
        assert "_record" not in record

    def test_level_filters_debug(self) -> None:
        stream = io.StringIO()
        configure_logging(level="info", stream=stream)

        structlog.get_logger("scmpulse.test").debug("hidden")

        assert stream.getvalue() == ""

    def test_stdlib_records_share_handler(self) -> None:
        stream = io.StringIO()
        configure_logging(json_output=True, stream=stream)

        logging.getLogger("scmpulse.stdlib").error("plain %s", "record")

        assert json.loads(stream.getvalue())["event"] == "plain record"

    def test_http_loggers_kept_at_warning(self) -> None:
        configure_logging(level="DEBUG", stream=io.StringIO())

        assert logging.getLogger("httpx").level == logging.WARNING

    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging(level="LOUD", stream=io.StringIO())
