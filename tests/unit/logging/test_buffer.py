"""Unit tests for the buffered early-diagnostics log."""

from __future__ import annotations

import logging

import pytest

from server_bootstrap.logging import BufferedLog


@pytest.fixture
def sink(caplog: pytest.LogCaptureFixture) -> logging.Logger:
    caplog.set_level(logging.DEBUG, logger="test.sink")
    return logging.getLogger("test.sink")


class TestBufferedLog:
    """Tests for BufferedLog."""

    def test_records_in_order(self) -> None:
        buffer = BufferedLog()
        buffer.info("first")
        buffer.warning("second %s", "arg")
        buffer.debug("third")

        assert [r.message for r in buffer.records] == [
            "first",
            "second arg",
            "third",
        ]
        assert [r.level for r in buffer.records] == [
            logging.INFO,
            logging.WARNING,
            logging.DEBUG,
        ]

    def test_formats_at_emission(self) -> None:
        buffer = BufferedLog()
        values = ["before"]
        buffer.info("value %s", values)
        values[0] = "after"

        assert buffer.records[0].message == "value ['before']"

    def test_replay_preserves_order_and_levels(
        self, sink: logging.Logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        buffer = BufferedLog()
        buffer.info("one")
        buffer.warning("two")
        buffer.error("three")

        assert buffer.replay_into(sink) == 3
        assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
            (logging.INFO, "one"),
            (logging.WARNING, "two"),
            (logging.ERROR, "three"),
        ]

    def test_replay_keeps_cause(
        self, sink: logging.Logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        buffer = BufferedLog()
        error = ValueError("bad value")
        buffer.error("failed", exc_info=error)

        buffer.replay_into(sink)

        assert buffer.records == ()
        assert caplog.records[0].exc_info[1] is error

    def test_percent_in_replayed_text_is_literal(
        self, sink: logging.Logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        buffer = BufferedLog()
        buffer.info("load at %s", "100%d")

        buffer.replay_into(sink)

        assert caplog.records[0].getMessage() == "load at 100%d"

    def test_replay_only_once(
        self, sink: logging.Logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        buffer = BufferedLog()
        buffer.info("once")

        assert buffer.replay_into(sink) == 1
        assert buffer.exhausted
        assert buffer.replay_into(sink) == 0
        assert [r.getMessage() for r in caplog.records] == ["once"]

    def test_forwards_after_replay(
        self, sink: logging.Logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        buffer = BufferedLog()
        buffer.replay_into(sink)
        buffer.warning("late %d", 5)

        assert buffer.records == ()
        assert caplog.records[-1].getMessage() == "late 5"
        assert caplog.records[-1].levelno == logging.WARNING

    def test_empty_replay(self, sink: logging.Logger) -> None:
        assert BufferedLog().replay_into(sink) == 0
