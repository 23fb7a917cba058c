"""Unit tests for the configured logging service."""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest

from server_bootstrap.config.models import LoggingConfig
from server_bootstrap.logging import CONSOLE_LOGGER_NAME, LoggingService


class Component:
    pass


@pytest.fixture
def streams() -> tuple[io.StringIO, io.StringIO]:
    return io.StringIO(), io.StringIO()


def _service(
    config: LoggingConfig, streams: tuple[io.StringIO, io.StringIO]
) -> LoggingService:
    stderr, stdout = streams
    return LoggingService(config, stderr=stderr, stdout=stdout)


class TestInstall:
    """Tests for handler installation."""

    def test_file_handler_writes_text(
        self, tmp_path: Path, streams: tuple[io.StringIO, io.StringIO]
    ) -> None:
        log_file = tmp_path / "logs" / "messages.log"
        service = _service(LoggingConfig(file=log_file), streams)

        service.get_messages_log("app.store").info("store opened")
        service.stop()

        content = log_file.read_text()
        assert "app.store - INFO - store opened" in content
        assert streams[0].getvalue() == ""

    def test_json_format(
        self, tmp_path: Path, streams: tuple[io.StringIO, io.StringIO]
    ) -> None:
        log_file = tmp_path / "messages.log"
        service = _service(LoggingConfig(file=log_file, format="json"), streams)

        service.get_messages_log("app").warning("disk %d%% full", 90)
        service.stop()

        entry = json.loads(log_file.read_text().splitlines()[-1])
        assert entry["level"] == "WARNING"
        assert entry["message"] == "disk 90% full"
        assert entry["logger"] == "app"

    def test_stderr_when_no_file(
        self, streams: tuple[io.StringIO, io.StringIO]
    ) -> None:
        service = _service(LoggingConfig(file=None), streams)

        service.get_messages_log("app").error("no file configured")
        service.stop()

        assert "no file configured" in streams[0].getvalue()

    def test_stderr_fallback_when_file_unwritable(
        self, tmp_path: Path, streams: tuple[io.StringIO, io.StringIO]
    ) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        service = _service(LoggingConfig(file=blocker / "messages.log"), streams)

        service.get_messages_log("app").error("still reported")
        service.stop()

        stderr = streams[0].getvalue()
        assert "Could not open log file" in stderr
        assert "still reported" in stderr

    def test_include_stderr(
        self, tmp_path: Path, streams: tuple[io.StringIO, io.StringIO]
    ) -> None:
        service = _service(
            LoggingConfig(file=tmp_path / "m.log", include_stderr=True), streams
        )
        assert len(service.handlers) == 3
        service.stop()

    def test_level_filters(
        self, tmp_path: Path, streams: tuple[io.StringIO, io.StringIO]
    ) -> None:
        log_file = tmp_path / "m.log"
        service = _service(LoggingConfig(file=log_file, level="warning"), streams)

        log = service.get_messages_log("app")
        log.info("hidden")
        log.warning("shown")
        service.stop()

        content = log_file.read_text()
        assert "hidden" not in content
        assert "shown" in content


class TestLoggers:
    """Tests for the logger accessors."""

    def test_messages_log_for_class(
        self, streams: tuple[io.StringIO, io.StringIO]
    ) -> None:
        service = _service(LoggingConfig(), streams)
        log = service.get_messages_log(Component)
        assert log.name == f"{__name__}.Component"
        service.stop()

    def test_console_log_writes_stdout_and_file(
        self, tmp_path: Path, streams: tuple[io.StringIO, io.StringIO]
    ) -> None:
        log_file = tmp_path / "m.log"
        service = _service(LoggingConfig(file=log_file), streams)

        console = service.get_console_log("bootstrap")
        assert console.name == f"{CONSOLE_LOGGER_NAME}.bootstrap"
        console.info("Server started")
        service.stop()

        assert "INFO Server started" in streams[1].getvalue()
        assert "Server started" in log_file.read_text()


class TestLifecycle:
    """Tests for start/stop."""

    def test_stop_removes_only_own_handlers(
        self, streams: tuple[io.StringIO, io.StringIO]
    ) -> None:
        root = logging.getLogger()
        foreign = logging.NullHandler()
        root.addHandler(foreign)
        previous_level = root.level

        service = _service(LoggingConfig(level="debug"), streams)
        installed = service.handlers
        assert root.level == logging.DEBUG

        service.stop()

        assert foreign in root.handlers
        assert not any(handler in root.handlers for handler in installed)
        assert not logging.getLogger(CONSOLE_LOGGER_NAME).handlers
        assert root.level == previous_level
        assert service.closed
        assert service.handlers == []

    def test_stop_is_idempotent(
        self, streams: tuple[io.StringIO, io.StringIO]
    ) -> None:
        service = _service(LoggingConfig(), streams)
        service.stop()
        service.stop()
        assert service.closed

    def test_start_after_stop_raises(
        self, streams: tuple[io.StringIO, io.StringIO]
    ) -> None:
        service = _service(LoggingConfig(), streams)
        service.start()
        service.stop()

        with pytest.raises(ValueError, match="already been stopped"):
            service.start()
