"""Tests for bootstrap/exit_codes.py module."""

from server_bootstrap.bootstrap.exit_codes import ExitCode, StopCode


class TestExitCode:
    """Tests for ExitCode enum."""

    def test_values(self) -> None:
        assert ExitCode.OK == 0
        assert ExitCode.SERVER_STARTUP_ERROR == 1
        assert ExitCode.DEPENDENCY_STARTUP_ERROR == 2

    def test_exit_codes_are_unique(self) -> None:
        values = [int(code) for code in ExitCode]
        assert len(values) == len(set(values))


class TestStopCode:
    """Tests for StopCode enum."""

    def test_values(self) -> None:
        assert StopCode.OK == 0
        assert StopCode.FAILED == 1
