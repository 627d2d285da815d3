"""Unit tests for SelfTest initialisation and finish."""

import logging

import pytest

from selftest.config import HarnessConfig
from selftest.constants import FailurePolicy, Verbosity, WaitState
from selftest.constants import TestClass as GroupClass
from selftest.exceptions import LoopError, SelfTestError
from selftest.harness import SelfTest


class TestInit:
    """Test initial harness state."""

    def test_defaults(self) -> None:
        """Test a new harness starts empty with the most verbose settings."""
        test = SelfTest()

        assert test.total == 0
        assert test.succeeded == 0
        assert test.group_name is None
        assert test.started is False
        assert test.test_class == GroupClass.AUTO
        assert test.verbosity == Verbosity.ALL
        assert test.failure_policy == FailurePolicy.ABORT
        assert test.pending_timeout is None
        assert test.wait_state == WaitState.IDLE
        assert test.user_data is None
        test.loop.close()

    def test_config_is_applied(self) -> None:
        """Test configuration overrides initial modes."""
        config = HarnessConfig(
            test_class=GroupClass.MANUAL,
            verbosity=Verbosity.SILENT,
            failure_policy=FailurePolicy.CONTINUE,
        )
        test = SelfTest(config)

        assert test.test_class == GroupClass.MANUAL
        assert test.verbosity == Verbosity.SILENT
        assert test.failure_policy == FailurePolicy.CONTINUE
        test.loop.close()

    def test_user_data_roundtrip(self, harness) -> None:
        """Test user data is stored untouched."""
        payload = object()
        harness.user_data = payload
        assert harness.user_data is payload


class TestFinish:
    """Test the summary and exit status."""

    def test_example_run(self, make_harness, capsys) -> None:
        """Test a single passing check at NORMAL verbosity."""
        test = make_harness(verbosity=Verbosity.NORMAL)
        test.start_group("math", GroupClass.AUTO)
        test.announce_check("add")
        test.resolve_success()
        test.end_group()

        assert test.finish() == 0
        assert capsys.readouterr().out == "math...OK\ntest passes (1/1) : ALL OKAY\n"

    def test_empty_run_is_okay(self, harness, capsys) -> None:
        """Test finishing with no checks reports success."""
        assert harness.finish() == 0
        assert capsys.readouterr().out == "test passes (0/0) : ALL OKAY\n"

    def test_failures_are_reported(self, make_harness, capsys) -> None:
        """Test failed checks under the continue policy make finish fail."""
        test = make_harness(failure_policy=FailurePolicy.CONTINUE, verbosity=Verbosity.SILENT)
        test.start_group("math")
        for _ in range(2):
            test.announce_check("divide")
            test.resolve_failure()
        test.announce_check("add")
        test.resolve_success()
        test.end_group()

        assert test.finish() == 1
        assert capsys.readouterr().out == "test passes (1/3) : 2 FAILURE(S)\n"

    def test_unresolved_check_counts_as_failure(self, harness) -> None:
        """Test an announced but unresolved check fails the run."""
        harness.start_group("math")
        harness.announce_check("forgotten")
        harness.end_group()

        assert harness.finish() == 1

    def test_finish_releases_resources(self, harness) -> None:
        """Test finish stops the stopwatch and closes the loop."""
        harness.finish()

        assert not harness.stopwatch.running
        assert harness.loop.closed
        with pytest.raises(LoopError):
            harness.bounded_wait(10)

    def test_finish_twice_raises(self, harness) -> None:
        """Test finish may only be called once."""
        harness.finish()
        with pytest.raises(SelfTestError):
            harness.finish()

    def test_finish_with_open_group_warns(self, harness, caplog) -> None:
        """Test finishing inside a group is logged.

        Parameters
        ----------
        caplog : LogCaptureFixture
            Pytest fixture for capturing log output
        """
        harness.start_group("dangling")

        with caplog.at_level(logging.WARNING, logger="selftest.harness"):
            harness.finish()

        assert any("still open" in record.message for record in caplog.records)


class TestCountInvariant:
    """Test succeeded never exceeds total."""

    def test_succeeded_bounded_by_total(self, make_harness) -> None:
        """Test the invariant across a mixed sequence."""
        test = make_harness(failure_policy=FailurePolicy.CONTINUE, verbosity=Verbosity.SILENT)
        test.start_group("mixed")
        previous_total = 0
        for index in range(10):
            test.announce_check("check %d", index)
            assert test.total == previous_total + 1
            previous_total = test.total
            if index % 3:
                test.resolve_success()
            else:
                test.resolve_failure()
            assert test.succeeded <= test.total
        test.end_group()
