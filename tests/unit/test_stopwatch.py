"""Unit tests for Stopwatch."""

import time

from selftest.stopwatch import Stopwatch


class TestStopwatchBasic:
    """Test elapsed time tracking."""

    def test_elapsed_seconds(self) -> None:
        """Test elapsed time grows while running."""
        stopwatch = Stopwatch()
        time.sleep(0.05)
        assert stopwatch.elapsed_seconds() >= 0.049

    def test_elapsed_ms_is_truncated_int(self) -> None:
        """Test millisecond reading is an integer."""
        stopwatch = Stopwatch()
        time.sleep(0.02)
        elapsed = stopwatch.elapsed_ms()
        assert isinstance(elapsed, int)
        assert elapsed >= 19

    def test_reset_restarts_from_zero(self) -> None:
        """Test reset discards time measured before it."""
        stopwatch = Stopwatch()
        time.sleep(0.1)
        stopwatch.reset()
        assert stopwatch.elapsed_seconds() < 0.1


class TestStopwatchStop:
    """Test stopping the stopwatch."""

    def test_stop_freezes_reading(self) -> None:
        """Test reading does not advance after stop."""
        stopwatch = Stopwatch()
        stopwatch.stop()
        frozen = stopwatch.elapsed_seconds()
        time.sleep(0.02)
        assert stopwatch.elapsed_seconds() == frozen
        assert not stopwatch.running

    def test_stop_twice_keeps_first_reading(self) -> None:
        """Test a second stop does not move the frozen time."""
        stopwatch = Stopwatch()
        stopwatch.stop()
        first = stopwatch.elapsed_seconds()
        time.sleep(0.02)
        stopwatch.stop()
        assert stopwatch.elapsed_seconds() == first

    def test_reset_after_stop_resumes(self) -> None:
        """Test reset starts measuring again."""
        stopwatch = Stopwatch()
        stopwatch.stop()
        stopwatch.reset()
        assert stopwatch.running
        time.sleep(0.02)
        assert stopwatch.elapsed_ms() >= 19
