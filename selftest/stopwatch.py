"""Elapsed-time measurement for individual checks."""

import time


class Stopwatch:
    """Monotonic stopwatch timing a single check.

    The stopwatch starts running when created. ``reset()`` restarts it from
    zero and ``stop()`` freezes the current reading until the next reset.

    Attributes
    ----------
    start_time : float
        Monotonic timestamp of the last reset
    stop_time : float | None
        Monotonic timestamp at which the stopwatch was stopped, if stopped
    """

    def __init__(self) -> None:
        self.start_time = time.monotonic()
        self.stop_time: float | None = None

    def reset(self) -> None:
        """Restart measurement from zero."""
        self.start_time = time.monotonic()
        self.stop_time = None

    def stop(self) -> None:
        """Freeze the reading at the current elapsed time."""
        if self.stop_time is None:
            self.stop_time = time.monotonic()

    @property
    def running(self) -> bool:
        """Whether the stopwatch is still measuring."""
        return self.stop_time is None

    def elapsed_seconds(self) -> float:
        """Get elapsed time since the last reset.

        Returns
        -------
        float
            Elapsed seconds
        """
        end = self.stop_time if self.stop_time is not None else time.monotonic()
        return end - self.start_time

    def elapsed_ms(self) -> int:
        """Get elapsed time since the last reset in whole milliseconds.

        Returns
        -------
        int
            Elapsed milliseconds, truncated toward zero
        """
        return int(self.elapsed_seconds() * 1000.0)
