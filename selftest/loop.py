"""Cooperative single-threaded main loop with timeout sources."""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from selftest.exceptions import LoopError

logger = logging.getLogger(__name__)


@dataclass(order=True)
class TimeoutSource:
    """A callback scheduled on the main loop.

    Attributes
    ----------
    deadline : float
        Monotonic timestamp at which the callback becomes due
    source_id : int
        Identifier returned to the caller that registered the source
    interval : float
        Seconds between dispatches when the callback asks to repeat
    callback : Callable[..., Any]
        Callable invoked when the source is due
    args : tuple
        Positional arguments passed to the callback
    """

    deadline: float
    source_id: int
    interval: float = field(compare=False)
    callback: Callable[..., Any] = field(compare=False)
    args: tuple = field(default=(), compare=False)


class MainLoop:
    """Single-threaded event dispatcher driving timeout and idle sources.

    Callbacks run on the thread that called ``run()``, one at a time. A
    callback returning a truthy value is rescheduled at its interval, anything
    else removes it. Registering sources and quitting are safe from any thread;
    the loop wakes up as soon as either happens.

    Attributes
    ----------
    _sources : dict[int, TimeoutSource]
        Live sources keyed by id
    _heap : list[TimeoutSource]
        Sources ordered by deadline, may hold stale entries
    _condition : threading.Condition
        Wakes the running loop when sources change or quit is requested
    """

    def __init__(self) -> None:
        self._sources: dict[int, TimeoutSource] = {}
        self._heap: list[TimeoutSource] = []
        self._ids = itertools.count(1)
        self._condition = threading.Condition(threading.Lock())
        self._running = False
        self._quit_requested = False
        self._closed = False

    @property
    def is_running(self) -> bool:
        """Whether ``run()`` is currently dispatching."""
        with self._condition:
            return self._running

    @property
    def closed(self) -> bool:
        """Whether ``close()`` has been called."""
        return self._closed

    def timeout_add(self, interval_ms: int, callback: Callable[..., Any], *args: Any) -> int:
        """Schedule a callback after a delay.

        Parameters
        ----------
        interval_ms : int
            Delay in milliseconds before the first dispatch, and between
            dispatches when the callback asks to repeat
        callback : Callable[..., Any]
            Callable invoked as ``callback(*args)``
        *args : Any
            Arguments passed to the callback

        Returns
        -------
        int
            Positive source id usable with ``source_remove``

        Raises
        ------
        ValueError
            If interval_ms is negative
        LoopError
            If the loop has been closed
        """
        if interval_ms < 0:
            raise ValueError(f"Timeout interval must not be negative: {interval_ms}")

        interval = interval_ms / 1000.0
        with self._condition:
            if self._closed:
                raise LoopError("Cannot add a source to a closed main loop")
            source = TimeoutSource(
                deadline=time.monotonic() + interval,
                source_id=next(self._ids),
                interval=interval,
                callback=callback,
                args=args,
            )
            self._schedule(source)
            self._condition.notify_all()
            return source.source_id

    def idle_add(self, callback: Callable[..., Any], *args: Any) -> int:
        """Schedule a callback to run as soon as the loop is free.

        Parameters
        ----------
        callback : Callable[..., Any]
            Callable invoked as ``callback(*args)``
        *args : Any
            Arguments passed to the callback

        Returns
        -------
        int
            Positive source id usable with ``source_remove``
        """
        return self.timeout_add(0, callback, *args)

    def source_remove(self, source_id: int) -> bool:
        """Unregister a source.

        Parameters
        ----------
        source_id : int
            Id returned by ``timeout_add`` or ``idle_add``

        Returns
        -------
        bool
            True if the source was live, False if unknown or already finished
        """
        with self._condition:
            source = self._sources.pop(source_id, None)
            if source is None:
                logger.debug("Source %d not found, nothing to remove", source_id)
                return False
            self._condition.notify_all()
            return True

    def has_source(self, source_id: int) -> bool:
        """Check whether a source is still registered."""
        with self._condition:
            return source_id in self._sources

    def run(self) -> None:
        """Dispatch due sources until ``quit()`` is called.

        Raises
        ------
        LoopError
            If the loop is already running or has been closed
        """
        with self._condition:
            if self._closed:
                raise LoopError("Cannot run a closed main loop")
            if self._running:
                raise LoopError("Main loop is already running")
            self._running = True
            self._quit_requested = False

        try:
            while True:
                with self._condition:
                    source = self._next_due_source()
                if source is None:
                    break
                self._dispatch(source)
        finally:
            with self._condition:
                self._running = False
                self._quit_requested = False

    def quit(self) -> None:
        """Stop a running loop once the current callback returns."""
        with self._condition:
            if self._running:
                self._quit_requested = True
                self._condition.notify_all()

    def close(self) -> None:
        """Drop all sources and refuse further runs."""
        with self._condition:
            self._sources.clear()
            self._heap.clear()
            self._closed = True
            self._quit_requested = True
            self._condition.notify_all()

    def _schedule(self, source: TimeoutSource) -> None:
        self._sources[source.source_id] = source
        heapq.heappush(self._heap, source)

    def _next_due_source(self) -> TimeoutSource | None:
        while not self._quit_requested:
            while self._heap and self._sources.get(self._heap[0].source_id) is not self._heap[0]:
                heapq.heappop(self._heap)

            if not self._heap:
                self._condition.wait()
                continue

            remaining = self._heap[0].deadline - time.monotonic()
            if remaining > 0:
                self._condition.wait(timeout=remaining)
                continue

            return heapq.heappop(self._heap)

        return None

    def _dispatch(self, source: TimeoutSource) -> None:
        try:
            repeat = bool(source.callback(*source.args))
        except Exception:
            logger.exception("Loop callback %r raised an exception", source.callback)
            repeat = False

        with self._condition:
            if self._sources.get(source.source_id) is not source:
                return
            if repeat:
                self._schedule(
                    TimeoutSource(
                        deadline=time.monotonic() + source.interval,
                        source_id=source.source_id,
                        interval=source.interval,
                        callback=source.callback,
                        args=source.args,
                    )
                )
            else:
                del self._sources[source.source_id]
