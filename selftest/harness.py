"""Self-test harness tracking groups, checks and bounded waits."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, NoReturn, TextIO

from selftest.config import HarnessConfig
from selftest.constants import (
    ABORT_EXIT_CODE,
    HANG_CHECK_FIRED,
    NO_CHECK_MESSAGE,
    NO_GROUP_MESSAGE,
    NOT_ENDED_MESSAGE,
    NOT_STARTED_MESSAGE,
    WAIT_OUTCOME_TITLE,
    FailurePolicy,
    TestClass,
    Verbosity,
    WaitState,
)
from selftest.exceptions import SelfTestError
from selftest.loop import MainLoop
from selftest.stopwatch import Stopwatch
from selftest.utils import format_message

logger = logging.getLogger(__name__)


class SelfTest:
    """Sequential self-test harness with pass/fail accounting.

    A driver opens named groups, announces checks inside them and resolves
    each check as a success or a failure. Sequencing mistakes in the driver
    terminate the process, as does a failed check unless the failure policy
    is ``CONTINUE``. ``finish()`` prints the summary and returns the exit
    status for the process.

    ``bounded_wait()`` blocks on the harness main loop until either a loop
    callback calls ``request_loop_exit()`` or the hang check timer fires.

    Parameters
    ----------
    config : HarnessConfig | None
        Initial class filter, verbosity and failure policy
    stream : TextIO | None
        Report destination, the current ``sys.stdout`` when None

    Attributes
    ----------
    total : int
        Checks announced so far
    succeeded : int
        Checks resolved successfully
    group_name : str | None
        Name of the open group
    started : bool
        Whether a group is open
    pending_timeout : int | None
        Loop source id of the armed hang check, ``HANG_CHECK_FIRED`` once it
        fired, None otherwise
    wait_state : WaitState
        Where the bounded wait primitive currently stands
    user_data : Any
        Opaque value stored for the caller
    """

    def __init__(self, config: HarnessConfig | None = None, stream: TextIO | None = None) -> None:
        config = config or HarnessConfig()
        self.total = 0
        self.succeeded = 0
        self.group_name: str | None = None
        self.started = False
        self.test_class = config.test_class
        self.verbosity = config.verbosity
        self.failure_policy = config.failure_policy
        self.stopwatch = Stopwatch()
        self.loop = MainLoop()
        self.pending_timeout: int | None = None
        self.wait_state = WaitState.IDLE
        self.user_data: Any = None
        self._stream = stream
        self._check_open = False
        self._finished = False

    @property
    def failed(self) -> int:
        """Checks announced but not resolved successfully."""
        return self.total - self.succeeded

    def finish(self) -> int:
        """Print the summary and release the stopwatch and loop.

        Returns
        -------
        int
            0 when every announced check succeeded, 1 otherwise

        Raises
        ------
        SelfTestError
            If the harness was already finished
        """
        if self._finished:
            raise SelfTestError("Harness already finished")
        if self.started:
            logger.warning("Finishing with group '%s' still open", self.group_name)

        self._write(f"test passes ({self.succeeded}/{self.total}) : ")
        if self.succeeded == self.total:
            self._write("ALL OKAY\n")
            retval = 0
        else:
            self._write(f"{self.failed} FAILURE(S)\n")
            retval = ABORT_EXIT_CODE

        self.stopwatch.stop()
        self.loop.close()
        self._finished = True
        return retval

    def start_group(self, name: str, test_class: TestClass = TestClass.AUTO) -> bool:
        """Open a named group of checks.

        Parameters
        ----------
        name : str
            Group name shown in check lines
        test_class : TestClass
            Classification of the group, compared to the harness class filter

        Returns
        -------
        bool
            False if the class filter excludes the group, True once it is open
        """
        if test_class == TestClass.AUTO and self.test_class == TestClass.MANUAL:
            logger.debug("Skipping automatic group '%s'", name)
            return False
        if test_class == TestClass.MANUAL and self.test_class == TestClass.AUTO:
            logger.debug("Skipping manual group '%s'", name)
            return False
        if self.started:
            self._abort(NOT_ENDED_MESSAGE)

        self.group_name = name
        self.started = True
        logger.debug("Group started", extra={"group": name})
        if self.verbosity == Verbosity.NORMAL:
            self._write(f"{name}...")
        return True

    def end_group(self) -> None:
        """Close the open group and disarm any pending hang check."""
        if not self.started:
            self._abort(NOT_STARTED_MESSAGE)
        self._close_group(completed=True)

    def _close_group(self, completed: bool) -> None:
        if self._check_open:
            logger.warning("Group ended with an unresolved check", extra={"group": self.group_name})
        if completed and self.verbosity == Verbosity.NORMAL:
            self._write("OK\n")

        self._disarm_hang_check()
        self.pending_timeout = None
        self.wait_state = WaitState.IDLE

        logger.debug("Group ended", extra={"group": self.group_name})
        self.started = False
        self.group_name = None
        self._check_open = False

    @contextmanager
    def group(self, name: str, test_class: TestClass = TestClass.AUTO) -> Iterator[bool]:
        """Run a block inside a group.

        Parameters
        ----------
        name : str
            Group name
        test_class : TestClass
            Classification of the group

        Yields
        ------
        bool
            Whether the group was accepted by the class filter. An accepted
            group is always ended when the block exits. The completion marker
            is only printed when the block did not raise.
        """
        if not self.start_group(name, test_class):
            yield False
            return

        completed = False
        try:
            yield True
            completed = True
        finally:
            if self.started:
                self._close_group(completed=completed)

    def announce_check(self, message: str, *args: Any) -> None:
        """Announce the next check and restart the stopwatch.

        Parameters
        ----------
        message : str
            Check title with optional ``%`` placeholders
        *args : Any
            Format arguments for message
        """
        if not self.started:
            self._abort(NO_GROUP_MESSAGE)
        if self._check_open:
            logger.warning("Check #%d was never resolved", self.total, extra={"group": self.group_name})

        self.stopwatch.reset()
        if self.verbosity == Verbosity.ALL:
            title = format_message(message, *args)
            self._write(f"> check #{self.total + 1}\t{self.group_name}: \t{title}...")
        self.total += 1
        self._check_open = True

    def resolve_success(self, message: str | None = None, *args: Any) -> None:
        """Resolve the announced check as successful.

        Parameters
        ----------
        message : str | None
            Optional detail with ``%`` placeholders
        *args : Any
            Format arguments for message
        """
        self._close_check()
        if self.verbosity == Verbosity.ALL:
            if message is None:
                self._write("...OK\n")
            else:
                self._write(f"...OK [{format_message(message, *args)}]\n")
        self.succeeded += 1

    def resolve_failure(self, message: str | None = None, *args: Any) -> None:
        """Resolve the announced check as failed.

        Under ``FailurePolicy.ABORT`` this terminates the process. Under
        ``FailurePolicy.CONTINUE`` the failure only counts against the summary.

        Parameters
        ----------
        message : str | None
            Optional detail with ``%`` placeholders
        *args : Any
            Format arguments for message
        """
        self._close_check()
        detail = format_message(message, *args) if message is not None else None
        if self.verbosity in (Verbosity.NORMAL, Verbosity.ALL):
            if detail is None:
                self._write("FAILED\n")
            else:
                self._write(f"FAILED [{detail}]\n")

        if detail is None:
            logger.info("Check #%d failed", self.total, extra={"group": self.group_name})
        else:
            logger.info("Check #%d failed: %s", self.total, detail, extra={"group": self.group_name})
        if self.failure_policy == FailurePolicy.ABORT:
            sys.exit(ABORT_EXIT_CODE)

    def elapsed(self) -> int:
        """Get milliseconds since the current check was announced.

        Returns
        -------
        int
            Elapsed milliseconds, truncated toward zero
        """
        return self.stopwatch.elapsed_ms()

    def bounded_wait(self, timeout_ms: int) -> WaitState:
        """Block on the main loop until the awaited event or the timeout.

        Parameters
        ----------
        timeout_ms : int
            Milliseconds before the hang check stops the loop

        Returns
        -------
        WaitState
            ``CANCELED`` if ``request_loop_exit()`` ended the wait,
            ``TIMED_OUT`` if the hang check did

        Raises
        ------
        SelfTestError
            If another bounded wait is already armed
        """
        if self._hang_check_armed():
            raise SelfTestError("A bounded wait is already outstanding")

        self.pending_timeout = self.loop.timeout_add(timeout_ms, self._hang_check, timeout_ms)
        self.wait_state = WaitState.WAITING
        logger.debug(
            "Armed hang check %d for %dms",
            self.pending_timeout,
            timeout_ms,
            extra={"group": self.group_name},
        )
        self.loop.run()
        return self.wait_state

    def request_loop_exit(self) -> None:
        """Cancel the armed hang check, if any, and stop the main loop.

        Must run on the loop thread. Other threads schedule it with
        ``harness.loop.idle_add(harness.request_loop_exit)``.
        """
        if self._hang_check_armed():
            self._disarm_hang_check()
            self.pending_timeout = None
            self.wait_state = WaitState.CANCELED
        self.loop.quit()

    def check_wait_outcome(self) -> None:
        """Announce and resolve a check on whether the last wait timed out."""
        elapsed = self.elapsed()
        self.announce_check(WAIT_OUTCOME_TITLE)
        if self.pending_timeout is None:
            self.resolve_success("wait blocked for %ims", elapsed)
        else:
            self.resolve_failure("hang check saved us after %ims", elapsed)

    def _hang_check(self, timeout_ms: int) -> bool:
        logger.debug("Hang check fired after %dms", timeout_ms, extra={"group": self.group_name})
        self.pending_timeout = HANG_CHECK_FIRED
        self.wait_state = WaitState.TIMED_OUT
        self.loop.quit()
        return False

    def _hang_check_armed(self) -> bool:
        return self.pending_timeout is not None and self.pending_timeout != HANG_CHECK_FIRED

    def _disarm_hang_check(self) -> None:
        if self._hang_check_armed():
            self.loop.source_remove(self.pending_timeout)
            logger.debug("Cancelled hang check %d", self.pending_timeout)

    def _close_check(self) -> None:
        if not self._check_open:
            self._abort(NO_CHECK_MESSAGE)
        self._check_open = False

    def _abort(self, message: str) -> NoReturn:
        logger.error(message, extra={"group": self.group_name})
        self._write(f"{message}\n")
        sys.exit(ABORT_EXIT_CODE)

    def _write(self, text: str) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(text)
        stream.flush()
