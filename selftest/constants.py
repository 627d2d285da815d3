"""Constants shared by the self-test harness.

This module holds the enumerations that select harness behaviour and the
fixed strings the harness prints, so that report formats stay in one place.
"""

from enum import Enum


class TestClass(str, Enum):
    """Classification of a test group, also used as the harness class filter."""

    AUTO = "auto"
    MANUAL = "manual"
    ALL = "all"


class Verbosity(str, Enum):
    """How much the harness prints."""

    SILENT = "silent"
    NORMAL = "normal"
    ALL = "all"


class FailurePolicy(str, Enum):
    """What a failed check does to the run."""

    ABORT = "abort"
    CONTINUE = "continue"


class WaitState(str, Enum):
    """States of the bounded wait primitive."""

    IDLE = "idle"
    WAITING = "waiting"
    TIMED_OUT = "timed_out"
    CANCELED = "canceled"


HANG_CHECK_FIRED = -1
"""Value stored as the pending timeout once the hang check itself fired.

Loop source ids are always positive, so the sentinel never collides with a
live registration. A pending timeout equal to this value means the wait ended
because the timer ran out rather than because the awaited event arrived.
"""

ABORT_EXIT_CODE = 1
"""Process exit status used by every fatal path.

Sequencing violations and failed checks under the abort policy terminate the
process with this status, as does a ``finish()`` that saw any failure.
"""

WAIT_OUTCOME_TITLE = "did we time out of the wait"
"""Title of the check announced by ``SelfTest.check_wait_outcome``."""

NOT_ENDED_MESSAGE = "Not ended test! Cannot start!"
"""Printed when a group is started while another group is still open."""

NOT_STARTED_MESSAGE = "Not started test! Cannot finish!"
"""Printed when a group is ended while no group is open."""

NO_GROUP_MESSAGE = "Not started test! Cannot check!"
"""Printed when a check is announced while no group is open."""

NO_CHECK_MESSAGE = "No check announced! Cannot resolve!"
"""Printed when a check is resolved without a matching announcement."""
