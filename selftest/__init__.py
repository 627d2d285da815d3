"""Minimal self-test harness with groups, checks and hang detection."""

from selftest.config import HarnessConfig, load_config
from selftest.constants import FailurePolicy, TestClass, Verbosity, WaitState
from selftest.exceptions import LoopError, SelfTestError
from selftest.harness import SelfTest
from selftest.loop import MainLoop
from selftest.stopwatch import Stopwatch

__all__ = [
    "FailurePolicy",
    "HarnessConfig",
    "LoopError",
    "MainLoop",
    "SelfTest",
    "SelfTestError",
    "Stopwatch",
    "TestClass",
    "Verbosity",
    "WaitState",
    "load_config",
]
