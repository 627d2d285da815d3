"""Pytest configuration and fixtures for selftest tests."""

from collections.abc import Generator

import pytest

from selftest.config import HarnessConfig
from selftest.constants import FailurePolicy, TestClass, Verbosity
from selftest.harness import SelfTest


@pytest.fixture
def harness() -> Generator[SelfTest, None, None]:
    """Create a harness with default settings.

    Yields
    ------
    SelfTest
        Harness reporting to the captured stdout

    Notes
    -----
    The loop is closed after the test when the test did not call ``finish()``
    itself, so no harness leaks a registered hang check.
    """
    test = SelfTest()

    yield test

    test.loop.close()


@pytest.fixture
def make_harness():
    """Factory fixture building harnesses with specific settings.

    Returns
    -------
    callable
        Function taking test_class, verbosity and failure_policy keywords
    """
    created: list[SelfTest] = []

    def _make(
        test_class: TestClass = TestClass.AUTO,
        verbosity: Verbosity = Verbosity.ALL,
        failure_policy: FailurePolicy = FailurePolicy.ABORT,
    ) -> SelfTest:
        test = SelfTest(
            HarnessConfig(
                test_class=test_class,
                verbosity=verbosity,
                failure_policy=failure_policy,
            )
        )
        created.append(test)
        return test

    yield _make

    for test in created:
        test.loop.close()
