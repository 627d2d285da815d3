"""Harness-specific exceptions."""


class SelfTestError(Exception):
    """Raised when the harness object itself is misused."""

    pass


class LoopError(SelfTestError):
    """Raised when the main loop is run while running or after being closed."""

    pass
