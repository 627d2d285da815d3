"""Logging setup for harness diagnostics."""

import logging
import sys
from typing import TextIO

from selftest.logging.formatters import HarnessFormatter

DEFAULT_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(level: int = logging.WARNING, stream: TextIO | None = None) -> logging.Handler:
    """Route harness diagnostics to stderr.

    The harness report goes to stdout, so diagnostics are kept on a separate
    stream to avoid interleaving with partial report lines.

    Parameters
    ----------
    level : int
        Level applied to the ``selftest`` logger
    stream : TextIO | None
        Destination stream, stderr when None

    Returns
    -------
    logging.Handler
        The installed handler, so callers can remove it again
    """
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(HarnessFormatter(DEFAULT_FORMAT))

    package_logger = logging.getLogger("selftest")
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return handler


__all__ = ["HarnessFormatter", "configure_logging"]
