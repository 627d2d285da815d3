"""Behave environment configuration for selftest features."""

import io
import logging

from behave.model import Scenario
from behave.runner import Context

from selftest.logging import configure_logging

logger = logging.getLogger(__name__)


class LogCapture(logging.Handler):
    """Custom logging handler for capturing log records in tests."""

    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def before_scenario(context: Context, scenario: Scenario) -> None:
    """Give each scenario its own report stream and log capture."""
    context.output = io.StringIO()
    context.diagnostics = io.StringIO()
    context.harness = None
    context.exit_code = None
    context.log_capture = LogCapture()
    context.log_handler = configure_logging(logging.DEBUG, stream=context.diagnostics)
    logging.getLogger("selftest").addHandler(context.log_capture)
    logger.debug("Starting scenario: %s", scenario.name)


def after_scenario(context: Context, scenario: Scenario) -> None:
    """Release the scenario harness and detach logging handlers."""
    package_logger = logging.getLogger("selftest")
    package_logger.removeHandler(context.log_capture)
    package_logger.removeHandler(context.log_handler)
    package_logger.setLevel(logging.NOTSET)

    if context.harness is not None:
        context.harness.loop.close()
