"""Logging formatters for harness diagnostics."""

import logging


class HarnessFormatter(logging.Formatter):
    """Logging formatter that prepends the test group passed via extra."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with group prefix if present.

        Parameters
        ----------
        record : logging.LogRecord
            Log record to format

        Returns
        -------
        str
            Formatted log message with optional ``[group]`` prefix
        """
        msg = super().format(record)
        group = getattr(record, "group", None)

        if group:
            return f"[{group}] {msg}"

        return msg
