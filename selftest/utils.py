"""Utility functions for the self-test harness."""

from typing import Any


def format_message(message: str, *args: Any) -> str:
    """Apply printf-style arguments to a message.

    Parameters
    ----------
    message : str
        Message with optional ``%`` placeholders
    *args : Any
        Format arguments for message

    Returns
    -------
    str
        Formatted message, or the message untouched when no arguments are given
    """
    return message % args if args else message
