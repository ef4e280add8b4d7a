"""Typed exception hierarchy for CLI-related errors.

This module defines all custom exceptions used by the CLI.
All exceptions inherit from CLIError base class for easy catching and
include descriptive messages with context to help with debugging.
"""

from typing import Optional

from docupack.storage.errors import SyncError


class CLIError(SyncError):
    """Base exception for all CLI-related errors."""
    pass


class UsageError(CLIError):
    """Raised when required paths are missing or invalid.

    Usage errors are detected before any file is touched, so a run that
    fails with UsageError has no side effects.
    """

    def __init__(self, message: str, option: Optional[str] = None):
        if option:
            full_message = f"Invalid value for '{option}': {message}"
        else:
            full_message = message
        super().__init__(full_message)
        self.option = option
        self.original_message = message
