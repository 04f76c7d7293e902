import logging
from typing import Any

from rich.console import Console
from rich.panel import Panel

logger = logging.getLogger(__name__)


class LshDedupError(Exception):
    """Base exception class for lshdedup."""

    pass


class IllegalConfigurationError(LshDedupError, ValueError):
    """Raised when an index, sketcher or hash family is built with bad parameters."""

    def __init__(self, parameter: str, value: Any, reason: str):
        self.parameter = parameter
        self.value = value
        self.reason = reason
        super().__init__(f"{parameter}: {reason} (got {value!r})")


class FileOperationError(LshDedupError):
    """Raised when an input document cannot be read."""

    def __init__(self, message: str, path: str, operation: str):
        self.path = path
        self.operation = operation
        super().__init__(f"{operation} failed for {path}: {message}")


class InvalidFileError(LshDedupError):
    """Raised when a file does not look like text."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid file {path}: {reason}")


def handle_error(console: Console, error: Exception) -> int:
    """Handle errors with user-friendly messages."""
    error_msg = format_error_message(error)
    panel = Panel(
        error_msg,
        title="Error",
        border_style="red",
        padding=(1, 2),
    )
    console.print(panel)

    if isinstance(error, IllegalConfigurationError):
        logger.error("Invalid configuration: %s", error)
        return 2
    elif isinstance(error, FileOperationError):
        logger.error("File operation failed: %s", error)
        return 3
    elif isinstance(error, InvalidFileError):
        logger.error("Invalid file: %s", error)
        return 4
    else:
        logger.exception("Unexpected error")
        return 1


def format_error_message(error: Exception) -> str:
    """Format error message for display."""
    if isinstance(error, IllegalConfigurationError):
        return (
            f"[red]Illegal configuration[/red]\n"
            f"Parameter: {error.parameter}\n"
            f"Value: {error.value!r}\n"
            f"Reason: {error.reason}"
        )
    elif isinstance(error, FileOperationError):
        return (
            f"[red]File operation failed[/red]\n"
            f"Operation: {error.operation}\n"
            f"Path: {error.path}"
        )
    elif isinstance(error, InvalidFileError):
        return f"[red]Invalid file[/red]\nPath: {error.path}\nReason: {error.reason}"
    return f"[red]Error: {str(error)}[/red]"
