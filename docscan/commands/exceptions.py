class CommandError(Exception):
    """Base exception for external command invocation."""


class CommandNotFoundError(CommandError):
    """Raised when the executable is not installed or not on PATH."""


class CommandTimeoutError(CommandError):
    """Raised when the command does not finish within its timeout."""
