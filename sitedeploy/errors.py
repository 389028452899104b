"""Error types for sitedeploy.

Every fatal condition is a ``DeployError`` subclass carrying the process exit
code and an ``ErrorCategory``. ``main()`` logs the message and exits with the
code; nothing below the entry point terminates the process on its own.
"""

from enum import Enum
from typing import Optional


class ErrorCategory(Enum):
    """Categories of deployment errors."""
    PERMISSION = "permission"
    DEPENDENCY = "dependency"
    CONFIGURATION = "configuration"
    NETWORK = "network"
    COMMAND = "command"


class DeployError(Exception):
    """Base class for fatal deployment errors."""

    category: Optional[ErrorCategory] = None
    exit_code: int = 1
    # True when the failure was already written to the log where it happened
    reported: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PrivilegeError(DeployError):
    """The script was not invoked with effective uid 0."""
    category = ErrorCategory.PERMISSION


class DependencyError(DeployError):
    """Git is missing and could not be installed."""
    category = ErrorCategory.DEPENDENCY


class ConfigurationError(DeployError):
    """Configuration values are invalid or unusable on this host."""
    category = ErrorCategory.CONFIGURATION


class RetryExhaustedError(DeployError):
    """A retried operation failed on every attempt."""
    category = ErrorCategory.NETWORK
    reported = True

    def __init__(self, message: str, operation: str, attempts: int):
        super().__init__(message)
        self.operation = operation
        self.attempts = attempts


class CommandError(DeployError):
    """A git command that is not retried failed."""
    category = ErrorCategory.COMMAND

    def __init__(self, message: str, command: str, status: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.command = command
        self.status = status
        self.stderr = stderr
