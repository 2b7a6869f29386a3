"""
Standardized Async Base Classes and Patterns
Provides consistent error types and result handling across executors and commands
"""

import logging
from dataclasses import dataclass
from typing import Generic, TypeVar, Optional, Dict, Any

# Set up logging
logger = logging.getLogger(__name__)

# Generic type for async results
T = TypeVar("T")


@dataclass
class AsyncResult(Generic[T]):
    """Standardized result wrapper for dispatched explorer commands"""

    success: bool
    data: Optional[T] = None
    error: Optional["AsyncError"] = None
    message: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def success_result(
        cls, data: T, message: str = None, metadata: Dict[str, Any] = None
    ) -> "AsyncResult[T]":
        """Create a successful result"""
        return cls(success=True, data=data, message=message, metadata=metadata)

    @classmethod
    def error_result(
        cls, error: "AsyncError", metadata: Dict[str, Any] = None
    ) -> "AsyncResult[T]":
        """Create an error result"""
        return cls(
            success=False, error=error, message=error.message, metadata=metadata
        )

    @property
    def is_success(self) -> bool:
        """Check if operation was successful"""
        return self.success

    @property
    def is_error(self) -> bool:
        """Check if operation failed"""
        return not self.success

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to a JSON-friendly dictionary"""
        return {
            "success": self.success,
            "message": self.message,
            "data": self.data,
            "error": self.error.to_dict() if self.error else None,
            "metadata": self.metadata or {},
        }


class AsyncError(Exception):
    """Base class for explorer operation errors"""

    def __init__(
        self, message: str, error_code: str = None, details: Dict[str, Any] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "UNKNOWN_ERROR"
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary format"""
        return {
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
            "type": self.__class__.__name__,
        }


class ValidationError(AsyncError):
    """Error for input validation failures"""

    def __init__(self, message: str, field: str = None):
        super().__init__(message, "VALIDATION_ERROR", {"field": field} if field else {})


class ProcessError(AsyncError):
    """Error for process execution failures"""

    def __init__(
        self,
        message: str,
        return_code: int = None,
        stdout: str = None,
        stderr: str = None,
        error_code: str = None,
    ):
        details = {}
        if return_code is not None:
            details["return_code"] = return_code
        if stdout:
            details["stdout"] = stdout
        if stderr:
            details["stderr"] = stderr

        super().__init__(message, error_code or "PROCESS_ERROR", details)
        self.return_code = return_code
        self.stdout = stdout
        self.stderr = stderr


class CommandNotFoundError(AsyncError):
    """Error raised when a command-line tool cannot be spawned"""

    def __init__(self, command: str, hint: Optional[str] = None):
        details = {"command": command}
        if hint:
            details["hint"] = hint
        super().__init__(f"Command not found: {command}", "COMMAND_NOT_FOUND", details)
        self.command = command
        self.hint = hint


class DockerComposeCommandNotFound(CommandNotFoundError):
    """The docker compose command is not installed or not on PATH"""


class ComposeError(ProcessError):
    """Base class for failures reported by docker compose"""


class ComposeFileNotFound(ComposeError):
    """No compose file could be found for a project"""

    def __init__(self, message: str, stderr: str = None, return_code: int = None):
        super().__init__(
            message,
            return_code=return_code,
            stderr=stderr,
            error_code="COMPOSE_FILE_NOT_FOUND",
        )


# Export main classes
__all__ = [
    "AsyncResult",
    "AsyncError",
    "ValidationError",
    "ProcessError",
    "CommandNotFoundError",
    "DockerComposeCommandNotFound",
    "ComposeError",
    "ComposeFileNotFound",
]
