"""Errors raised by the GitHub CLI client."""

from __future__ import annotations

from repokeeper.execshell import CommandFailedError


class GitHubOperationError(RuntimeError):
    """Raised when a ``gh`` invocation fails."""

    def __init__(self, operation: str, cause: str) -> None:
        """Name the failed operation and the reason reported by ``gh``."""
        self.operation = operation
        self.cause = cause
        if cause:
            super().__init__(f"{operation} operation failed: {cause}")
        else:
            super().__init__(f"{operation} operation failed")

    @classmethod
    def from_command(
        cls, operation: str, error: CommandFailedError
    ) -> GitHubOperationError:
        """Wrap a failed command, preferring its stderr as the cause."""
        return cls(operation, error.stderr or str(error))

    @property
    def not_found(self) -> bool:
        """Whether the GitHub API answered with HTTP 404."""
        return "HTTP 404" in self.cause


class ResponseDecodingError(RuntimeError):
    """Raised when ``gh`` output cannot be decoded."""

    def __init__(self, operation: str, cause: str) -> None:
        """Name the operation whose response was malformed."""
        self.operation = operation
        super().__init__(f"{operation} response decoding failed: {cause}")


class PayloadEncodingError(RuntimeError):
    """Raised when a request payload cannot be encoded."""

    def __init__(self, operation: str, cause: str) -> None:
        """Name the operation whose payload could not be encoded."""
        self.operation = operation
        super().__init__(f"{operation} payload encoding failed: {cause}")


class InvalidInputError(ValueError):
    """Raised when a required input is missing or malformed."""

    def __init__(self, field: str, message: str = "value required") -> None:
        """Name the invalid field."""
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")
