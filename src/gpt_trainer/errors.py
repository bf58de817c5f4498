"""Categorized error handling with actionable messages.

Provides structured error types with exit codes and recovery suggestions
for every failure the GPT Trainer client can surface: configuration,
validation, network, HTTP, decoding, lookup, and wrapped API operations.
"""

from __future__ import annotations

from enum import IntEnum
from typing import ClassVar


class ExitCode(IntEnum):
    """Exit codes for scripting integration.

    Standard categories:
    - 0: Success
    - 1-9: Usage/config errors (user can fix)
    - 10-19: Input validation errors
    - 20-29: Network errors
    - 30-39: API errors
    - 40-49: System errors
    """

    SUCCESS = 0

    # Usage/config errors (1-9)
    USAGE_ERROR = 1
    CONFIG_ERROR = 2
    INVALID_ARGUMENT = 4

    # Validation errors (10-19)
    VALIDATION_ERROR = 10

    # Network errors (20-29)
    NETWORK_OFFLINE = 20
    NETWORK_TIMEOUT = 21
    NETWORK_DNS = 22

    # API errors (30-39)
    API_ERROR = 30
    API_NOT_FOUND = 31
    API_SERVER_ERROR = 32
    API_DECODE_ERROR = 33
    API_AUTH_ERROR = 34

    # System errors (40-49)
    FILE_NOT_FOUND = 40
    FILE_PERMISSION = 41
    SYSTEM_ERROR = 49


class GptTrainerError(Exception):
    """Base exception for gpt-trainer with structured error info.

    Attributes:
        message: Human-readable error message.
        code: Exit code for scripting.
        suggestion: Actionable recovery suggestion.
        details: Optional additional context.
    """

    code: ClassVar[ExitCode] = ExitCode.USAGE_ERROR
    suggestion: ClassVar[str] = ""

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        details: str | None = None,
    ):
        self.message = message
        self._suggestion = suggestion
        self.details = details
        super().__init__(message)

    def get_suggestion(self) -> str:
        """Get the recovery suggestion."""
        return self._suggestion or self.suggestion

    def format_full(self) -> str:
        """Format the complete error message with suggestion."""
        parts = [f"Error: {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        suggestion = self.get_suggestion()
        if suggestion:
            parts.append(f"Suggestion: {suggestion}")
        return "\n".join(parts)


# Config/Input Errors


class ConfigurationError(GptTrainerError):
    """Client configuration is missing or invalid."""

    code = ExitCode.CONFIG_ERROR
    suggestion = (
        "Set an API token with 'gpt-trainer --config set api_token TOKEN' "
        "or the GPT_TRAINER_API_TOKEN environment variable."
    )


class ValidationError(GptTrainerError):
    """Input rejected before any request was made."""

    code = ExitCode.VALIDATION_ERROR
    suggestion = "Check the values you passed and try again."


# Network Errors


class NetworkError(GptTrainerError):
    """Transport-level failure (DNS, connection, timeout)."""

    code = ExitCode.NETWORK_OFFLINE
    suggestion = "Check your internet connection and try again."


class NetworkOfflineError(NetworkError):
    """Connection could not be established."""

    code = ExitCode.NETWORK_OFFLINE


class NetworkTimeoutError(NetworkError):
    """Request timed out."""

    code = ExitCode.NETWORK_TIMEOUT
    suggestion = "The request timed out. Try again, or raise the 'timeout' setting."


class NetworkDNSError(NetworkError):
    """DNS resolution failed."""

    code = ExitCode.NETWORK_DNS
    suggestion = (
        "DNS lookup failed. Check 'api_base_url' and your network configuration."
    )


# API Errors


class HttpError(GptTrainerError):
    """Non-2xx response from the API.

    Attributes:
        status_code: HTTP status returned by the server.
        body: Raw response body text.
    """

    code = ExitCode.API_ERROR
    suggestion = "Try again later. If the problem persists, check the GPT Trainer status page."

    def __init__(self, status_code: int, body: str = "", message: str | None = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"HTTP Error: {status_code} - {body}")


class DecodeError(GptTrainerError):
    """Response body is not valid JSON or has an unexpected shape."""

    code = ExitCode.API_DECODE_ERROR
    suggestion = "The API returned an unexpected response. Try again later."


class NotFoundError(GptTrainerError):
    """Requested resource does not exist."""

    code = ExitCode.API_NOT_FOUND
    suggestion = "Check the UUID. List resources with 'gpt-trainer --list KIND'."


class ApiOperationError(GptTrainerError):
    """A client operation failed; wraps the original error as its cause.

    Attributes:
        operation: Name of the client operation that failed.
        status_code: HTTP status of the original error, if any.
    """

    code = ExitCode.API_ERROR

    def __init__(self, operation: str, original: Exception):
        self.operation = operation
        self.status_code = getattr(original, "status_code", None)
        message = getattr(original, "message", None) or str(original)
        super().__init__(f"API Error ({operation}): {message}")
        if isinstance(original, GptTrainerError):
            self.code = original.code
            self._suggestion = original.get_suggestion()


def categorize_http_error(status_code: int, body: str = "") -> HttpError:
    """Build an HttpError with a suggestion matching the status code.

    Args:
        status_code: HTTP status code.
        body: Raw response body.

    Returns:
        HttpError instance.
    """
    error = HttpError(status_code, body)
    if status_code in (401, 403):
        error.code = ExitCode.API_AUTH_ERROR
        error._suggestion = "Authentication failed. Check that your API token is valid."
    elif status_code == 404:
        error.code = ExitCode.API_NOT_FOUND
        error._suggestion = NotFoundError.suggestion
    elif status_code == 429:
        error._suggestion = "Rate limit exceeded. Wait a few minutes before trying again."
    elif status_code >= 500:
        error.code = ExitCode.API_SERVER_ERROR
        error._suggestion = "The GPT Trainer API is experiencing issues. Try again later."
    return error


def categorize_network_error(error_reason: str) -> NetworkError:
    """Convert network error reason to appropriate error type.

    Args:
        error_reason: Error reason string from URLError.

    Returns:
        Appropriate NetworkError subclass instance.
    """
    reason_lower = error_reason.lower()

    if "timed out" in reason_lower or "timeout" in reason_lower:
        return NetworkTimeoutError(f"Connection timed out: {error_reason}")
    elif "name or service not known" in reason_lower or "getaddrinfo" in reason_lower:
        return NetworkDNSError(f"DNS resolution failed: {error_reason}")
    elif "connection refused" in reason_lower or "no route" in reason_lower:
        return NetworkOfflineError(f"Connection failed: {error_reason}")
    else:
        return NetworkOfflineError(f"Network error: {error_reason}")


def format_error_for_user(error: Exception, verbose: bool = False) -> str:
    """Format any exception for user display.

    Args:
        error: Exception to format.
        verbose: If True, include details and suggestions.

    Returns:
        Formatted error message string.
    """
    if isinstance(error, GptTrainerError):
        if verbose:
            return error.format_full()
        return f"Error: {error.message}"
    else:
        return f"Error: {error}"


def get_exit_code(error: Exception) -> int:
    """Get the exit code for an exception.

    Args:
        error: Exception to get code for.

    Returns:
        Integer exit code.
    """
    if isinstance(error, GptTrainerError):
        return error.code
    elif isinstance(error, FileNotFoundError):
        return ExitCode.FILE_NOT_FOUND
    elif isinstance(error, PermissionError):
        return ExitCode.FILE_PERMISSION
    elif isinstance(error, ValueError):
        return ExitCode.INVALID_ARGUMENT
    else:
        return ExitCode.SYSTEM_ERROR


__all__ = [
    "ExitCode",
    "GptTrainerError",
    "ConfigurationError",
    "ValidationError",
    "NetworkError",
    "NetworkOfflineError",
    "NetworkTimeoutError",
    "NetworkDNSError",
    "HttpError",
    "DecodeError",
    "NotFoundError",
    "ApiOperationError",
    "categorize_http_error",
    "categorize_network_error",
    "format_error_for_user",
    "get_exit_code",
]
