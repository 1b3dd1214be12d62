"""Custom exceptions for Hockey League Admin."""

from typing import Any


class HLAError(Exception):
    """Base exception for all HLA errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize HLA error.

        Args:
            message: Error message
            details: Additional error details

        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(HLAError):
    """Raised when configuration is invalid or missing."""


class ValidationError(HLAError):
    """Raised when client-side input validation fails.

    Validation errors are displayed next to the offending field and are
    never sent to the backend.
    """

    def __init__(self, field: str, value: Any, message: str) -> None:
        super().__init__(message, {"field": field, "value": value})
        self.field = field
        self.value = value


class APIError(HLAError):
    """Base class for errors raised while talking to the backend."""

    def __init__(
        self,
        status_code: int,
        message: str,
        response_text: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            status_code: HTTP status code (0 when no response was received)
            message: Error message
            response_text: Raw response text from API
            details: Additional error details

        """
        super().__init__(message, details)
        self.status_code = status_code
        self.response_text = response_text


class NetworkError(APIError):
    """Raised when the request never reached the server or no response arrived."""

    def __init__(self, message: str = "Network error - could not reach API server", url: str | None = None) -> None:
        super().__init__(0, message, details={"url": url} if url else None)
        self.url = url


class HTTPStatusError(APIError):
    """Raised for non-2xx responses without a more specific class."""


class AuthenticationError(HTTPStatusError):
    """Raised when authentication fails (401)."""

    def __init__(self, message: str = "Authentication required", response_text: str | None = None) -> None:
        super().__init__(401, message, response_text)


class PermissionError(HTTPStatusError):
    """Raised when access is forbidden (403)."""

    def __init__(self, message: str = "Access forbidden", response_text: str | None = None) -> None:
        super().__init__(403, message, response_text)


class NotFoundError(HTTPStatusError):
    """Raised when resource is not found (404)."""

    def __init__(self, message: str = "Resource not found", response_text: str | None = None) -> None:
        super().__init__(404, message, response_text)


class RateLimitError(HTTPStatusError):
    """Raised when rate limit is exceeded (429)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        response_text: str | None = None,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(429, message, response_text)
        self.retry_after = retry_after


class DecodeError(APIError):
    """Raised when a response body is not valid JSON or has an unexpected shape."""

    def __init__(self, message: str, response_text: str | None = None) -> None:
        super().__init__(200, message, response_text)


class CacheError(HLAError):
    """Raised when local session cache operations fail."""
