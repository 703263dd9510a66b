"""Error handling utilities.

This module defines the exception hierarchy used by Parallel Search. Source
adapters raise these errors; the orchestrator captures them per source and
turns them into failure outcomes, so none of them ever aborts a whole call.
"""

import http
import traceback
from typing import Any


class SearchError(Exception):
    """Base class for all search-related exceptions in the application."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int = http.HTTPStatus.INTERNAL_SERVER_ERROR,
        original_error: Exception | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize the error with context information.

        Args:
            message: Human-readable error message
            provider: Name of the search source involved, if any
            status_code: HTTP status code used when rendering HTTP responses
            original_error: The exception that caused this error, if any
            details: Additional structured details about the error
        """
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.original_error = original_error
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to a dictionary representation."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
        }

        if self.provider:
            result["provider"] = self.provider

        if self.details:
            result["details"] = self.details

        return result


# Provider-related errors


class ProviderError(SearchError):
    """Base class for errors raised by search source adapters."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int = http.HTTPStatus.BAD_GATEWAY,
        **kwargs,
    ):
        super().__init__(message, provider, status_code, **kwargs)


class ProviderTimeoutError(ProviderError):
    """Error raised when a source does not answer within its deadline."""

    def __init__(
        self,
        provider: str,
        timeout: float | None = None,
        message: str | None = None,
        status_code: int = http.HTTPStatus.GATEWAY_TIMEOUT,
        **kwargs,
    ):
        """Initialize a provider timeout error.

        Args:
            provider: Name of the source that timed out
            timeout: The deadline in seconds
            message: Error message (defaults to a standard message)
            status_code: HTTP status code (defaults to 504 Gateway Timeout)
            **kwargs: Additional arguments passed to ProviderError
        """
        details = kwargs.pop("details", {})

        if timeout:
            details["timeout_seconds"] = timeout

        if message is None:
            message = f"Search timed out for provider '{provider}'"
            if timeout:
                message += f" after {timeout} seconds"

        super().__init__(message, provider, status_code, details=details, **kwargs)


class ProviderRateLimitError(ProviderError):
    """Error raised when a source rejects the request with HTTP 429."""

    def __init__(
        self,
        provider: str,
        retry_after: float | None = None,
        message: str | None = None,
        status_code: int = http.HTTPStatus.TOO_MANY_REQUESTS,
        **kwargs,
    ):
        details = kwargs.pop("details", {})

        if retry_after:
            details["retry_after_seconds"] = retry_after

        if message is None:
            message = f"Rate limit exceeded for provider '{provider}'"
            if retry_after:
                message += f", retry after {retry_after} seconds"

        super().__init__(message, provider, status_code, details=details, **kwargs)


class ProviderAuthenticationError(ProviderError):
    """Error raised when a source rejects the supplied credentials."""

    def __init__(
        self,
        provider: str,
        message: str | None = None,
        status_code: int = http.HTTPStatus.UNAUTHORIZED,
        **kwargs,
    ):
        message = message or f"Authentication failed for provider '{provider}'"
        super().__init__(message, provider, status_code, **kwargs)


class ProviderServiceError(ProviderError):
    """Error raised when a source answers with an error or an unusable body."""

    def __init__(
        self,
        provider: str,
        message: str | None = None,
        status_code: int = http.HTTPStatus.BAD_GATEWAY,
        **kwargs,
    ):
        """Initialize a provider service error.

        Args:
            provider: Name of the source with the service error
            message: Error message (defaults to a standard message)
            status_code: Upstream HTTP status when known, else 502 Bad Gateway
            **kwargs: Additional arguments passed to ProviderError
        """
        message = message or f"Service error occurred for provider '{provider}'"
        super().__init__(message, provider, status_code, **kwargs)


# Query-related errors


class QueryError(SearchError):
    """Base class for errors related to search queries."""

    def __init__(
        self,
        message: str,
        query: str | None = None,
        status_code: int = http.HTTPStatus.BAD_REQUEST,
        **kwargs,
    ):
        details = kwargs.pop("details", {})

        if query is not None:
            details["query"] = query

        super().__init__(message, status_code=status_code, details=details, **kwargs)


class QueryValidationError(QueryError):
    """Error raised when the tool input fails validation."""

    def __init__(
        self,
        message: str,
        query: str | None = None,
        validation_errors: list[str] | None = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})

        if validation_errors:
            details["validation_errors"] = validation_errors

        super().__init__(message, query, details=details, **kwargs)


# Configuration errors


class ConfigurationError(SearchError):
    """Error raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        status_code: int = http.HTTPStatus.INTERNAL_SERVER_ERROR,
        **kwargs,
    ):
        details = kwargs.pop("details", {})

        if config_key:
            details["config_key"] = config_key

        super().__init__(message, status_code=status_code, details=details, **kwargs)


# Network and I/O errors


class NetworkError(SearchError):
    """Error raised when a network operation fails."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int = http.HTTPStatus.BAD_GATEWAY,
        **kwargs,
    ):
        details = kwargs.pop("details", {})

        if url:
            details["url"] = url

        super().__init__(message, status_code=status_code, details=details, **kwargs)


class NetworkConnectionError(NetworkError):
    """Error raised when a connection cannot be established."""

    def __init__(self, message: str | None = None, url: str | None = None, **kwargs):
        if message is None:
            message = "Failed to establish connection"
            if url:
                message = f"Failed to establish connection to {url}"

        super().__init__(message, url, **kwargs)


class NetworkTimeoutError(NetworkError):
    """Error raised when a network operation times out."""

    def __init__(
        self,
        message: str | None = None,
        url: str | None = None,
        timeout: float | None = None,
        status_code: int = http.HTTPStatus.GATEWAY_TIMEOUT,
        **kwargs,
    ):
        details = kwargs.pop("details", {})

        if timeout:
            details["timeout_seconds"] = timeout

        if message is None:
            message = "Network operation timed out"
            if url:
                message = f"Request to {url} timed out"
            if timeout:
                message += f" after {timeout} seconds"

        super().__init__(
            message, url, status_code=status_code, details=details, **kwargs
        )


# Utility functions


def bounded_message(error: BaseException | str, max_length: int = 500) -> str:
    """Render an error as a single message no longer than ``max_length``."""
    if isinstance(error, SearchError):
        text = error.message
    else:
        text = str(error) or error.__class__.__name__

    if len(text) > max_length:
        return text[: max(0, max_length - 3)] + "..."
    return text


def format_exception(e: Exception) -> dict[str, Any]:
    """Format an exception for structured logging."""
    if isinstance(e, SearchError):
        result = e.to_dict()
        result["traceback"] = traceback.format_exc()
        return result

    return {
        "error_type": e.__class__.__name__,
        "message": str(e),
        "traceback": traceback.format_exc(),
    }


def http_error_response(
    error: Exception | str,
    status_code: int = http.HTTPStatus.INTERNAL_SERVER_ERROR,
    **kwargs,
) -> dict[str, Any]:
    """Convert an error to a standardized HTTP error response.

    Args:
        error: The error (either an exception instance or a string message)
        status_code: HTTP status code to use (defaults to 500)
        **kwargs: Additional fields to include in the response

    Returns:
        A dictionary suitable for returning as a JSON error response
    """
    if isinstance(error, SearchError):
        response = error.to_dict()
        status_code = error.status_code
    elif isinstance(error, Exception):
        response = {
            "error_type": error.__class__.__name__,
            "message": str(error),
        }
    else:
        response = {
            "error_type": "Error",
            "message": str(error),
        }

    response["status_code"] = int(status_code)

    for key, value in kwargs.items():
        if key not in response:
            response[key] = value

    return response
