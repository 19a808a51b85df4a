"""
Exception hierarchy for the Heroku client library.

Every failure surfaced by a client operation is a HerokuClientError. Errors
that come from a non-2xx response are StatusError subclasses chosen from the
status code; everything else names the stage that failed (configuration,
request building, transport, decoding, path derivation).
"""

from typing import Any, Dict, Optional

import httpx


class HerokuClientError(Exception):
    """
    Base exception for all Heroku client errors.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code (if applicable)
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.status_code:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"status_code={self.status_code})"
        )


# =============================================================================
# Client-side Errors
# =============================================================================


class ConfigError(HerokuClientError):
    """The session URL or settings are invalid."""

    def __init__(
        self,
        message: str = "Invalid client configuration",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


class BuildError(HerokuClientError):
    """A request could not be built, usually because the payload is not serializable."""

    def __init__(
        self,
        message: str = "Failed to build request",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


class InvalidPathError(HerokuClientError):
    """A path has no separator, so no collection path can be derived from it."""

    def __init__(self, path: str, *, message: Optional[str] = None):
        super().__init__(message or f"invalid path: {path!r}", details={"path": path})
        self.path = path


class TypeContractError(HerokuClientError):
    """A collection's element type does not satisfy the resource contract."""

    def __init__(
        self,
        message: str = "Type does not satisfy the resource contract",
        *,
        resource_type: Any = None,
    ):
        details = {}
        if resource_type is not None:
            details["resource_type"] = getattr(resource_type, "__name__", repr(resource_type))
        super().__init__(message, details=details)
        self.resource_type = resource_type


class DecodeError(HerokuClientError):
    """
    The response body could not be written into the requested sink.

    Raised for malformed JSON, JSON of the wrong shape for the target,
    validation failures, and errors while copying into a raw sink.
    """

    def __init__(
        self,
        message: str = "Failed to decode response",
        *,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, status_code=status_code, details=details)


# =============================================================================
# Network Errors
# =============================================================================


class TransportError(HerokuClientError):
    """
    The transport failed to deliver the request or receive a response.

    The original exception is kept as ``__cause__`` and as ``original``.
    """

    def __init__(
        self,
        message: str = "Transport error",
        *,
        original: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)
        self.original = original


# =============================================================================
# Status Errors (non-2xx)
# =============================================================================


class StatusError(HerokuClientError):
    """
    The API answered with a status outside the 2xx class.

    Attributes:
        status: The status line, e.g. "404 Not Found"
    """

    def __init__(
        self,
        status: str,
        *,
        status_code: int,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message or f"Bad status: {status}",
            status_code=status_code,
            details=details,
        )
        self.status = status


class AuthenticationError(StatusError):
    """Missing or invalid credentials (401)."""


class AuthorizationError(StatusError):
    """The credential is not allowed to perform the operation (403)."""


class NotFoundError(StatusError):
    """The resource or collection does not exist (404)."""


class ConflictError(StatusError):
    """The request conflicts with the current state of the resource (409)."""


class UnprocessableEntityError(StatusError):
    """The payload was understood but rejected (422)."""


class RateLimitError(StatusError):
    """
    Rate limit exceeded (429).

    The retry_after attribute holds the Retry-After header in seconds, if sent.
    """

    def __init__(
        self,
        status: str,
        *,
        status_code: int = 429,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        retry_after: Optional[int] = None,
    ):
        super().__init__(status, status_code=status_code, message=message, details=details)
        self.retry_after = retry_after


class ServerError(StatusError):
    """Server-side error (5xx)."""


# =============================================================================
# Exception Mapping
# =============================================================================

STATUS_CODE_EXCEPTIONS = {
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    409: ConflictError,
    422: UnprocessableEntityError,
    429: RateLimitError,
}


def status_line(response: httpx.Response) -> str:
    """Return the status line of a response, e.g. "404 Not Found"."""
    reason = response.reason_phrase
    if reason:
        return f"{response.status_code} {reason}"
    return str(response.status_code)


def status_error_from_response(response: httpx.Response) -> StatusError:
    """
    Create the StatusError subclass matching a response's status code.

    The response body is not read.
    """
    status_code = response.status_code
    status = status_line(response)
    details = {"method": response.request.method, "url": str(response.request.url)} if _has_request(response) else {}

    if status_code == 429:
        retry_after = response.headers.get("Retry-After")
        return RateLimitError(
            status,
            status_code=status_code,
            details=details,
            retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
        )

    exception_class = STATUS_CODE_EXCEPTIONS.get(status_code)
    if exception_class is None:
        exception_class = ServerError if 500 <= status_code < 600 else StatusError
    return exception_class(status, status_code=status_code, details=details)


def _has_request(response: httpx.Response) -> bool:
    try:
        response.request
    except RuntimeError:
        return False
    return True
