"""
Error taxonomy and the factory that maps failed responses onto it.

Hierarchy::

    RewriteAPIError
    ├── RequestTimeoutError   attempt exceeded its timeout
    ├── HTTPError             terminal non-2xx response
    │   └── RateLimitError    retries exhausted on 429
    └── RewriteError          application-level error payload
"""

from __future__ import annotations

from typing import Any

from .models import RateLimitContext


class RewriteAPIError(Exception):
    """Base class for every error raised by the client."""


class RequestTimeoutError(RewriteAPIError):
    """A single attempt did not complete within its timeout."""

    name = "TimeoutError"

    def __init__(self, url: str, method: str, timeout: int) -> None:
        self.url = url
        self.method = method
        self.timeout = timeout  # milliseconds
        super().__init__(f"{method} {url} timed out after {timeout}ms")


class HTTPError(RewriteAPIError):
    """A terminal HTTP failure."""

    def __init__(self, message: str, status: int, url: str, method: str) -> None:
        self.message = message
        self.status = status
        self.url = url
        self.method = method
        self.name = f"HTTPError({status})"
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.name}: {self.message} [{self.method} {self.url}]"


class RateLimitError(HTTPError):
    """Retries were exhausted while the API kept answering 429."""

    def __init__(
        self,
        message: str,
        status: int,
        url: str,
        method: str,
        limit: int,
        is_global: bool,
        retry_after: int,
    ) -> None:
        super().__init__(message, status, url, method)
        self.limit = limit
        self.is_global = is_global
        self.retry_after = retry_after  # milliseconds
        self.name = f"RateLimitError({status})"


class RewriteError(RewriteAPIError):
    """
    Application-level failure reported by the API body.

    ``code`` is the machine-readable error code (e.g. ``INVALID_PAYLOAD``);
    ``detailed`` holds the nested detail object, if any.
    """

    def __init__(
        self,
        message: str,
        code: str,
        detailed: Any = None,
        status: int | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.detailed = detailed
        self.status = status
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def _error_message(payload: Any, response: Any) -> str:
    """Pick the most descriptive message available for a failed response."""
    if isinstance(payload, dict):
        if isinstance(payload.get("message"), str):
            return payload["message"]
        if isinstance(payload.get("error"), str):
            return payload["error"]
    if isinstance(payload, str) and payload:
        return payload
    return (
        getattr(response, "reason", None)
        or f"Request failed with status {response.status_code}"
    )


def create_error(payload: Any, response: Any, method: str) -> RewriteAPIError:
    """
    Build the error for a terminal, non-retryable response.

    A payload carrying ``code`` is a business error; anything else (including
    an unparseable body, passed as ``None``) is a protocol error.

    Args:
        payload: JSON-decoded response body, or ``None``.
        response: The failed response.
        method: HTTP method of the request.

    Returns:
        A :class:`RewriteError` or :class:`HTTPError` instance (not raised).
    """
    message = _error_message(payload, response)

    if isinstance(payload, dict) and payload.get("code"):
        nested = payload.get("error")
        detailed = nested.get("detailed") if isinstance(nested, dict) else None
        return RewriteError(
            message,
            str(payload["code"]),
            detailed=detailed,
            status=response.status_code,
        )

    return HTTPError(message, response.status_code, response.url, method)


def create_retry_exhausted_error(
    response: Any,
    method: str,
    rate_limit: RateLimitContext | None = None,
) -> HTTPError:
    """
    Build the error raised once a retryable status has used every retry.

    Args:
        response: The last failed response.
        method: HTTP method of the request.
        rate_limit: Parsed context when the last status was 429.

    Returns:
        :class:`RateLimitError` when ``rate_limit`` is given, else
        :class:`HTTPError`.
    """
    message = "Max retries reached"

    if rate_limit is not None:
        return RateLimitError(
            message,
            response.status_code,
            response.url,
            method,
            limit=rate_limit.limit,
            is_global=rate_limit.is_global,
            retry_after=rate_limit.retry_after,
        )

    return HTTPError(message, response.status_code, response.url, method)
