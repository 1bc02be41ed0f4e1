"""
rewrite_api — Python client for the Rewrite REST API.

Module layout
-------------
config.py    — base URL, timeouts, backoff constants, retryable statuses, header names
models.py    — RESTOptions, RetryOptions, FetchOptions, RateLimitContext, RetryContext
executor.py  — URL construction, request headers/body, single-attempt execution
retry.py     — status classification, jittered backoff, retry delays
parser.py    — response body parsing, rate-limit header extraction
errors.py    — error taxonomy and the factory mapping failed responses onto it
client.py    — REST client and the retrying request engine

Public interface
----------------
Create a client and call the API:
    client = REST("api-key")
    client.get("/messages", {"query": {"page": "1"}})
    client.post("/messages", {"to": "+5511999999999", "message": "oi"})

Swap the API key at runtime:
    client.set_auth("new-key")

Handle failures:
    RewriteError (business), RateLimitError, HTTPError, RequestTimeoutError
"""

from .client import REST
from .errors import (
    HTTPError,
    RateLimitError,
    RequestTimeoutError,
    RewriteAPIError,
    RewriteError,
)
from .executor import create_url
from .models import (
    FetchOptions,
    RateLimitContext,
    RESTOptions,
    RetryContext,
    RetryOptions,
)
from .retry import backoff, is_retryable_status, is_timeout_error
from .version import API_VERSION, __version__

__all__ = [
    # Client
    "REST",
    # Configuration and call options
    "RESTOptions",
    "RetryOptions",
    "FetchOptions",
    "RateLimitContext",
    "RetryContext",
    # Errors
    "RewriteAPIError",
    "HTTPError",
    "RateLimitError",
    "RewriteError",
    "RequestTimeoutError",
    # Helpers
    "create_url",
    "backoff",
    "is_retryable_status",
    "is_timeout_error",
    # Versions
    "API_VERSION",
    "__version__",
]
