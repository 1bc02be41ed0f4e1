"""
Request construction and single-attempt execution.

Design notes:
- create_url never re-encodes a query that is already a string.
- send_request performs exactly one physical attempt; retries are driven
  by the client.  Timeouts surface as RequestTimeoutError so the client can
  tell them apart from protocol failures.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import urlencode

import requests

from .config import API_VERSION_PATH, DEFAULT_BASE_URL
from .errors import RequestTimeoutError
from .models import FetchOptions, QueryLike

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# URL construction
# ---------------------------------------------------------------------------

def encode_query(query: QueryLike | None) -> str:
    """
    Encode query parameters into a query string (without the leading ``?``).

    Mappings keep insertion order; sequences of ``(key, value)`` pairs keep
    their order and may repeat keys.  A list or tuple value expands into one
    ``key=item`` pair per item.  Strings are treated as already encoded.
    """
    if not query:
        return ""
    if isinstance(query, str):
        return query.lstrip("?")
    if isinstance(query, Mapping):
        query = list(query.items())
    return urlencode(list(query), doseq=True)


def create_url(
    route: str,
    query: QueryLike | None = None,
    base_url: str | None = None,
) -> str:
    """
    Compose the full request URL for an API route.

    Args:
        route: Route starting with ``/`` (e.g. ``'/messages'``).
        query: Optional query parameters, see :func:`encode_query`.
        base_url: Override for ``DEFAULT_BASE_URL``.

    Returns:
        ``'{base_url}/v1{route}'`` with ``?{query}`` appended when the
        encoded query is non-empty.
    """
    base = (base_url or DEFAULT_BASE_URL).rstrip("/")
    url = f"{base}{API_VERSION_PATH}{route}"

    encoded = encode_query(query)
    return f"{url}?{encoded}" if encoded else url


# ---------------------------------------------------------------------------
# Request construction
# ---------------------------------------------------------------------------

def build_auth_header(auth: str) -> dict[str, str]:
    """Return the bearer ``Authorization`` header for an API key."""
    return {"Authorization": f"Bearer {auth}"}


def build_request_headers(
    client_headers: Mapping[str, str],
    options: FetchOptions,
) -> dict[str, str]:
    """
    Snapshot the headers for one attempt.

    Per-call headers override client headers (including ``Authorization``).
    The returned dict is a fresh copy so later ``set_auth`` calls do not
    leak into a request already being dispatched.
    """
    return {**client_headers, **(options.headers or {})}


def build_request_body(options: FetchOptions) -> str | None:
    """Serialize the request payload as JSON, or ``None`` for no body."""
    if options.data is None:
        return None
    return json.dumps(options.data)


# ---------------------------------------------------------------------------
# API call execution
# ---------------------------------------------------------------------------

def send_request(
    url: str,
    options: FetchOptions,
    headers: Mapping[str, str],
    timeout: int,
    transport: Callable[..., Any] | None = None,
) -> Any:
    """
    Execute a single physical HTTP request.

    Args:
        url: Fully built request URL.
        options: Call options (method and body are read from here).
        headers: Header snapshot from :func:`build_request_headers`.
        timeout: Timeout in milliseconds.
        transport: Callable with the ``requests.request`` signature;
                   defaults to ``requests.request``.

    Returns:
        The transport's response object, whatever its status.

    Raises:
        RequestTimeoutError: The attempt exceeded ``timeout``.
        requests.RequestException: Any other transport failure.
    """
    send = transport or requests.request
    logger.debug(f"{options.method} {url} (timeout={timeout}ms)")

    try:
        return send(
            options.method,
            url,
            headers=dict(headers),
            data=build_request_body(options),
            timeout=timeout / 1000,
        )
    except requests.Timeout as exc:
        raise RequestTimeoutError(url, options.method, timeout) from exc
