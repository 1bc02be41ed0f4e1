"""
Response body parsing and rate-limit header extraction.

No I/O occurs here beyond reading an already-received response; all
functions are pure transformations so they are easy to unit test.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

from .config import (
    RATE_LIMIT_GLOBAL_HEADER,
    RATE_LIMIT_LIMIT_HEADER,
    RATE_LIMIT_RETRY_AFTER_HEADER,
    RATE_LIMIT_STATUS,
    RETRY_AFTER_HEADER,
)
from .models import RateLimitContext


# ---------------------------------------------------------------------------
# Body parsing
# ---------------------------------------------------------------------------

def parse_json_body(response: Any) -> Any:
    """
    Decode a response body as JSON.

    Returns:
        The decoded value, or ``None`` when the body is empty or not JSON.
    """
    try:
        return response.json()
    except ValueError:
        # requests.JSONDecodeError subclasses ValueError
        return None


def extract_data(payload: Any) -> Any:
    """
    Return the ``data`` field of a successful response envelope.

    Successful responses are shaped ``{"data": ...}``; anything else yields
    ``None``.
    """
    if isinstance(payload, Mapping):
        return payload.get("data")
    return None


# ---------------------------------------------------------------------------
# Header parsing
# ---------------------------------------------------------------------------

def _parse_number(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        number = float(value.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _ceil_ms(ms: float) -> int:
    # Values too large to represent (e.g. "1e306" seconds) are unusable
    if not math.isfinite(ms) or ms <= 0:
        return 0
    return math.ceil(ms)


def parse_retry_after(
    headers: Mapping[str, str],
    now: datetime | None = None,
) -> int:
    """
    Resolve the delay a 429 response asks for, in milliseconds.

    Precedence:
      1. ``X-RateLimit-Retry-After`` (milliseconds) when > 0
      2. ``Retry-After`` as seconds, converted to ms and rounded up
      3. ``Retry-After`` as an HTTP date, relative to ``now`` (never negative)

    Args:
        headers: Case-insensitive response headers.
        now: Reference time for HTTP-date values (defaults to current UTC).

    Returns:
        Delay in milliseconds; 0 when nothing usable is present.
    """
    precise = _parse_number(headers.get(RATE_LIMIT_RETRY_AFTER_HEADER))
    if precise is not None and precise > 0:
        return _ceil_ms(precise)

    retry_after = headers.get(RETRY_AFTER_HEADER)
    if not retry_after:
        return 0

    seconds = _parse_number(retry_after)
    if seconds is not None:
        return _ceil_ms(seconds * 1000)

    try:
        target = parsedate_to_datetime(retry_after)
    except (TypeError, ValueError):
        return 0
    if target is None:
        return 0
    if target.tzinfo is None:
        target = target.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    delta_ms = (target - now).total_seconds() * 1000
    return max(0, math.floor(delta_ms))


def parse_rate_limit(
    response: Any,
    now: datetime | None = None,
) -> RateLimitContext | None:
    """
    Extract rate-limit metadata from a 429 response.

    Args:
        response: Response exposing ``status_code`` and ``headers``.
        now: Reference time forwarded to :func:`parse_retry_after`.

    Returns:
        :class:`RateLimitContext`, or ``None`` for any other status.
    """
    if response.status_code != RATE_LIMIT_STATUS:
        return None

    headers = response.headers
    limit = _parse_number(headers.get(RATE_LIMIT_LIMIT_HEADER))
    is_global = (headers.get(RATE_LIMIT_GLOBAL_HEADER) or "").lower() == "true"

    return RateLimitContext(
        limit=int(limit) if limit is not None else 0,
        is_global=is_global,
        retry_after=parse_retry_after(headers, now),
    )
