"""
Status classification, jittered exponential backoff, and retry delays.

Backoff schedule (before jitter, milliseconds):
  attempt 0 → 300, 1 → 600, 2 → 1200, 3 → 2400, ... capped at 10 000.
Jitter adds up to 30% on top of each value.
"""

from __future__ import annotations

import logging
import math
import random
import time
from typing import Any

import requests

from .config import BASE_DELAY_MS, JITTER_FACTOR, MAX_DELAY_MS, RETRYABLE_STATUS
from .errors import RequestTimeoutError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def is_retryable_status(status: int) -> bool:
    """Return ``True`` if ``status`` is eligible for automatic retry."""
    return status in RETRYABLE_STATUS


def is_timeout_error(error: Any) -> bool:
    """
    Return ``True`` if ``error`` represents an attempt that timed out.

    Recognizes ``requests.Timeout`` (connect and read timeouts),
    :class:`~rewrite_api.errors.RequestTimeoutError`, and any object whose
    ``name`` attribute is ``"TimeoutError"``.
    """
    if isinstance(error, (requests.Timeout, RequestTimeoutError)):
        return True
    return getattr(error, "name", None) == "TimeoutError"


# ---------------------------------------------------------------------------
# Backoff helpers
# ---------------------------------------------------------------------------

def backoff(attempt: int) -> int:
    """
    Return the jittered delay in milliseconds for a retry attempt.

    Args:
        attempt: 0-based index of the attempt that just failed.

    Returns:
        ``floor(exp + jitter)`` where ``exp = min(10 000, 300 * 2**attempt)``
        and ``jitter`` is uniform in ``[0, 0.3 * exp)``.
    """
    exp = min(MAX_DELAY_MS, BASE_DELAY_MS * 2**attempt)
    jitter = random.random() * exp * JITTER_FACTOR
    return math.floor(exp + jitter)


def sleep(ms: float) -> None:
    """Block for ``ms`` milliseconds; non-positive values return immediately."""
    if ms <= 0:
        return
    logger.debug(f"Sleeping {ms}ms before next attempt")
    time.sleep(ms / 1000)
