"""
Client defaults, retry constants, and header names.

All constants used across the request pipeline are centralized here so that
config is separated from logic.  Per-client overrides live on
:class:`~rewrite_api.models.RESTOptions`.
"""

from __future__ import annotations

from .version import API_VERSION

# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

DEFAULT_BASE_URL: str = "https://api.rewritetoday.com"
# Path segment prepended to every route: /v1/messages
API_VERSION_PATH: str = f"/v{API_VERSION}"

# ---------------------------------------------------------------------------
# Environment variables read by REST.from_env()
# ---------------------------------------------------------------------------

API_KEY_ENV: str = "REWRITE_API_KEY"
BASE_URL_ENV: str = "REWRITE_BASE_URL"

# ---------------------------------------------------------------------------
# Request defaults
# ---------------------------------------------------------------------------

FIVE_SECONDS_IN_MS: int = 5000
DEFAULT_TIMEOUT_MS: int = FIVE_SECONDS_IN_MS
DEFAULT_MAX_RETRIES: int = 3

DEFAULT_HEADERS: dict[str, str] = {"Content-Type": "application/json"}

# ---------------------------------------------------------------------------
# Backoff (milliseconds)
# ---------------------------------------------------------------------------

BASE_DELAY_MS: int = 300
MAX_DELAY_MS: int = 10_000
JITTER_FACTOR: float = 0.3  # jitter adds at most 30% on top of the exponential

# ---------------------------------------------------------------------------
# Status classification
# ---------------------------------------------------------------------------

RATE_LIMIT_STATUS: int = 429

# Transient statuses that warrant automatic retry
RETRYABLE_STATUS: frozenset[int] = frozenset(
    {408, 425, RATE_LIMIT_STATUS, 500, 502, 503, 504}
)

# ---------------------------------------------------------------------------
# Rate-limit response headers
# ---------------------------------------------------------------------------

RATE_LIMIT_LIMIT_HEADER: str = "X-RateLimit-Limit"
RATE_LIMIT_GLOBAL_HEADER: str = "X-RateLimit-Global"
RATE_LIMIT_RETRY_AFTER_HEADER: str = "X-RateLimit-Retry-After"  # milliseconds
RETRY_AFTER_HEADER: str = "Retry-After"  # seconds or HTTP date
