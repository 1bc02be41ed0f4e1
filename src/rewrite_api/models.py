"""
Data model for the request pipeline.

- :class:`RESTOptions`      — client configuration, lives as long as the client
- :class:`RetryOptions`     — retry policy carried by ``RESTOptions.retry``
- :class:`FetchOptions`     — one logical call, immutable across attempts
- :class:`RateLimitContext` — parsed from a single 429 response
- :class:`RetryContext`     — what ``RetryOptions.on_retry`` receives
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, fields
from typing import Any, Union

from .config import DEFAULT_BASE_URL, DEFAULT_MAX_RETRIES

# Query string parameters: mapping, ordered (key, value) pairs, or pre-encoded
QueryLike = Union[str, Mapping[str, Any], Sequence[tuple[str, Any]]]


@dataclass
class RetryOptions:
    """Options used when retrying failed requests."""

    max_retries: int = DEFAULT_MAX_RETRIES
    # attempt (0-based) -> delay in milliseconds; None uses retry.backoff
    delay: Callable[[int], float] | None = None
    # Called before each retry; exceptions abort the retry sequence
    on_retry: Callable[[RetryContext], Any] | None = None
    # Treat RequestTimeoutError like a retryable status
    retry_on_timeout: bool = False


@dataclass
class RESTOptions:
    """
    Configuration for a :class:`~rewrite_api.client.REST` client.

    ``auth`` is replaced in place by ``REST.set_auth``.  Every field,
    ``headers`` included, is read at dispatch time, so mutating it affects
    subsequent calls only.
    """

    auth: str
    base_url: str = DEFAULT_BASE_URL
    # Milliseconds; None falls back to config.DEFAULT_TIMEOUT_MS
    timeout: int | None = None
    headers: dict[str, str] = field(default_factory=dict)
    retry: RetryOptions = field(default_factory=RetryOptions)
    on_rate_limit: Callable[[RateLimitContext], Any] | None = None
    # Same signature as requests.request; None means requests.request
    transport: Callable[..., Any] | None = None

    @classmethod
    def coerce(cls, options: RESTOptions | Mapping[str, Any] | str) -> RESTOptions:
        """
        Normalize the accepted constructor inputs into ``RESTOptions``.

        Args:
            options: A bare API key, an existing ``RESTOptions``, or a mapping
                     of ``RESTOptions`` field names (``retry`` may itself be
                     a mapping of ``RetryOptions`` field names).

        Returns:
            A ``RESTOptions`` instance.

        Raises:
            TypeError: Unsupported input type or unknown field names.
        """
        if isinstance(options, cls):
            return options

        if isinstance(options, str):
            return cls(auth=options)

        if isinstance(options, Mapping):
            values = dict(options)
            retry = values.get("retry")
            if isinstance(retry, Mapping):
                retry = dict(retry)
                # {"max": n} is the documented short form of max_retries
                if "max" in retry:
                    retry["max_retries"] = retry.pop("max")
                values["retry"] = RetryOptions(**retry)
            elif retry is None:
                values.pop("retry", None)
            return cls(**values)

        raise TypeError(
            f"REST options must be a str, RESTOptions or mapping, "
            f"got {type(options).__name__}"
        )


@dataclass(frozen=True)
class FetchOptions:
    """
    Options for a single logical call.

    Built once per call and reused unchanged by every retry attempt.
    """

    method: str = "GET"
    # Serialized with json.dumps; None sends no body
    data: Any = None
    query: QueryLike | None = None
    headers: Mapping[str, str] | None = None
    # Milliseconds; overrides RESTOptions.timeout
    timeout: int | None = None

    @classmethod
    def build(
        cls,
        method: str,
        data: Any = None,
        options: FetchOptions | Mapping[str, Any] | None = None,
    ) -> FetchOptions:
        """Merge caller options with the method and body of a verb helper."""
        if options is None:
            values: dict[str, Any] = {}
        elif isinstance(options, FetchOptions):
            values = {f.name: getattr(options, f.name) for f in fields(options)}
        else:
            values = dict(options)

        # Verb helpers always win for method; an explicit body wins over data=
        if data is not None:
            values["data"] = data
        values["method"] = method.upper()
        return cls(**values)


@dataclass(frozen=True)
class RateLimitContext:
    """Rate-limit metadata parsed from a 429 response."""

    limit: int
    is_global: bool
    retry_after: int  # milliseconds


@dataclass(frozen=True)
class RetryContext:
    """Attempt context handed to ``RetryOptions.on_retry``."""

    route: str
    method: str
    attempt: int
    options: FetchOptions
    # None when the failed attempt timed out
    response: Any = None
