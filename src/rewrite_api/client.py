"""
REST client for the Rewrite API and the retrying request engine.

Every public verb funnels into :meth:`REST._fetch`, which drives one logical
call through as many physical attempts as the retry policy allows:

    send ── ok ──────────────► return payload["data"]
      │
      └─ failed ─ terminal ──► raise create_error(...)
                │
                └ retryable ─ attempts left? ─ no ─► raise retry-exhausted error
                                    │
                                   yes ─► on_rate_limit, on_retry, sleep, send
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Any, Union

from .config import (
    API_KEY_ENV,
    BASE_URL_ENV,
    DEFAULT_HEADERS,
    DEFAULT_TIMEOUT_MS,
)
from .errors import RequestTimeoutError, create_error, create_retry_exhausted_error
from .executor import build_auth_header, build_request_headers, create_url, send_request
from .models import FetchOptions, RateLimitContext, RESTOptions, RetryContext
from .parser import extract_data, parse_json_body, parse_rate_limit
from .retry import backoff, is_retryable_status, sleep

logger = logging.getLogger(__name__)

OptionsLike = Union[FetchOptions, Mapping[str, Any], None]


class REST:
    """
    Client for the Rewrite REST API.

    Accepts a bare API key or a full configuration::

        client = REST("api-key")
        client = REST({"auth": "api-key", "retry": {"max_retries": 5}})
        client = REST(RESTOptions(auth="api-key", timeout=10_000))

        message = client.post("/messages", {"to": "+5511999999999", "message": "oi"})

    Calls return the ``data`` field of the response body or raise a
    :class:`~rewrite_api.errors.RewriteAPIError` subclass.
    """

    def __init__(self, options: RESTOptions | Mapping[str, Any] | str) -> None:
        self.options = RESTOptions.coerce(options)

    @property
    def headers(self) -> dict[str, str]:
        """Headers sent with each request, rebuilt from the current options."""
        return {
            **DEFAULT_HEADERS,
            **self.options.headers,
            **build_auth_header(self.options.auth),
        }

    @classmethod
    def from_env(cls, **overrides: Any) -> REST:
        """
        Build a client from ``REWRITE_API_KEY`` and ``REWRITE_BASE_URL``.

        Args:
            **overrides: Extra ``RESTOptions`` fields (e.g. ``timeout``).

        Raises:
            ValueError: If ``REWRITE_API_KEY`` is unset.
        """
        api_key = os.getenv(API_KEY_ENV)
        if not api_key:
            raise ValueError(
                f"API key not found. Set the '{API_KEY_ENV}' environment variable."
            )

        values: dict[str, Any] = {"auth": api_key}
        if base_url := os.getenv(BASE_URL_ENV):
            values["base_url"] = base_url
        values.update(overrides)
        return cls(values)

    def set_auth(self, authorization: str) -> REST:
        """
        Replace the API key used by subsequent requests.

        Args:
            authorization: The new API key.

        Returns:
            The client itself, for chaining.
        """
        self.options.auth = authorization
        return self

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    def get(self, route: str, options: OptionsLike = None) -> Any:
        """Run a GET request against the API."""
        return self._fetch(route, FetchOptions.build("GET", options=options))

    def post(self, route: str, data: Any = None, options: OptionsLike = None) -> Any:
        """Run a POST request against the API."""
        return self._fetch(route, FetchOptions.build("POST", data, options))

    def put(self, route: str, data: Any = None, options: OptionsLike = None) -> Any:
        """Run a PUT request against the API."""
        return self._fetch(route, FetchOptions.build("PUT", data, options))

    def patch(self, route: str, data: Any = None, options: OptionsLike = None) -> Any:
        """Run a PATCH request against the API."""
        return self._fetch(route, FetchOptions.build("PATCH", data, options))

    def delete(self, route: str, options: OptionsLike = None) -> Any:
        """Run a DELETE request against the API."""
        return self._fetch(route, FetchOptions.build("DELETE", options=options))

    # ------------------------------------------------------------------
    # Request engine
    # ------------------------------------------------------------------

    def _send(self, route: str, options: FetchOptions) -> Any:
        if options.timeout is not None:
            timeout = options.timeout
        elif self.options.timeout is not None:
            timeout = self.options.timeout
        else:
            timeout = DEFAULT_TIMEOUT_MS
        url = create_url(route, options.query, self.options.base_url)
        headers = build_request_headers(self.headers, options)
        return send_request(url, options, headers, timeout, self.options.transport)

    def _fetch(self, route: str, options: FetchOptions) -> Any:
        """
        Execute one logical call, retrying transient failures.

        The attempt counter starts at 0 and grows by one per retry, so at
        most ``retry.max_retries + 1`` physical requests are made.
        """
        retry = self.options.retry
        attempt = 0

        while True:
            try:
                response = self._send(route, options)
            except RequestTimeoutError:
                if not retry.retry_on_timeout or attempt >= retry.max_retries:
                    raise
                self._before_retry(route, options, attempt, None, None)
                attempt += 1
                continue

            if response.ok:
                return extract_data(parse_json_body(response))

            if not is_retryable_status(response.status_code):
                raise create_error(parse_json_body(response), response, options.method)

            rate_limit = parse_rate_limit(response)

            if attempt >= retry.max_retries:
                logger.error(
                    f"{options.method} {route} failed with {response.status_code} "
                    f"after {attempt + 1} attempt(s)"
                )
                raise create_retry_exhausted_error(response, options.method, rate_limit)

            self._before_retry(route, options, attempt, response, rate_limit)
            attempt += 1

    def _before_retry(
        self,
        route: str,
        options: FetchOptions,
        attempt: int,
        response: Any,
        rate_limit: RateLimitContext | None,
    ) -> None:
        """Run the retry callbacks, then wait out the retry delay."""
        retry = self.options.retry

        if rate_limit is not None and self.options.on_rate_limit is not None:
            self.options.on_rate_limit(rate_limit)

        if retry.on_retry is not None:
            retry.on_retry(
                RetryContext(
                    route=route,
                    method=options.method,
                    attempt=attempt,
                    options=options,
                    response=response,
                )
            )

        if rate_limit is not None and rate_limit.retry_after > 0:
            delay = rate_limit.retry_after
        else:
            delay = (retry.delay or backoff)(attempt)

        status = response.status_code if response is not None else "timeout"
        logger.warning(
            f"Attempt {attempt + 1}/{retry.max_retries + 1} for "
            f"{options.method} {route} failed [{status}]. Retrying in {delay}ms..."
        )
        sleep(delay)
