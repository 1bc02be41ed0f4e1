"""
Shared pytest fixtures and response builders for the client tests.

Responses are real ``requests.Response`` objects so header lookups stay
case-insensitive and ``.ok`` / ``.json()`` behave exactly as in production.
"""

from __future__ import annotations

import json
from http import HTTPStatus
from unittest.mock import MagicMock, patch

import pytest
import requests
from requests.structures import CaseInsensitiveDict

BASE_URL = "https://api.rewritetoday.com"


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------

def make_response(
    status: int,
    payload: object | None = None,
    headers: dict[str, str] | None = None,
    url: str = f"{BASE_URL}/v1/messages",
) -> requests.Response:
    """Build a ``requests.Response`` with an optional JSON body."""
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.reason = HTTPStatus(status).phrase
    response.headers = CaseInsensitiveDict(headers or {})

    if payload is None:
        response._content = b""
    else:
        response._content = json.dumps(payload).encode("utf-8")
        response.headers.setdefault("Content-Type", "application/json")

    return response


def make_transport(*responses: requests.Response | Exception) -> MagicMock:
    """Transport mock returning (or raising) ``responses`` in order."""
    return MagicMock(side_effect=list(responses))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def no_sleep():
    """Patch out the retry delay so retry tests run instantly."""
    with patch("rewrite_api.retry.time.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture
def ok_response():
    """200 response carrying ``{"data": {"ok": True}}``."""
    return make_response(200, {"data": {"ok": True}})


@pytest.fixture
def rate_limited_response():
    """429 response with a 100-request ceiling and a 1.5 s retry hint."""
    return make_response(
        429,
        headers={
            "X-RateLimit-Limit": "100",
            "X-RateLimit-Global": "false",
            "X-RateLimit-Retry-After": "1500",
        },
    )
