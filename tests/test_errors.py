"""Tests for GitHub error classification."""
import time
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from gitflex.domain.errors import (
    AuthenticationFailed,
    RateLimitExceeded,
    ResourceNotFound,
    UpstreamError,
    classify_response
)


def test_primary_rate_limit_carries_reset_time():
    reset = int(time.time()) + 120
    error = classify_response(
        403,
        {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": str(reset)},
        "API rate limit exceeded for 1.2.3.4.",
        "user octocat"
    )

    assert isinstance(error, RateLimitExceeded)
    assert error.secondary is False
    assert int(error.reset_at.timestamp()) == reset
    assert 0 < error.retry_after <= 120


def test_primary_rate_limit_detected_by_message_only():
    error = classify_response(403, {}, "API rate limit exceeded", "user octocat")

    assert isinstance(error, RateLimitExceeded)
    assert error.reset_at is None
    assert error.retry_after is None


def test_secondary_rate_limit():
    error = classify_response(
        403,
        {"Retry-After": "30"},
        "You have exceeded a secondary rate limit.",
        "commits of octocat/hello"
    )

    assert isinstance(error, RateLimitExceeded)
    assert error.secondary is True
    assert error.retry_after == 30.0


def test_429_with_retry_after_is_secondary():
    error = classify_response(429, {"retry-after": "5"}, "", "user octocat")

    assert isinstance(error, RateLimitExceeded)
    assert error.secondary is True


def test_plain_403_is_upstream_error():
    error = classify_response(403, {"X-RateLimit-Remaining": "4999"}, "Resource not accessible", "user octocat")

    assert isinstance(error, UpstreamError)


def test_401():
    assert isinstance(classify_response(401, {}, "Bad credentials", "user octocat"), AuthenticationFailed)


def test_404_names_resource():
    error = classify_response(404, {}, "Not Found", "user ghost")

    assert isinstance(error, ResourceNotFound)
    assert error.resource == "user ghost"
    assert "user ghost" in str(error)


def test_other_status():
    error = classify_response(502, {}, "Bad Gateway", "user octocat")

    assert isinstance(error, UpstreamError)
    assert "502" in str(error)


def test_retry_after_as_http_date():
    when = format_datetime(datetime.now(timezone.utc) + timedelta(seconds=90), usegmt=True)
    error = classify_response(429, {"Retry-After": when}, "", "user octocat")

    assert isinstance(error, RateLimitExceeded)
    assert error.secondary is True
    assert 0 < error.retry_after <= 90


def test_unparseable_retry_after_is_ignored():
    error = classify_response(
        403,
        {"Retry-After": "soon", "X-RateLimit-Remaining": "0"},
        "API rate limit exceeded",
        "user octocat"
    )

    assert isinstance(error, RateLimitExceeded)
    assert error.retry_after is None
