"""Typed errors raised by the GitHub API boundary.

Every failed call is classified exactly once, in :func:`classify_response`,
so callers match on the exception type instead of inspecting HTTP details.
"""
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Mapping, Optional


class GitHubApiError(Exception):
    """Base class for all GitHub API failures."""
    pass


class RateLimitExceeded(GitHubApiError):
    """Raised when GitHub throttles the client and retries are exhausted."""

    def __init__(
        self,
        message: str,
        reset_at: Optional[datetime] = None,
        retry_after: Optional[float] = None,
        secondary: bool = False
    ):
        super().__init__(message)
        self.reset_at = reset_at
        self.retry_after = retry_after
        self.secondary = secondary


class AuthenticationFailed(GitHubApiError):
    """Raised on HTTP 401: the configured token is invalid or expired."""
    pass


class ResourceNotFound(GitHubApiError):
    """Raised on HTTP 404 for the requested entity."""

    def __init__(self, resource: str):
        super().__init__(f"GitHub resource not found: {resource}")
        self.resource = resource


class UpstreamError(GitHubApiError):
    """Any other failure, wrapping the original fault."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Seconds to wait from a Retry-After header, in delta-seconds or HTTP-date form."""
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, when.timestamp() - time.time())


def classify_response(
    status: int,
    headers: Mapping[str, str],
    message: str,
    resource: str
) -> GitHubApiError:
    """Map a non-successful GitHub response to a typed error.

    Args:
        status: HTTP status code
        headers: Response headers
        message: The ``message`` field of the error body (may be empty)
        resource: Logical identity of the requested entity

    Returns:
        The matching GitHubApiError instance (not raised)
    """
    lowered = (message or "").lower()

    if status in (403, 429):
        remaining = _header(headers, "x-ratelimit-remaining")
        reset = _header(headers, "x-ratelimit-reset")
        retry_after_header = _header(headers, "retry-after")
        retry_after = _parse_retry_after(retry_after_header)
        reset_at = None
        if reset and reset.isdigit():
            reset_at = datetime.fromtimestamp(int(reset), tz=timezone.utc)

        if "secondary rate limit" in lowered or "abuse" in lowered:
            return RateLimitExceeded(
                f"GitHub secondary rate limit hit while fetching {resource}",
                reset_at=reset_at,
                retry_after=retry_after,
                secondary=True
            )

        if remaining == "0" or "api rate limit exceeded" in lowered:
            wait = retry_after
            if wait is None and reset_at:
                wait = max(0.0, int(reset) - time.time())
            reset_message = f" Rate limit resets at {reset_at.isoformat()}." if reset_at else ""
            return RateLimitExceeded(
                f"GitHub API rate limit exceeded while fetching {resource}.{reset_message}",
                reset_at=reset_at,
                retry_after=wait
            )

        if retry_after_header:
            return RateLimitExceeded(
                f"GitHub secondary rate limit hit while fetching {resource}",
                retry_after=retry_after,
                secondary=True
            )

    if status == 401:
        return AuthenticationFailed(
            "GitHub API authentication failed. The token may be invalid or expired."
        )

    if status == 404:
        return ResourceNotFound(resource)

    return UpstreamError(
        f"GitHub API returned HTTP {status} for {resource}: {message}"
    )
