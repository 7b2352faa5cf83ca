"""GitHub REST API client implementation with caching and rate-limit retries."""
import asyncio
import json
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, TypeVar
import aiohttp
from tenacity import (
    RetryCallState,
    before_sleep_log,
    retry,
    retry_if_exception_type
)
from gitflex.domain.errors import (
    RateLimitExceeded,
    UpstreamError,
    classify_response
)
from gitflex.domain.github_interface import IGitHubClient
from gitflex.domain.models import CommitSummary, Profile, RepositorySummary
from gitflex.infrastructure.response_cache import ResponseCache


logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
PER_PAGE = 100

PRIMARY_RATE_LIMIT_RETRIES = 2
SECONDARY_RATE_LIMIT_RETRIES = 1
DEFAULT_RATE_LIMIT_WAIT = 60.0

T = TypeVar("T")


def _rate_limit_budget_exhausted(retry_state: RetryCallState) -> bool:
    """Stop after two primary or one secondary rate-limit retry."""
    error = retry_state.outcome.exception()
    if getattr(error, "secondary", False):
        return retry_state.attempt_number > SECONDARY_RATE_LIMIT_RETRIES
    return retry_state.attempt_number > PRIMARY_RATE_LIMIT_RETRIES


def _wait_for_rate_limit(retry_state: RetryCallState) -> float:
    """Honor the server-specified wait, capped by the client's max_retry_wait."""
    client = retry_state.args[0]
    error = retry_state.outcome.exception()
    wait = getattr(error, "retry_after", None)
    if wait is None:
        wait = DEFAULT_RATE_LIMIT_WAIT
    return max(0.0, min(wait, client.max_retry_wait))


class GitHubRestClient(IGitHubClient):
    """GitHub REST API client with caching, rate-limit retries and typed errors.

    Implements the IGitHubClient port, providing an anti-corruption layer
    between the domain and GitHub's API. Every logical request goes through
    the injected ResponseCache.
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        cache: Optional[ResponseCache] = None,
        base_url: str = GITHUB_API_URL,
        max_pages: int = 1,
        max_retry_wait: float = DEFAULT_RATE_LIMIT_WAIT
    ):
        """Initialize GitHub client.

        Args:
            access_token: GitHub personal access token; without one only the
                unauthenticated rate limit applies
            cache: Response cache shared across analyses
            base_url: API root URL
            max_pages: Pages of 100 items fetched per listing
            max_retry_wait: Upper bound in seconds for a rate-limit wait
        """
        self._access_token = access_token
        self._cache = cache if cache is not None else ResponseCache()
        self._base_url = base_url.rstrip("/")
        self._max_pages = max(1, max_pages)
        self.max_retry_wait = max_retry_wait
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    async def _init_session(self) -> None:
        """Initialize the HTTP session (lazy initialization)."""
        if self._session is None:
            headers = {
                "Accept": "application/vnd.github+json",
                "User-Agent": "gitflex-analyzer",
                "X-GitHub-Api-Version": "2022-11-28",
            }
            if self._access_token:
                headers["Authorization"] = f"Bearer {self._access_token}"
            self._session = aiohttp.ClientSession(headers=headers)

    async def _send(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Tuple[int, Mapping[str, str], Any]:
        """Perform one GET request.

        Returns:
            Status code, response headers and decoded JSON body (None if empty)
        """
        await self._init_session()
        async with self._session.get(f"{self._base_url}{path}", params=params) as response:
            text = await response.text()
            body = json.loads(text) if text else None
            return response.status, dict(response.headers), body

    @retry(
        retry=retry_if_exception_type(RateLimitExceeded),
        stop=_rate_limit_budget_exhausted,
        wait=_wait_for_rate_limit,
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )
    async def _request(
        self,
        path: str,
        resource: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Execute a request and classify any failure.

        Args:
            path: API path, e.g. ``/users/octocat``
            resource: Logical identity used in error messages
            params: Query parameters

        Returns:
            Decoded JSON body

        Raises:
            RateLimitExceeded: Throttled and retries exhausted
            AuthenticationFailed: HTTP 401
            ResourceNotFound: HTTP 404
            UpstreamError: Any other failure
        """
        try:
            status, headers, body = await self._send(path, params)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Request for {resource} failed: {e}")
            raise UpstreamError(f"Request for {resource} failed: {e}", cause=e) from e

        if 200 <= status < 300:
            return body

        message = body.get("message", "") if isinstance(body, dict) else ""
        error = classify_response(status, headers, message, resource)
        if not isinstance(error, RateLimitExceeded):
            logger.error(f"GitHub API error for {resource}: {error}")
        raise error

    async def _request_paginated(
        self,
        path: str,
        resource: str,
        params: Optional[Dict[str, Any]] = None
    ) -> List[dict]:
        """Collect up to ``max_pages`` pages of a listing endpoint."""
        items: List[dict] = []
        for page in range(1, self._max_pages + 1):
            page_params = dict(params or {}, per_page=PER_PAGE, page=page)
            batch = await self._request(path, resource, page_params) or []
            if not isinstance(batch, list):
                raise UpstreamError(f"Expected a list of {resource}, got {type(batch).__name__}")
            items.extend(batch)

            # Check if there are more pages
            if len(batch) < PER_PAGE:
                break
        return items

    def _map(self, resource: str, mapper: Callable[[], T]) -> T:
        """Run a payload mapper, turning malformed payloads into UpstreamError."""
        try:
            return mapper()
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Unexpected payload for {resource}: {e!r}")
            raise UpstreamError(f"Unexpected payload for {resource}: {e!r}", cause=e) from e

    async def get_user(self, username: str) -> Profile:
        """Fetch a user profile.

        Args:
            username: GitHub login

        Returns:
            Profile snapshot, cached under ``user:<username>``
        """
        resource = f"user {username}"

        async def fetch() -> Profile:
            data = await self._request(f"/users/{username}", resource)
            return self._map(resource, lambda: Profile.from_api(data))

        return await self._cache.get_or_fetch(f"user:{username}", fetch)

    async def list_repositories(self, username: str) -> List[RepositorySummary]:
        """List a user's repositories, most recently updated first.

        Args:
            username: GitHub login

        Returns:
            Repositories including forks, cached under ``repos:<username>``
        """
        resource = f"repositories of {username}"

        async def fetch() -> List[RepositorySummary]:
            data = await self._request_paginated(
                f"/users/{username}/repos",
                resource,
                {"sort": "updated"}
            )
            logger.info(f"Fetched {len(data)} repositories for {username}")
            return self._map(resource, lambda: [RepositorySummary.from_api(item) for item in data])

        return await self._cache.get_or_fetch(f"repos:{username}", fetch)

    async def list_commits(self, owner: str, repo: str) -> List[CommitSummary]:
        """List commits of a repository, newest first.

        Args:
            owner: Repository owner login
            repo: Repository name

        Returns:
            Commits without stats, cached under ``commits:<owner>/<repo>``
        """
        full_name = f"{owner}/{repo}"
        resource = f"commits of {full_name}"

        async def fetch() -> List[CommitSummary]:
            data = await self._request_paginated(f"/repos/{full_name}/commits", resource)
            return self._map(resource, lambda: [CommitSummary.from_api(full_name, item) for item in data])

        return await self._cache.get_or_fetch(f"commits:{full_name}", fetch)

    async def get_commit(self, owner: str, repo: str, sha: str) -> CommitSummary:
        """Fetch one commit with its addition/deletion stats.

        Args:
            owner: Repository owner login
            repo: Repository name
            sha: Commit hash

        Returns:
            Commit detail, cached under ``commit:<owner>/<repo>/<sha>``
        """
        full_name = f"{owner}/{repo}"
        resource = f"commit {sha} of {full_name}"

        async def fetch() -> CommitSummary:
            data = await self._request(f"/repos/{full_name}/commits/{sha}", resource)
            return self._map(resource, lambda: CommitSummary.from_api(full_name, data))

        return await self._cache.get_or_fetch(f"commit:{full_name}/{sha}", fetch)

    async def search_users(self, query: str, per_page: int = PER_PAGE) -> List[str]:
        """Search users ordered by repository count.

        Args:
            query: GitHub user search query
            per_page: Maximum number of results

        Returns:
            Matching logins, cached under ``search:<query>``
        """
        resource = f"user search '{query}'"

        async def fetch() -> List[str]:
            data = await self._request(
                "/search/users",
                resource,
                {"q": query, "sort": "repositories", "order": "desc", "per_page": per_page}
            )
            return self._map(resource, lambda: [item["login"] for item in data.get("items", [])])

        return await self._cache.get_or_fetch(f"search:{query}", fetch)

    async def get_rate_limit(self) -> dict:
        """Return the core rate-limit status (limit, remaining, reset, used).

        Not cached; the endpoint does not count against the quota.
        """
        resource = "rate limit status"
        data = await self._request("/rate_limit", resource)
        return self._map(resource, lambda: dict(data["rate"]))

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None
