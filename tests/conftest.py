"""Shared fixtures: an in-memory GitHub client and HTTP-level fakes."""
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
import pytest
from gitflex.domain.errors import GitHubApiError
from gitflex.domain.github_interface import IGitHubClient
from gitflex.domain.models import CommitStats, CommitSummary, Profile, RepositorySummary
from gitflex.infrastructure.github_client import GitHubRestClient


BASE_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_repo(name: str, owner: str = "octocat", fork: bool = False,
              stars: int = 0, forks: int = 0) -> RepositorySummary:
    return RepositorySummary(owner=owner, name=name, fork=fork, stars=stars, forks=forks)


def make_commit(repository: str, sha: str, minutes: float,
                stats: Optional[CommitStats] = None) -> CommitSummary:
    return CommitSummary(
        repository=repository,
        sha=sha,
        authored_at=BASE_TIME + timedelta(minutes=minutes),
        message=f"commit {sha}",
        stats=stats
    )


class FakeGitHubClient(IGitHubClient):
    """In-memory IGitHubClient that records every call."""

    def __init__(
        self,
        repos: Optional[List[RepositorySummary]] = None,
        commits: Optional[Dict[str, List[CommitSummary]]] = None,
        stats: Optional[Dict[str, CommitStats]] = None,
        search_results: Optional[List[str]] = None,
        errors: Optional[Dict[str, GitHubApiError]] = None
    ):
        self.repos = repos or []
        self.commits = commits or {}
        self.stats = stats or {}
        self.search_results = search_results or []
        self.errors = errors or {}
        self.calls: Counter = Counter()
        self.queries: List[str] = []

    def _check(self, key: str) -> None:
        self.calls[key.split(":")[0]] += 1
        if key in self.errors:
            raise self.errors[key]

    async def get_user(self, username: str) -> Profile:
        self._check(f"user:{username}")
        return Profile(login=username, name=username.title())

    async def list_repositories(self, username: str) -> List[RepositorySummary]:
        self._check(f"repos:{username}")
        return list(self.repos)

    async def list_commits(self, owner: str, repo: str) -> List[CommitSummary]:
        self._check(f"commits:{owner}/{repo}")
        return list(self.commits.get(f"{owner}/{repo}", []))

    async def get_commit(self, owner: str, repo: str, sha: str) -> CommitSummary:
        self._check(f"commit:{owner}/{repo}/{sha}")
        listed = next(c for c in self.commits[f"{owner}/{repo}"] if c.sha == sha)
        return CommitSummary(
            repository=listed.repository,
            sha=listed.sha,
            authored_at=listed.authored_at,
            message=listed.message,
            stats=self.stats.get(sha)
        )

    async def search_users(self, query: str, per_page: int = 100) -> List[str]:
        self._check(f"search:{query}")
        self.queries.append(query)
        return list(self.search_results)

    async def close(self) -> None:
        pass


class ScriptedRestClient(GitHubRestClient):
    """GitHubRestClient whose HTTP layer replays scripted responses.

    ``responses`` maps an API path to a list of ``(status, headers, body)``
    tuples consumed in order; the last one repeats.
    """

    def __init__(self, responses: Dict[str, list], **kwargs):
        kwargs.setdefault("max_retry_wait", 0)
        super().__init__("test-token", **kwargs)
        self.responses = responses
        self.sent: List[tuple] = []

    async def _send(self, path, params=None):
        self.sent.append((path, params))
        script = self.responses[path]
        response = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_client():
    return FakeGitHubClient()
