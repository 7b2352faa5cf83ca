"""GitHub API interface (port) for fetching profile and activity data.

This is the anti-corruption layer that shields the domain from GitHub API specifics.
"""
from abc import ABC, abstractmethod
from typing import List
from gitflex.domain.models import CommitSummary, Profile, RepositorySummary


class IGitHubClient(ABC):
    """Abstract interface for GitHub API operations.

    Implementations raise subclasses of
    :class:`gitflex.domain.errors.GitHubApiError` on failure.
    """

    @abstractmethod
    async def get_user(self, username: str) -> Profile:
        """Fetch a user profile by login."""
        pass

    @abstractmethod
    async def list_repositories(self, username: str) -> List[RepositorySummary]:
        """List a user's repositories, most recently updated first."""
        pass

    @abstractmethod
    async def list_commits(self, owner: str, repo: str) -> List[CommitSummary]:
        """List commits of a repository, newest first, without stats."""
        pass

    @abstractmethod
    async def get_commit(self, owner: str, repo: str, sha: str) -> CommitSummary:
        """Fetch a single commit including its addition/deletion stats."""
        pass

    @abstractmethod
    async def search_users(self, query: str, per_page: int = 100) -> List[str]:
        """Search users and return their logins.

        Args:
            query: GitHub user search query
            per_page: Maximum number of results

        Returns:
            Logins ordered by repository count, descending
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass
