"""Analysis service orchestrating the commit-farming analysis."""
import asyncio
import logging
import random
from functools import partial
from typing import Awaitable, Callable, Iterable, List, Optional, TypeVar
from gitflex.domain.errors import GitHubApiError, ResourceNotFound
from gitflex.domain.github_interface import IGitHubClient
from gitflex.domain.metrics import (
    MAX_COMMITS_PER_REPOSITORY,
    MAX_REPOSITORIES,
    code_quality_score,
    commit_frequency_score,
    contribution_impact_score,
    project_diversity_score
)
from gitflex.domain.models import (
    AnalysisResult,
    CommitSummary,
    MetricsBundle,
    RepositorySummary,
    UserAnalysis
)
from gitflex.domain.scoring import aggregate


logger = logging.getLogger(__name__)

T = TypeVar("T")

RANDOM_USER_QUALIFIERS = [
    "followers:>10",
    "repos:>5",
    "created:<2023-01-01",
    "pushed:>2023-10-01",
]
RANDOM_USER_LANGUAGES = ["javascript", "typescript", "python", "java", "go"]


async def gather_or_fail(awaitables: Iterable[Awaitable[T]]) -> List[T]:
    """Run awaitables concurrently, failing fast on the first error.

    Remaining tasks are cancelled when one fails, and the error propagates.
    Results keep the input order.
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    if not tasks:
        return []
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        errors = [task.exception() for task in done if task.exception() is not None]
        if errors:
            raise errors[0]
        return [task.result() for task in tasks]
    finally:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


class AnalysisService:
    """Application service for analyzing GitHub users.

    Coordinates the API client and the metric extractors. Any API error
    aborts the analysis; no partially computed result is ever returned.
    """

    def __init__(
        self,
        github_client: IGitHubClient,
        max_concurrency: int = 5,
        rng: Optional[random.Random] = None
    ):
        """Initialize analysis service.

        Args:
            github_client: GitHub API client implementation
            max_concurrency: Upper bound on in-flight commit requests
            rng: Random generator used for random-user discovery
        """
        self._github_client = github_client
        self._semaphore = asyncio.Semaphore(max(1, max_concurrency))
        self._rng = rng or random.Random()

    async def _bounded(self, call: Callable[[], Awaitable[T]]) -> T:
        """Start ``call`` once a concurrency slot is free."""
        async with self._semaphore:
            return await call()

    async def _sample_repository(self, repo: RepositorySummary) -> List[CommitSummary]:
        """Fetch a repository's commits, with stats for the first few.

        Returns:
            All listed commits; the sampled ones carry stats when GitHub
            reported them
        """
        commits = await self._bounded(
            lambda: self._github_client.list_commits(repo.owner, repo.name)
        )
        sampled = commits[:MAX_COMMITS_PER_REPOSITORY]
        details = await gather_or_fail(
            self._bounded(partial(self._github_client.get_commit, repo.owner, repo.name, commit.sha))
            for commit in sampled
        )
        return details + commits[len(sampled):]

    async def analyze(self, username: str) -> AnalysisResult:
        """Compute the authenticity score of a GitHub user.

        Args:
            username: GitHub login

        Returns:
            AnalysisResult with the overall score and the four sub-scores

        Raises:
            GitHubApiError: Any API failure, unmodified
        """
        logger.info(f"Starting analysis for {username}")
        await self._github_client.get_user(username)
        repos = await self._github_client.list_repositories(username)

        # Skip forked repositories for analysis
        own_repos = [repo for repo in repos if not repo.fork]
        if not own_repos:
            logger.info(f"{username} has no own repositories, scoring 0")
            return AnalysisResult(score=0.0, metrics=MetricsBundle.zero())

        repos_to_analyze = own_repos[:MAX_REPOSITORIES]
        per_repo_commits = await gather_or_fail(
            self._sample_repository(repo) for repo in repos_to_analyze
        )

        timestamps = []
        additions = 0
        deletions = 0
        for commits in per_repo_commits:
            for commit in commits:
                if commit.authored_at is not None:
                    timestamps.append(commit.authored_at)
                if commit.stats is not None:
                    additions += commit.stats.additions
                    deletions += commit.stats.deletions

        metrics = MetricsBundle(
            commit_frequency=commit_frequency_score(timestamps),
            code_quality=code_quality_score(additions, deletions),
            project_diversity=project_diversity_score(len(own_repos)),
            contribution_impact=contribution_impact_score(
                sum(repo.stars for repo in own_repos),
                sum(repo.forks for repo in own_repos)
            )
        )
        result = AnalysisResult(score=aggregate(metrics), metrics=metrics)

        logger.info(
            f"Analysis for {username} completed: score {result.score:.3f} "
            f"({len(timestamps)} commits across {len(repos_to_analyze)} repositories)"
        )
        return result

    async def analyze_user(self, username: str) -> UserAnalysis:
        """Analyze a user and return the result together with the profile."""
        result = await self.analyze(username)
        profile = await self._github_client.get_user(username)
        return UserAnalysis(profile=profile, result=result)

    def _random_user_query(self) -> str:
        language = self._rng.choice(RANDOM_USER_LANGUAGES)
        return " ".join(RANDOM_USER_QUALIFIERS + [f"language:{language}"])

    async def analyze_random_users(self, count: int = 5) -> List[UserAnalysis]:
        """Discover active users at random and analyze each of them.

        Users whose analysis fails are logged and skipped.

        Args:
            count: Number of users to sample

        Returns:
            Analyses of the users that succeeded

        Raises:
            ResourceNotFound: The search matched no users
            GitHubApiError: The search itself failed
        """
        query = self._random_user_query()
        logins = await self._github_client.search_users(query)
        if not logins:
            raise ResourceNotFound(f"users matching '{query}'")

        usernames = self._rng.sample(logins, min(count, len(logins)))
        logger.info(f"Analyzing {len(usernames)} random users")

        outcomes = await asyncio.gather(
            *(self.analyze_user(username) for username in usernames),
            return_exceptions=True
        )

        analyses: List[UserAnalysis] = []
        for username, outcome in zip(usernames, outcomes):
            if isinstance(outcome, GitHubApiError):
                # Don't fail the whole batch for one user
                logger.error(f"Error analyzing user {username}: {outcome}")
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                analyses.append(outcome)
        return analyses
