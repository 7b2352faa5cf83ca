"""Main entry point for the GitHub commit-farming analyzer.

Analyzes the usernames given as arguments, or a random sample of active
users when none are given.
"""
import asyncio
import json
import sys
import logging
from typing import List
from gitflex.application.analysis_service import AnalysisService
from gitflex.config import load_settings
from gitflex.domain.errors import GitHubApiError
from gitflex.domain.models import UserAnalysis
from gitflex.domain.scoring import score_to_rating
from gitflex.infrastructure.github_client import GitHubRestClient
from gitflex.infrastructure.response_cache import ResponseCache


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def log_analysis(analysis: UserAnalysis) -> None:
    """Log one analysis in a readable block."""
    profile = analysis.profile
    result = analysis.result
    metrics = result.metrics

    logger.info("=" * 50)
    logger.info(f"{profile.login} ({profile.name or 'no name'})")
    logger.info(f"  Score: {result.percentage}/100 - {score_to_rating(result.score)}")
    logger.info(f"  Commit frequency:     {metrics.commit_frequency:.2f}")
    logger.info(f"  Code quality:         {metrics.code_quality:.2f}")
    logger.info(f"  Project diversity:    {metrics.project_diversity:.2f}")
    logger.info(f"  Contribution impact:  {metrics.contribution_impact:.2f}")
    logger.info(f"  Result: {json.dumps(result.to_dict())}")
    logger.info("=" * 50)


async def main(usernames: List[str]):
    """Execute the analysis."""
    settings = load_settings()
    if not settings.github_token:
        logger.warning("GITHUB_TOKEN not set, using the unauthenticated rate limit")

    github_client = GitHubRestClient(
        settings.github_token,
        cache=ResponseCache(),
        base_url=settings.github_api_url,
        max_retry_wait=settings.max_retry_wait
    )
    service = AnalysisService(
        github_client=github_client,
        max_concurrency=settings.analysis_concurrency
    )

    try:
        if usernames:
            analyses = [await service.analyze_user(username) for username in usernames]
        else:
            analyses = await service.analyze_random_users(settings.random_user_count)

        for analysis in analyses:
            log_analysis(analysis)

    except GitHubApiError as e:
        logger.error(f"Analysis failed: {e}")
        sys.exit(1)
    finally:
        await github_client.close()


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:]))
