"""Metric extractors turning raw GitHub activity into normalized sub-scores.

Each extractor is a pure function returning a value in [0, 1]. Higher
values point to a genuine contributor, lower values to commit farming.
"""
from datetime import datetime, timedelta
from typing import Iterable, Sequence

# Sampling bounds, fixed to limit API call volume per analysis.
MAX_REPOSITORIES = 5
MAX_COMMITS_PER_REPOSITORY = 5

NEUTRAL_SCORE = 0.5
SUSPICIOUS_COMMIT_GAP = timedelta(minutes=5)
DIVERSITY_CAP = 10


def commit_frequency_score(timestamps: Iterable[datetime]) -> float:
    """Score how bursty the commit history is.

    Adjacent commits less than five minutes apart are suspicious. The number
    of suspicious gaps is divided by the number of timestamps, not by the
    number of gaps.

    Args:
        timestamps: Author dates of every analyzed commit, in any order

    Returns:
        0.5 with fewer than two timestamps, otherwise
        ``max(0, 1 - suspicious / len(timestamps))``
    """
    ordered: Sequence[datetime] = sorted(timestamps)
    if len(ordered) < 2:
        return NEUTRAL_SCORE

    suspicious = sum(
        1 for earlier, later in zip(ordered, ordered[1:])
        if later - earlier < SUSPICIOUS_COMMIT_GAP
    )
    return max(0.0, 1 - suspicious / len(ordered))


def code_quality_score(additions: int, deletions: int) -> float:
    """Score the balance between added and removed lines.

    Pure additions hint at padding commits; healthy development also
    removes code.
    """
    if additions + deletions == 0:
        return NEUTRAL_SCORE

    ratio = deletions / (additions + deletions)
    if ratio < 0.1:
        return 0.3
    if ratio > 0.5:
        return 0.9
    return 0.6


def project_diversity_score(repo_count: int) -> float:
    """Linear ramp over the number of own repositories, capped at ten."""
    return min(1.0, repo_count / DIVERSITY_CAP)


def contribution_impact_score(total_stars: int, total_forks: int) -> float:
    """Tiered score from stars and forks across own repositories."""
    if total_stars > 100 or total_forks > 20:
        return 1.0
    if total_stars > 10 or total_forks > 5:
        return 0.7
    return 0.3
