"""Score aggregation and the rating bands consumers display."""
from typing import Dict, List, Tuple
from gitflex.domain.models import MetricsBundle


WEIGHTS: Dict[str, float] = {
    "commit_frequency": 0.4,
    "code_quality": 0.3,
    "project_diversity": 0.1,
    "contribution_impact": 0.2,
}

# (minimum percentage, label), checked top-down
RATING_BANDS: List[Tuple[int, str]] = [
    (80, "Real Developer"),
    (60, "Solid Contributor"),
    (40, "Average Coder"),
    (20, "Potential Farmer"),
    (0, "Commit Farmer"),
]


def aggregate(metrics: MetricsBundle) -> float:
    """Combine the four sub-scores into the overall score.

    Args:
        metrics: Sub-scores, each in [0, 1]

    Returns:
        Weighted sum in [0, 1]
    """
    return (
        metrics.commit_frequency * WEIGHTS["commit_frequency"]
        + metrics.code_quality * WEIGHTS["code_quality"]
        + metrics.project_diversity * WEIGHTS["project_diversity"]
        + metrics.contribution_impact * WEIGHTS["contribution_impact"]
    )


def score_to_rating(score: float) -> str:
    """Map a [0, 1] score to its qualitative band.

    The score is scaled to a 0-100 integer before the thresholds apply.
    """
    percentage = round(score * 100)
    for threshold, label in RATING_BANDS:
        if percentage >= threshold:
            return label
    return RATING_BANDS[-1][1]
