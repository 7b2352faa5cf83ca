"""Domain models representing core business entities."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a GitHub ISO-8601 timestamp into an aware datetime."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass(frozen=True)
class Profile:
    """Immutable snapshot of a GitHub user profile."""
    login: str
    name: Optional[str] = None
    bio: Optional[str] = None
    followers: int = 0
    following: int = 0
    public_repos: int = 0
    created_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: dict) -> 'Profile':
        """Build a Profile from a ``GET /users/{login}`` payload."""
        return cls(
            login=data["login"],
            name=data.get("name"),
            bio=data.get("bio"),
            followers=data.get("followers", 0),
            following=data.get("following", 0),
            public_repos=data.get("public_repos", 0),
            created_at=parse_timestamp(data.get("created_at"))
        )


@dataclass(frozen=True)
class RepositorySummary:
    """Immutable domain entity representing a GitHub repository.

    Using frozen dataclass for immutability following clean architecture principles.
    """
    owner: str
    name: str
    fork: bool = False
    stars: int = 0
    forks: int = 0
    language: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    pushed_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        """Returns the full repository name (owner/name)."""
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_api(cls, data: dict) -> 'RepositorySummary':
        owner, name = data["full_name"].split("/", 1)
        return cls(
            owner=owner,
            name=name,
            fork=bool(data.get("fork", False)),
            stars=data.get("stargazers_count", 0),
            forks=data.get("forks_count", 0),
            language=data.get("language"),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
            pushed_at=parse_timestamp(data.get("pushed_at"))
        )


@dataclass(frozen=True)
class CommitStats:
    """Line counts of a single commit."""
    additions: int
    deletions: int


@dataclass(frozen=True)
class CommitSummary:
    """A commit of a repository.

    Commit listings carry no stats; they are only present on the commit
    detail payload.
    """
    repository: str
    sha: str
    authored_at: Optional[datetime]
    message: str = ""
    stats: Optional[CommitStats] = None

    @classmethod
    def from_api(cls, repository: str, data: dict) -> 'CommitSummary':
        commit = data.get("commit") or {}
        author = commit.get("author") or {}
        stats = data.get("stats")
        return cls(
            repository=repository,
            sha=data["sha"],
            authored_at=parse_timestamp(author.get("date")),
            message=commit.get("message", ""),
            stats=CommitStats(
                additions=stats.get("additions", 0),
                deletions=stats.get("deletions", 0)
            ) if stats else None
        )


@dataclass(frozen=True)
class MetricsBundle:
    """The four normalized sub-scores, each in [0, 1]."""
    commit_frequency: float
    code_quality: float
    project_diversity: float
    contribution_impact: float

    @classmethod
    def zero(cls) -> 'MetricsBundle':
        return cls(
            commit_frequency=0.0,
            code_quality=0.0,
            project_diversity=0.0,
            contribution_impact=0.0
        )

    def to_dict(self) -> dict:
        return {
            "commitFrequency": self.commit_frequency,
            "codeQuality": self.code_quality,
            "projectDiversity": self.project_diversity,
            "contributionImpact": self.contribution_impact,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Overall authenticity score plus the sub-scores it was derived from."""
    score: float
    metrics: MetricsBundle

    @property
    def percentage(self) -> int:
        """Score scaled to a 0-100 integer."""
        return round(self.score * 100)

    def to_dict(self) -> dict:
        return {"score": self.score, "metrics": self.metrics.to_dict()}


@dataclass(frozen=True)
class UserAnalysis:
    """An analysis result together with the analyzed profile."""
    profile: Profile
    result: AnalysisResult
