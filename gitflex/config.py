"""Process configuration read from environment variables."""
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv
from gitflex.infrastructure.github_client import DEFAULT_RATE_LIMIT_WAIT, GITHUB_API_URL


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the analyzer scripts."""
    github_token: Optional[str]
    github_api_url: str = GITHUB_API_URL
    random_user_count: int = 5
    analysis_concurrency: int = 5
    max_retry_wait: float = DEFAULT_RATE_LIMIT_WAIT


def load_settings() -> Settings:
    """Build Settings from the environment, loading .env or env first."""
    # Load environment variables from .env or env file
    load_dotenv('.env') or load_dotenv('env')

    return Settings(
        github_token=os.getenv("GITHUB_TOKEN") or None,
        github_api_url=os.getenv("GITHUB_API_URL", GITHUB_API_URL),
        random_user_count=int(os.getenv("RANDOM_USER_COUNT", "5")),
        analysis_concurrency=int(os.getenv("ANALYSIS_CONCURRENCY", "5")),
        max_retry_wait=float(os.getenv("MAX_RETRY_WAIT", str(DEFAULT_RATE_LIMIT_WAIT)))
    )
