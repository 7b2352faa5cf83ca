"""Verify that the setup is correct before running the analyzer."""
import asyncio
import sys
from datetime import datetime, timezone
from gitflex.config import load_settings
from gitflex.domain.errors import GitHubApiError
from gitflex.infrastructure.github_client import GitHubRestClient


def check_github_token(token):
    """Check the GitHub token configuration."""
    print("Checking GitHub token...")

    if not token:
        print("⚠️  GITHUB_TOKEN not set, the unauthenticated limit (60 requests/hour) applies")
        return True

    # Simple check - token format
    if token.startswith("ghp_") or token.startswith("github_pat_"):
        print("✅ GitHub token format looks valid")
        print(f"   Token prefix: {token[:10]}...")
    else:
        print("⚠️  Token format may be invalid (expected ghp_* or github_pat_*)")
    return True


async def check_rate_limit(settings):
    """Check API connectivity and the remaining request quota."""
    print("\nChecking GitHub API access...")

    client = GitHubRestClient(settings.github_token, base_url=settings.github_api_url)
    try:
        rate = await client.get_rate_limit()
    except GitHubApiError as e:
        print(f"❌ GitHub API check failed: {e}")
        return False
    finally:
        await client.close()

    reset_at = datetime.fromtimestamp(rate.get("reset", 0), tz=timezone.utc)
    print(f"✅ Connected to {settings.github_api_url}")
    print(f"   Remaining requests: {rate.get('remaining')}/{rate.get('limit')}")
    print(f"   Quota resets at: {reset_at.isoformat()}")

    # One analysis needs up to 2 + 5 * (1 + 5) requests
    if rate.get("remaining", 0) < 32:
        print("⚠️  Remaining quota may not cover a full analysis")
    return True


def main():
    """Run all verification checks."""
    print("=" * 60)
    print("GitFlex Analyzer - Setup Verification")
    print("=" * 60)

    settings = load_settings()
    results = {
        "GitHub Token": check_github_token(settings.github_token),
        "GitHub API": asyncio.run(check_rate_limit(settings)),
    }

    print("\n" + "=" * 60)
    print("Verification Summary")
    print("=" * 60)

    for name, passed in results.items():
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"{status}: {name}")

    if all(results.values()):
        print("\n✅ All checks passed! Ready to run the analyzer.")
        print("\nNext steps:")
        print("  python analyze_user.py <github-username>")
        sys.exit(0)
    else:
        print("\n❌ Some checks failed. Please fix the issues above.")
        print("\nCommon solutions:")
        print("  - Set GITHUB_TOKEN: export GITHUB_TOKEN=your_token")
        print("  - Check GITHUB_API_URL if you use GitHub Enterprise")
        sys.exit(1)


if __name__ == "__main__":
    main()
