import asyncio
import logging
from datetime import tzinfo
from typing import Any, Dict, Iterable, Optional, Sequence

import aiohttp

from src.domain.exceptions import GitHubApiException, RequestFailedException
from src.domain.models import HOURS_PER_DAY, CommitHourHistogram, CommitList, RepoFetchResult, Repository
from src.domain.settings import StatsSettings
from src.infrastructure.acl import GitHubTranslator
from src.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)

CommitResult = RepoFetchResult[CommitList]


def bucket_commit_hours(commits: Iterable[Dict[str, Any]], tz: Optional[tzinfo] = None) -> CommitHourHistogram:
    """
    Counts commits per local hour-of-day of their author timestamp.

    `tz` defaults to the system local zone. Commits without a parseable
    author date are skipped.
    """
    counts = [0] * HOURS_PER_DAY
    for commit in commits:
        authored_at = GitHubTranslator.commit_authored_at(commit)
        if authored_at is None:
            continue
        counts[authored_at.astimezone(tz).hour] += 1
    return CommitHourHistogram(counts=tuple(counts))


class CommitHourAggregator:
    """
    Buckets the recent commits of the user's leading repositories by hour-of-day.
    """

    def __init__(
        self,
        github_client: GitHubRestClient,
        settings: Optional[StatsSettings] = None,
        tz: Optional[tzinfo] = None,
    ):
        self.github_client = github_client
        self.settings = settings or StatsSettings()
        self.tz = tz

    async def _fetch_one(self, session: aiohttp.ClientSession, username: str, repo: Repository) -> CommitResult:
        try:
            commits = await self.github_client.fetch_commits(session, username, repo.name)
        except GitHubApiException as e:
            logger.warning(f"Commits for {username}/{repo.name} unavailable, counting as empty: {e}")
            return CommitResult(repo_name=repo.name, error=e)

        commits = commits or []
        if not isinstance(commits, list):
            error = RequestFailedException(detail=f"expected a commit list, got {type(commits).__name__}")
            logger.warning(f"Commits for {username}/{repo.name} malformed, counting as empty: {error.detail}")
            return CommitResult(repo_name=repo.name, error=error)
        return CommitResult(repo_name=repo.name, value=[commit for commit in commits if isinstance(commit, dict)])

    async def aggregate(
        self,
        session: aiohttp.ClientSession,
        repos: Sequence[Repository],
        username: str,
    ) -> CommitHourHistogram:
        """
        Fetches recent commits for the first `max_commit_repos` repositories
        concurrently and returns a 24-bucket histogram. Always 24 buckets,
        even when every fetch failed.
        """
        selected = list(repos[:self.settings.max_commit_repos])
        results = await asyncio.gather(*(self._fetch_one(session, username, repo) for repo in selected))

        commits = [commit for result in results for commit in result.unwrap_or([])]
        histogram = bucket_commit_hours(commits, self.tz)
        logger.debug(f"Bucketed {histogram.total}/{len(commits)} commits from {len(selected)} repositories.")
        return histogram
