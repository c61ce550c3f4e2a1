import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

import aiohttp

from src.domain.exceptions import GitHubApiException, RequestFailedException
from src.domain.language_colors import color_for
from src.domain.models import LanguageEntry, LanguageMap, RepoFetchResult, Repository
from src.domain.settings import StatsSettings
from src.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)

LanguageResult = RepoFetchResult[Dict[str, Any]]


def merge_language_maps(results: Iterable[LanguageResult]) -> LanguageMap:
    """
    Sums byte counts per language across repositories.

    Failed fetches contribute nothing. Keys keep first-seen order so that
    ties in the later ranking resolve the same way on every run.
    """
    totals: LanguageMap = {}
    for result in results:
        for language, size in result.unwrap_or({}).items():
            if isinstance(size, bool) or not isinstance(size, int) or size < 0:
                continue
            totals[language] = totals.get(language, 0) + size
    return totals


def rank_languages(totals: LanguageMap, limit: int) -> List[LanguageEntry]:
    """
    Keeps the `limit` largest languages and expresses each as a share of that subset.
    """
    # sorted() is stable: equal byte counts keep merge order
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)[:limit]

    total = sum(size for _, size in ranked)
    if total == 0:
        return []

    return [
        LanguageEntry(
            name=name,
            bytes=size,
            percentage=round(size / total * 100, 1),
            color=color_for(name),
        )
        for name, size in ranked
    ]


class LanguageAggregator:
    """
    Builds the ranked language distribution for the user's leading repositories.
    """

    def __init__(self, github_client: GitHubRestClient, settings: Optional[StatsSettings] = None):
        self.github_client = github_client
        self.settings = settings or StatsSettings()

    async def _fetch_one(self, session: aiohttp.ClientSession, username: str, repo: Repository) -> LanguageResult:
        try:
            languages = await self.github_client.fetch_languages(session, username, repo.name)
        except GitHubApiException as e:
            logger.warning(f"Languages for {username}/{repo.name} unavailable, counting as empty: {e}")
            return LanguageResult(repo_name=repo.name, error=e)

        languages = languages or {}
        if not isinstance(languages, dict):
            error = RequestFailedException(detail=f"expected a language map, got {type(languages).__name__}")
            logger.warning(f"Languages for {username}/{repo.name} malformed, counting as empty: {error.detail}")
            return LanguageResult(repo_name=repo.name, error=error)
        return LanguageResult(repo_name=repo.name, value=languages)

    async def aggregate(
        self,
        session: aiohttp.ClientSession,
        repos: Sequence[Repository],
        username: str,
    ) -> List[LanguageEntry]:
        """
        Fetches language maps for the first `max_language_repos` repositories
        concurrently and merges them into at most `max_languages` entries.

        Never raises for a per-repository API failure.
        """
        selected = list(repos[:self.settings.max_language_repos])
        results = await asyncio.gather(*(self._fetch_one(session, username, repo) for repo in selected))

        failed = sum(1 for result in results if not result.ok)
        if failed:
            logger.info(f"Language aggregation degraded for {failed}/{len(results)} repositories.")

        entries = rank_languages(merge_language_maps(results), self.settings.max_languages)
        logger.debug(f"Ranked {len(entries)} languages from {len(selected)} repositories.")
        return entries
