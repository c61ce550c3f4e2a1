import aiohttp
import asyncio
import logging
from typing import Any, Dict, List, Optional

from src.domain.exceptions import (
    NotFoundException,
    RateLimitExceededException,
    RequestFailedException,
)
from src.domain.models import CommitList, LanguageMap
from src.domain.settings import StatsSettings

logger = logging.getLogger(__name__)

API_VERSION = "2022-11-28"
RATE_LIMIT_STATUSES = {403, 429}


class GitHubRestClient:
    """
    Client for the unauthenticated GitHub REST API.
    Issues single GET requests and classifies failed responses into typed errors.
    No retries: a failed attempt surfaces immediately to the caller.
    """

    def __init__(self, settings: Optional[StatsSettings] = None):
        self.settings = settings or StatsSettings()
        self.headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self.settings.user_agent,
            "X-GitHub-Api-Version": API_VERSION,
        }
        self.api_url = self.settings.api_base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout)

    async def get(
        self,
        session: aiohttp.ClientSession,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Fetches a single REST resource and returns its decoded JSON body.

        Raises:
            NotFoundException: on HTTP 404.
            RateLimitExceededException: on HTTP 403/429, carrying X-RateLimit-Reset when present.
            RequestFailedException: on any other non-2xx status or a transport failure.
        """
        url = f"{self.api_url}{path}"
        try:
            async with session.get(url, params=params, headers=self.headers, timeout=self.timeout) as response:
                if response.status == 404:
                    logger.warning(f"GET {path} -> 404 Not Found.")
                    raise NotFoundException(path)

                if response.status in RATE_LIMIT_STATUSES:
                    reset_at = self._parse_reset(response.headers.get('X-RateLimit-Reset'))
                    logger.warning(f"GET {path} -> {response.status} rate limited (reset at {reset_at}).")
                    raise RateLimitExceededException(reset_at=reset_at)

                if response.status >= 400:
                    logger.warning(f"GET {path} -> {response.status}.")
                    raise RequestFailedException(status_code=response.status)

                try:
                    return await response.json()
                except ValueError as e:
                    logger.warning(f"GET {path} -> {response.status} with undecodable body: {e}")
                    raise RequestFailedException(status_code=response.status, detail=str(e)) from e

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"GET {path} failed: {e!r}")
            raise RequestFailedException(status_code=None, detail=str(e)) from e

    @staticmethod
    def _parse_reset(raw_reset: Optional[str]) -> Optional[int]:
        if not raw_reset:
            return None
        try:
            return int(raw_reset)
        except ValueError:
            return None

    async def fetch_profile(self, session: aiohttp.ClientSession, username: str) -> Dict[str, Any]:
        return await self.get(session, f"/users/{username}")

    async def fetch_repositories(self, session: aiohttp.ClientSession, username: str) -> List[Dict[str, Any]]:
        """
        Fetches one page of the user's repositories, ordered by star count descending.

        The users/repos endpoint ignores `sort=stars`, so the page is re-sorted
        here; the sort is stable and keeps provider order for equal counts.
        """
        repos = await self.get(
            session,
            f"/users/{username}/repos",
            params={"per_page": self.settings.repos_per_page, "sort": "stars"},
        )
        if not isinstance(repos, list):
            raise RequestFailedException(status_code=None, detail=f"expected a repository list, got {type(repos).__name__}")
        repos = [repo for repo in repos if isinstance(repo, dict)]
        return sorted(repos, key=lambda repo: repo.get('stargazers_count') or 0, reverse=True)

    async def fetch_languages(self, session: aiohttp.ClientSession, owner: str, repo: str) -> LanguageMap:
        return await self.get(session, f"/repos/{owner}/{repo}/languages")

    async def fetch_commits(self, session: aiohttp.ClientSession, owner: str, repo: str) -> CommitList:
        return await self.get(
            session,
            f"/repos/{owner}/{repo}/commits",
            params={"per_page": self.settings.commits_per_repo},
        )
