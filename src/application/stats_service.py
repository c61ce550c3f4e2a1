import asyncio
import enum
import logging
import re
from typing import List, Optional, Protocol, Sequence

import aiohttp

from src.application.commit_hour_aggregator import CommitHourAggregator
from src.application.language_aggregator import LanguageAggregator
from src.domain.exceptions import GitHubStatsException, RequestFailedException, UsernameValidationException
from src.domain.models import DashboardSummary, DerivedStats, Profile, QueryResult, Repository
from src.domain.settings import StatsSettings
from src.infrastructure.acl import GitHubTranslator
from src.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)

# 1-39 characters, alphanumeric, single inner hyphens only
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}$")


class PipelineState(str, enum.Enum):
    IDLE = "idle"
    FETCHING_PROFILE = "fetching_profile"
    FETCHING_REPOS = "fetching_repos"
    PROFILE_READY = "profile_ready"
    AGGREGATING_DERIVED = "aggregating_derived"
    COMPLETE = "complete"
    ERRORED = "errored"


class DashboardRenderer(Protocol):
    """Consumer of the pipeline checkpoints."""

    def clear(self) -> None: ...

    def render_summary(self, summary: DashboardSummary) -> None: ...

    def render_derived(self, derived: DerivedStats) -> None: ...

    def show_error(self, error: GitHubStatsException) -> None: ...


def validate_username(raw_username: str) -> str:
    """Returns the trimmed username or raises UsernameValidationException."""
    username = (raw_username or "").strip()
    if not username:
        raise UsernameValidationException(username, "Please enter a GitHub username")
    if not USERNAME_PATTERN.match(username):
        raise UsernameValidationException(username)
    return username


def calculate_total_stars(repos: Sequence[Repository]) -> int:
    return sum(repo.stars for repo in repos)


def select_top_repositories(repos: Sequence[Repository], limit: int = 6) -> List[Repository]:
    """First `limit` non-fork repositories, in the order given."""
    return [repo for repo in repos if not repo.fork][:limit]


class StatsService:
    """
    Orchestrates one query: profile and repository list first (both must
    succeed), then language and commit-hour aggregation side by side.

    Only the profile and repository-list fetches can fail a query; the
    aggregators absorb their own per-repository failures.
    """

    def __init__(
            self,
            github_client: GitHubRestClient,
            renderer: Optional[DashboardRenderer] = None,
            settings: Optional[StatsSettings] = None,
            language_aggregator: Optional[LanguageAggregator] = None,
            commit_hour_aggregator: Optional[CommitHourAggregator] = None,
    ):
        self.github_client = github_client
        self.renderer = renderer
        self.settings = settings or StatsSettings()
        self.language_aggregator = language_aggregator or LanguageAggregator(github_client, self.settings)
        self.commit_hour_aggregator = commit_hour_aggregator or CommitHourAggregator(github_client, self.settings)
        self.state = PipelineState.IDLE

    def _transition(self, state: PipelineState) -> None:
        logger.debug(f"Pipeline state {self.state.value} -> {state.value}.")
        self.state = state

    def _fail(self, username: str, error: GitHubStatsException, summary: Optional[DashboardSummary] = None) -> QueryResult:
        self._transition(PipelineState.ERRORED)
        logger.error(f"Query for '{username}' failed ({error.kind}): {error}")
        if self.renderer is not None:
            self.renderer.show_error(error)
        return QueryResult(username=username, state=self.state.value, summary=summary, error=error)

    async def run_query(self, raw_username: str) -> QueryResult:
        """
        Runs the full pipeline for one username.

        Load-bearing failures are handed to the renderer as the single
        terminal error and returned on the QueryResult; they are not raised.
        """
        self.state = PipelineState.IDLE
        if self.renderer is not None:
            self.renderer.clear()

        try:
            username = validate_username(raw_username)
        except UsernameValidationException as e:
            return self._fail(raw_username, e)

        logger.info(f"Starting query for '{username}'.")

        async with aiohttp.ClientSession() as session:
            try:
                self._transition(PipelineState.FETCHING_PROFILE)
                profile = await self._load_profile(session, username)

                self._transition(PipelineState.FETCHING_REPOS)
                repos = await self._load_repositories(session, username)
            except GitHubStatsException as e:
                return self._fail(username, e)

            summary = DashboardSummary(
                profile=profile,
                total_stars=calculate_total_stars(repos),
                top_repositories=tuple(select_top_repositories(repos, self.settings.top_repos_limit)),
            )
            self._transition(PipelineState.PROFILE_READY)
            if self.renderer is not None:
                self.renderer.render_summary(summary)

            self._transition(PipelineState.AGGREGATING_DERIVED)
            languages, commit_hours = await asyncio.gather(
                self.language_aggregator.aggregate(session, repos, username),
                self.commit_hour_aggregator.aggregate(session, repos, username),
            )

        derived = DerivedStats(languages=tuple(languages), commit_hours=commit_hours)
        self._transition(PipelineState.COMPLETE)
        if self.renderer is not None:
            self.renderer.render_derived(derived)

        logger.info(
            f"Query for '{username}' complete: {len(repos)} repositories, "
            f"{len(derived.languages)} languages, {commit_hours.total} commits bucketed."
        )
        return QueryResult(username=username, state=self.state.value, summary=summary, derived=derived)

    async def _load_profile(self, session: aiohttp.ClientSession, username: str) -> Profile:
        raw_user = await self.github_client.fetch_profile(session, username)
        if not isinstance(raw_user, dict):
            raise RequestFailedException(detail=f"expected a profile object, got {type(raw_user).__name__}")
        try:
            return GitHubTranslator.to_profile(raw_user)
        except ValueError as e:
            raise RequestFailedException(detail=f"malformed profile: {e}") from e

    async def _load_repositories(self, session: aiohttp.ClientSession, username: str) -> List[Repository]:
        raw_repos = await self.github_client.fetch_repositories(session, username)
        if not isinstance(raw_repos, list):
            raise RequestFailedException(detail=f"expected a repository list, got {type(raw_repos).__name__}")
        try:
            repos = [GitHubTranslator.to_repository(raw) for raw in raw_repos if isinstance(raw, dict)]
        except ValueError as e:
            raise RequestFailedException(detail=f"malformed repository: {e}") from e
        logger.info(f"Fetched {len(repos)} repositories for '{username}'.")
        return repos
