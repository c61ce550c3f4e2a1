import os
from pydantic import BaseModel, Field, ConfigDict

DEFAULT_API_URL = "https://api.github.com"


class StatsSettings(BaseModel):
    """
    Tunables for one pipeline run.

    The fan-out caps keep a single query inside GitHub's unauthenticated
    quota of 60 requests per hour: 2 + 10 + 5 calls per query.
    """
    model_config = ConfigDict(frozen=True)

    api_base_url: str = Field(DEFAULT_API_URL, description="Base URL of the GitHub REST API")
    user_agent: str = Field("github-stats-pipeline", description="User-Agent sent with every request")
    repos_per_page: int = Field(100, ge=1, le=100, description="Repositories requested in the single repo-list page")
    max_language_repos: int = Field(10, ge=0, description="Repositories whose languages are aggregated")
    max_languages: int = Field(8, ge=1, description="Languages kept after ranking")
    max_commit_repos: int = Field(5, ge=0, description="Repositories whose commits are bucketed")
    commits_per_repo: int = Field(30, ge=1, le=100, description="Recent commits requested per repository")
    top_repos_limit: int = Field(6, ge=0, description="Non-fork repositories shown on the dashboard")
    request_timeout: float = Field(30.0, gt=0, description="Total seconds allowed per HTTP request")

    @classmethod
    def from_env(cls) -> "StatsSettings":
        """Builds settings from the environment, keeping defaults for anything unset."""
        overrides = {}
        api_url = os.getenv("GITHUB_API_URL")
        if api_url:
            overrides["api_base_url"] = api_url.rstrip("/")
        timeout = os.getenv("GITHUB_REQUEST_TIMEOUT")
        if timeout:
            overrides["request_timeout"] = float(timeout)
        return cls(**overrides)
