from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar
from pydantic import BaseModel, Field, ConfigDict, field_validator

from src.domain.exceptions import GitHubApiException, GitHubStatsException

HOURS_PER_DAY = 24

T = TypeVar("T")

LanguageMap = Dict[str, int]
CommitList = List[Dict[str, Any]]


class Profile(BaseModel):
    """
    Immutable snapshot of a GitHub user's public profile.
    Fetched once per query and replaced by the next one.
    """
    model_config = ConfigDict(frozen=True)

    login: str = Field(..., description="Login name of the user")
    name: Optional[str] = Field(None, description="Display name, if the user set one")
    avatar_url: str = Field("", description="URL of the user's avatar image")
    html_url: str = Field("", description="URL of the user's GitHub page")
    bio: Optional[str] = Field(None, description="Free-form profile bio")
    public_repos: int = Field(0, ge=0, description="Number of public repositories")
    followers: int = Field(0, ge=0, description="Number of followers")
    following: int = Field(0, ge=0, description="Number of followed users")

    @property
    def display_name(self) -> str:
        return self.name or self.login


class Repository(BaseModel):
    """Immutable domain model representing one of the user's repositories."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Name of the repository")
    owner: str = Field(..., description="Login name of the repository owner")
    stars: int = Field(0, ge=0, description="Total number of stargazers")
    forks: int = Field(0, ge=0, description="Total number of forks")
    description: Optional[str] = Field(None, description="Repository description")
    fork: bool = Field(False, description="Whether the repository is itself a fork")
    html_url: str = Field("", description="URL of the repository page")


class LanguageEntry(BaseModel):
    """One slice of the ranked language distribution."""
    model_config = ConfigDict(frozen=True)

    name: str
    bytes: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0.0, le=100.0, description="Share of the displayed subset, one decimal")
    color: str

    @property
    def percentage_label(self) -> str:
        return f"{self.percentage:.1f}"


class CommitHourHistogram(BaseModel):
    """Commit counts bucketed by local hour-of-day; index 0 is midnight."""
    model_config = ConfigDict(frozen=True)

    counts: Tuple[int, ...]

    @field_validator("counts")
    @classmethod
    def _check_counts(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        if len(value) != HOURS_PER_DAY:
            raise ValueError(f"expected {HOURS_PER_DAY} hourly buckets, got {len(value)}")
        if any(count < 0 for count in value):
            raise ValueError("hourly buckets must be non-negative")
        return value

    @classmethod
    def empty(cls) -> "CommitHourHistogram":
        return cls(counts=(0,) * HOURS_PER_DAY)

    @property
    def total(self) -> int:
        return sum(self.counts)

    @property
    def busiest_hour(self) -> Optional[int]:
        if not self.total:
            return None
        return max(range(HOURS_PER_DAY), key=lambda hour: self.counts[hour])


class DashboardSummary(BaseModel):
    """Everything the renderer can paint as soon as profile and repos are in."""
    model_config = ConfigDict(frozen=True)

    profile: Profile
    total_stars: int = Field(..., ge=0, description="Stars summed over every fetched repository, forks included")
    top_repositories: Tuple[Repository, ...] = Field(default_factory=tuple)


class DerivedStats(BaseModel):
    """Aggregates that need per-repository fan-out."""
    model_config = ConfigDict(frozen=True)

    languages: Tuple[LanguageEntry, ...] = Field(default_factory=tuple)
    commit_hours: CommitHourHistogram = Field(default_factory=CommitHourHistogram.empty)


class RepoFetchResult(BaseModel, Generic[T]):
    """
    Outcome of one per-repository auxiliary fetch.

    Exactly one of `value` and `error` is set. Aggregators treat an error as
    the empty contribution for that repository.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    repo_name: str
    value: Optional[T] = None
    error: Optional[GitHubApiException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: T) -> T:
        if self.error is not None or self.value is None:
            return default
        return self.value


class QueryResult(BaseModel):
    """Final outcome of one run of the pipeline."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    username: str
    state: str
    summary: Optional[DashboardSummary] = None
    derived: Optional[DerivedStats] = None
    error: Optional[GitHubStatsException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

