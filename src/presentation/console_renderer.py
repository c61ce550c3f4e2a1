import sys
from typing import List, Optional, TextIO

from src.domain.exceptions import GitHubStatsException
from src.domain.models import HOURS_PER_DAY, CommitHourHistogram, DashboardSummary, DerivedStats, LanguageEntry

CONTRIBUTION_GRAPH_URL = "https://ghchart.rshah.org/bf5af2/{username}"
BAR_WIDTH = 30


def format_number(value: int) -> str:
    """Compact count: 1234 -> '1.2k'."""
    if value >= 1000:
        return f"{value / 1000:.1f}k"
    return str(value)


def hour_label(hour: int) -> str:
    if hour == 0:
        return "12am"
    if hour == 12:
        return "12pm"
    return f"{hour - 12}pm" if hour > 12 else f"{hour}am"


def contribution_graph_url(username: str) -> str:
    return CONTRIBUTION_GRAPH_URL.format(username=username)


def format_summary(summary: DashboardSummary) -> List[str]:
    profile = summary.profile
    lines = [
        f"{profile.display_name} (@{profile.login})  {profile.html_url}".rstrip(),
        profile.bio or "No bio available",
        (
            f"Repos: {format_number(profile.public_repos)}  "
            f"Stars: {format_number(summary.total_stars)}  "
            f"Followers: {format_number(profile.followers)}  "
            f"Following: {format_number(profile.following)}"
        ),
        f"Contributions: {contribution_graph_url(profile.login)}",
        "",
        "Top repositories:",
    ]
    for repo in summary.top_repositories:
        lines.append(
            f"  {repo.name:<30} ★ {format_number(repo.stars):>6}  ⑂ {format_number(repo.forks):>6}"
        )
        lines.append(f"    {repo.description or 'No description'}")
    if not summary.top_repositories:
        lines.append("  (none)")
    return lines


def format_languages(languages: List[LanguageEntry]) -> List[str]:
    if not languages:
        return ["Languages: no data"]
    return ["Languages:"] + [f"  {lang.color} {lang.name} ({lang.percentage_label}%)" for lang in languages]


def format_commit_hours(histogram: CommitHourHistogram) -> List[str]:
    lines = ["Commits by hour:"]
    peak = max(histogram.counts) or 1
    for hour in range(HOURS_PER_DAY):
        count = histogram.counts[hour]
        bar = "#" * round(count / peak * BAR_WIDTH)
        lines.append(f"  {hour_label(hour):>4} {bar} {count}")
    busiest = histogram.busiest_hour
    lines.append(f"Busiest hour: {hour_label(busiest) if busiest is not None else 'n/a'}")
    return lines


class ConsoleRenderer:
    """
    Text dashboard written to a stream. Each query starts from a clean
    slate, and at most one error is shown.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self.error: Optional[GitHubStatsException] = None

    def _write(self, lines: List[str]) -> None:
        self.stream.write("\n".join(lines) + "\n")

    def clear(self) -> None:
        self.error = None

    def render_summary(self, summary: DashboardSummary) -> None:
        self._write(format_summary(summary))

    def render_derived(self, derived: DerivedStats) -> None:
        self._write([""] + format_languages(list(derived.languages)) + [""] + format_commit_hours(derived.commit_hours))

    def show_error(self, error: GitHubStatsException) -> None:
        self.error = error
        self._write([f"Error: {error}"])
