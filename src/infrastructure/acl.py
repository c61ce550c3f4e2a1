from datetime import datetime
from typing import Any, Dict, Optional
from src.domain.models import Profile, Repository

class GitHubTranslator:
    """
    Anti-corruption layer that translates raw GitHub REST JSON payloads into domain models.
    """

    @staticmethod
    def to_profile(raw_user: Dict[str, Any]) -> Profile:
        """
        Transforms a raw `/users/{username}` payload into a Profile.

        Args:
            raw_user (Dict[str, Any]): The JSON object returned by the users endpoint.

        Returns:
            Profile: The immutable profile snapshot.
        """
        login = raw_user.get('login')
        if not login:
            raise ValueError("login is required to build Profile.")

        return Profile(
            login=login,
            name=raw_user.get('name'),
            avatar_url=raw_user.get('avatar_url') or '',
            html_url=raw_user.get('html_url') or '',
            bio=raw_user.get('bio'),
            public_repos=raw_user.get('public_repos') or 0,
            followers=raw_user.get('followers') or 0,
            following=raw_user.get('following') or 0,
        )

    @staticmethod
    def to_repository(raw_repo: Dict[str, Any]) -> Repository:
        """
        Transforms one element of the `/users/{username}/repos` list into a Repository.
        """
        # Extract nested fields with safe defaults
        owner_data = raw_repo.get('owner') or {}

        name = raw_repo.get('name')
        if not name:
            raise ValueError("name is required to build Repository.")

        return Repository(
            name=name,
            owner=owner_data.get('login', ''),
            stars=raw_repo.get('stargazers_count') or 0,
            forks=raw_repo.get('forks_count') or 0,
            description=raw_repo.get('description'),
            fork=bool(raw_repo.get('fork', False)),
            html_url=raw_repo.get('html_url') or '',
        )

    @staticmethod
    def commit_authored_at(raw_commit: Dict[str, Any]) -> Optional[datetime]:
        """
        Extracts the author timestamp of a `/repos/{owner}/{repo}/commits` element.

        Returns None when the commit has no author date or the date cannot be parsed.
        """
        if not isinstance(raw_commit, dict):
            return None
        commit_data = raw_commit.get('commit') or {}
        author_data = commit_data.get('author') or {}
        raw_date = author_data.get('date')
        if not raw_date or not isinstance(raw_date, str):
            return None
        try:
            return datetime.fromisoformat(raw_date.replace("Z", "+00:00"))
        except ValueError:
            return None
