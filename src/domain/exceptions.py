import math
import time
from typing import Optional


class GitHubStatsException(Exception):
    """Base exception for all stats-pipeline errors."""
    kind = "error"


class UsernameValidationException(GitHubStatsException):
    """Raised when a username is malformed. Never reaches the network."""
    kind = "validation"

    def __init__(self, username: str, message: str = "Invalid username format"):
        self.username = username
        super().__init__(message)


class GitHubApiException(GitHubStatsException):
    """Base exception for failed GitHub REST calls."""
    kind = "api_error"


class NotFoundException(GitHubApiException):
    """Raised when the requested resource does not exist (HTTP 404)."""
    kind = "not_found"

    def __init__(self, path: str, message: str = "User not found. Please check the username and try again."):
        self.path = path
        super().__init__(message)


class RateLimitExceededException(GitHubApiException):
    """Raised when the GitHub REST rate limit is hit."""
    kind = "rate_limited"

    def __init__(self, reset_at: Optional[int] = None):
        self.reset_at = reset_at
        super().__init__(self._build_message())

    def wait_minutes(self, now: Optional[float] = None) -> Optional[int]:
        """
        Minutes left until the quota resets, rounded up and never below one.

        Returns None when the response carried no reset timestamp.
        """
        if self.reset_at is None:
            return None
        if now is None:
            now = time.time()
        return max(math.ceil((self.reset_at - now) / 60), 1)

    def _build_message(self) -> str:
        minutes = self.wait_minutes()
        if minutes is None:
            return "API rate limit exceeded. Please wait a few minutes and try again."
        return f"API rate limit exceeded. Please wait {minutes} minute(s) and try again."


class RequestFailedException(GitHubApiException):
    """Raised for any other non-success outcome, including transport failures."""
    kind = "request_failed"

    def __init__(self, status_code: Optional[int] = None, detail: str = ""):
        self.status_code = status_code
        self.detail = detail
        status = status_code if status_code is not None else "network error"
        super().__init__(f"Failed to fetch data ({status}). Please try again.")
