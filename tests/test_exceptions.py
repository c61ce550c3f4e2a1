import unittest

from src.domain.exceptions import (
    GitHubApiException,
    NotFoundException,
    RateLimitExceededException,
    RequestFailedException,
    UsernameValidationException,
)


class TestRateLimitExceededException(unittest.TestCase):
    def test_wait_minutes_rounds_up(self) -> None:
        error = RateLimitExceededException(reset_at=1_000_000 + 121)
        self.assertEqual(error.wait_minutes(now=1_000_000), 3)

    def test_wait_minutes_never_below_one(self) -> None:
        error = RateLimitExceededException(reset_at=1_000_000)
        self.assertEqual(error.wait_minutes(now=1_000_500), 1)

    def test_without_reset_uses_generic_message(self) -> None:
        error = RateLimitExceededException()
        self.assertIsNone(error.wait_minutes())
        self.assertEqual(str(error), "API rate limit exceeded. Please wait a few minutes and try again.")

    def test_with_reset_mentions_minutes(self) -> None:
        error = RateLimitExceededException(reset_at=0)
        self.assertEqual(str(error), "API rate limit exceeded. Please wait 1 minute(s) and try again.")


class TestErrorTaxonomy(unittest.TestCase):
    def test_api_errors_share_a_base(self) -> None:
        for error in (NotFoundException("/users/x"), RateLimitExceededException(), RequestFailedException(500)):
            self.assertIsInstance(error, GitHubApiException)

    def test_validation_error_is_not_an_api_error(self) -> None:
        self.assertNotIsInstance(UsernameValidationException("-bad-"), GitHubApiException)

    def test_kinds(self) -> None:
        self.assertEqual(UsernameValidationException("-x").kind, "validation")
        self.assertEqual(NotFoundException("/users/x").kind, "not_found")
        self.assertEqual(RateLimitExceededException().kind, "rate_limited")
        self.assertEqual(RequestFailedException(500).kind, "request_failed")

    def test_request_failed_message(self) -> None:
        self.assertEqual(str(RequestFailedException(502)), "Failed to fetch data (502). Please try again.")
        self.assertIn("network error", str(RequestFailedException()))
