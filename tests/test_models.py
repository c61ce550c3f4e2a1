import unittest

from pydantic import ValidationError

from src.domain.exceptions import NotFoundException
from src.domain.models import CommitHourHistogram, LanguageEntry, Profile, RepoFetchResult


class TestCommitHourHistogram(unittest.TestCase):
    def test_rejects_wrong_length(self) -> None:
        with self.assertRaises(ValidationError):
            CommitHourHistogram(counts=(0,) * 23)

    def test_rejects_negative_counts(self) -> None:
        with self.assertRaises(ValidationError):
            CommitHourHistogram(counts=(-1,) + (0,) * 23)

    def test_busiest_hour(self) -> None:
        counts = [0] * 24
        counts[21] = 4
        counts[9] = 2
        self.assertEqual(CommitHourHistogram(counts=counts).busiest_hour, 21)


class TestLanguageEntry(unittest.TestCase):
    def test_percentage_label_has_one_decimal(self) -> None:
        entry = LanguageEntry(name="Go", bytes=1, percentage=80, color="#00ADD8")
        self.assertEqual(entry.percentage_label, "80.0")

    def test_is_immutable(self) -> None:
        entry = LanguageEntry(name="Go", bytes=1, percentage=80.0, color="#00ADD8")
        with self.assertRaises(ValidationError):
            entry.bytes = 2


class TestProfile(unittest.TestCase):
    def test_display_name_prefers_name(self) -> None:
        self.assertEqual(Profile(login="octocat", name="The Octocat").display_name, "The Octocat")
        self.assertEqual(Profile(login="octocat").display_name, "octocat")


class TestRepoFetchResult(unittest.TestCase):
    def test_unwrap_or_returns_value_on_success(self) -> None:
        result = RepoFetchResult[dict](repo_name="a", value={"C": 1})
        self.assertTrue(result.ok)
        self.assertEqual(result.unwrap_or({}), {"C": 1})

    def test_unwrap_or_returns_default_on_error(self) -> None:
        result = RepoFetchResult[list](repo_name="a", error=NotFoundException("/repos/o/a/commits"))
        self.assertFalse(result.ok)
        self.assertEqual(result.unwrap_or([]), [])
