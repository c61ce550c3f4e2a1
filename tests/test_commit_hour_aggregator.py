import asyncio
import unittest
from datetime import timedelta, timezone

from src.application.commit_hour_aggregator import CommitHourAggregator, bucket_commit_hours
from src.domain.models import Repository
from tests.fakes import BarrierGitHubClient, FakeGitHubClient, commit_at, failing


def _repos(*names):
    return [Repository(name=name, owner="octocat") for name in names]


class TestBucketCommitHours(unittest.TestCase):
    def test_counts_hours_and_skips_missing_dates(self) -> None:
        commits = [
            commit_at("2024-03-01T00:05:00Z"),
            commit_at("2024-03-02T00:59:59Z"),
            commit_at("2024-03-03T13:30:00Z"),
            commit_at("2024-03-04T23:00:00Z"),
            {"sha": "no-date", "commit": {"author": {"name": "octocat"}}},
        ]

        histogram = bucket_commit_hours(commits, timezone.utc)

        self.assertEqual(len(histogram.counts), 24)
        self.assertEqual(histogram.counts[0], 2)
        self.assertEqual(histogram.counts[13], 1)
        self.assertEqual(histogram.counts[23], 1)
        self.assertEqual(histogram.total, 4)
        self.assertEqual(sum(histogram.counts[1:13]) + sum(histogram.counts[14:23]), 0)

    def test_converts_to_the_requested_zone(self) -> None:
        plus_two = timezone(timedelta(hours=2))

        histogram = bucket_commit_hours([commit_at("2024-03-04T23:00:00Z")], plus_two)

        self.assertEqual(histogram.counts[1], 1)

    def test_no_commits_gives_24_zeros(self) -> None:
        histogram = bucket_commit_hours([], timezone.utc)

        self.assertEqual(histogram.counts, (0,) * 24)
        self.assertIsNone(histogram.busiest_hour)


class TestCommitHourAggregator(unittest.IsolatedAsyncioTestCase):
    async def test_only_first_five_repositories_are_queried(self) -> None:
        names = [f"repo{i}" for i in range(8)]
        client = FakeGitHubClient(commits={name: [commit_at("2024-03-01T09:00:00Z")] for name in names})
        aggregator = CommitHourAggregator(client, tz=timezone.utc)

        histogram = await aggregator.aggregate(None, _repos(*names), "octocat")

        self.assertEqual(client.calls_of("commits"), names[:5])
        self.assertEqual(histogram.counts[9], 5)
        self.assertEqual(histogram.busiest_hour, 9)

    async def test_failed_repository_contributes_nothing(self) -> None:
        client = FakeGitHubClient(commits={
            "a": [commit_at("2024-03-01T10:00:00Z")],
            "broken": failing(500),
            "b": [commit_at("2024-03-01T10:30:00Z"), commit_at("2024-03-01T22:00:00Z")],
        })
        aggregator = CommitHourAggregator(client, tz=timezone.utc)

        histogram = await aggregator.aggregate(None, _repos("a", "broken", "b"), "octocat")

        self.assertEqual(histogram.counts[10], 2)
        self.assertEqual(histogram.counts[22], 1)
        self.assertEqual(histogram.total, 3)

    async def test_every_repository_failing_still_returns_24_buckets(self) -> None:
        client = FakeGitHubClient(commits={"a": failing(404), "b": failing(403)})
        aggregator = CommitHourAggregator(client, tz=timezone.utc)

        histogram = await aggregator.aggregate(None, _repos("a", "b"), "octocat")

        self.assertEqual(histogram.counts, (0,) * 24)

    async def test_no_repositories_returns_empty_histogram(self) -> None:
        aggregator = CommitHourAggregator(FakeGitHubClient(), tz=timezone.utc)

        histogram = await aggregator.aggregate(None, [], "octocat")

        self.assertEqual(len(histogram.counts), 24)
        self.assertEqual(histogram.total, 0)

    async def test_wrong_shape_payload_degrades_only_that_repository(self) -> None:
        client = FakeGitHubClient(commits={
            "a": {"message": "Git Repository is empty."},
            "b": [commit_at("2024-03-01T08:00:00Z"), "not-a-commit"],
        })
        aggregator = CommitHourAggregator(client, tz=timezone.utc)

        histogram = await aggregator.aggregate(None, _repos("a", "b"), "octocat")

        self.assertEqual(histogram.counts[8], 1)
        self.assertEqual(histogram.total, 1)

    async def test_requests_are_issued_as_one_concurrent_batch(self) -> None:
        names = [f"repo{i}" for i in range(7)]
        client = BarrierGitHubClient(expected=5, commits={name: [commit_at("2024-03-01T04:00:00Z")] for name in names})
        aggregator = CommitHourAggregator(client, tz=timezone.utc)

        histogram = await asyncio.wait_for(aggregator.aggregate(None, _repos(*names), "octocat"), timeout=2)

        self.assertEqual(client.started, 5)
        self.assertEqual(histogram.counts[4], 5)
