"""Tests for the background task runner and the side-effect processor."""

import asyncio
from unittest.mock import MagicMock

import pytest
from structlog.testing import capture_logs

from src.shared.adapters.sqs_adapter import SQSAdapter
from src.shared.models import Anchor, AnchorFollow, BackgroundJob
from src.worker.processors.side_effect_processor import SideEffectProcessor
from src.worker.task_runner import BackgroundTaskRunner


class FlakyProcessor:
    """Fails the first ``failures`` attempts of every job."""

    def __init__(self, failures: int = 0):
        self.failures = failures
        self.attempts: list[tuple[BackgroundJob, dict]] = []
        self.completed: list[dict] = []

    async def process(self, job_type, payload):
        self.attempts.append((job_type, payload))
        if len([a for a in self.attempts if a[1] == payload]) <= self.failures:
            raise RuntimeError("transient failure")
        self.completed.append(payload)


class BlockingProcessor:
    def __init__(self):
        self.release = asyncio.Event()

    async def process(self, job_type, payload):
        await self.release.wait()


class FakeNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[dict] = []

    def send_anchor_update_notification(self, **kwargs):
        if self.fail:
            raise ConnectionError("queue unreachable")
        self.sent.append(kwargs)
        return "msg-1"


class TestBackgroundTaskRunner:
    async def test_runs_submitted_jobs(self):
        processor = FlakyProcessor()
        runner = BackgroundTaskRunner(processor, worker_count=2, queue_size=10, max_retries=0)
        await runner.start()

        assert runner.submit(BackgroundJob.MARK_SEEN, user_id="u", anchor_id="a") is True
        await runner.drain()
        await runner.stop()

        assert processor.completed == [{"user_id": "u", "anchor_id": "a"}]

    async def test_retries_then_succeeds(self):
        processor = FlakyProcessor(failures=2)
        runner = BackgroundTaskRunner(processor, worker_count=1, queue_size=10, max_retries=2, retry_delay=0)
        await runner.start()

        runner.submit(BackgroundJob.RECOMPUTE_ENGAGEMENT, anchor_id="a")
        await runner.drain()
        await runner.stop()

        assert len(processor.attempts) == 3
        assert processor.completed == [{"anchor_id": "a"}]

    async def test_gives_up_after_max_retries(self):
        processor = FlakyProcessor(failures=10)
        runner = BackgroundTaskRunner(processor, worker_count=1, queue_size=10, max_retries=1, retry_delay=0)
        await runner.start()

        runner.submit(BackgroundJob.RECOMPUTE_ENGAGEMENT, anchor_id="a")
        await runner.drain()

        assert len(processor.attempts) == 2
        assert processor.completed == []
        # the worker survives the failure
        assert runner.running is True
        await runner.stop()

    async def test_drops_jobs_when_queue_is_full(self):
        processor = BlockingProcessor()
        runner = BackgroundTaskRunner(processor, worker_count=1, queue_size=1, max_retries=0)
        await runner.start()

        accepted = [runner.submit(BackgroundJob.MARK_SEEN, n=n) for n in range(5)]
        processor.release.set()
        await runner.stop(timeout=1)

        assert accepted[-1] is False
        assert accepted.count(True) <= 2

    async def test_submit_before_start_is_dropped(self):
        runner = BackgroundTaskRunner(FlakyProcessor())

        assert runner.submit(BackgroundJob.MARK_SEEN) is False
        assert runner.running is False

    async def test_stop_gives_up_on_stuck_jobs(self):
        runner = BackgroundTaskRunner(BlockingProcessor(), worker_count=1, queue_size=5, max_retries=0)
        await runner.start()
        runner.submit(BackgroundJob.MARK_SEEN)

        await runner.stop(timeout=0.05)

        assert runner.running is False


class TestSideEffectProcessor:
    async def test_unknown_job_type(self, session_factory):
        with pytest.raises(ValueError):
            await SideEffectProcessor(session_factory).process("reindex", {})

    async def test_increment_version_notifies_followers(self, factory, session_factory):
        owner = await factory.user("owner")
        follower = await factory.user("follower")
        anchor = await factory.anchor(owner, title="Trip plan", version=7)
        await factory.follow_anchor(follower, anchor)
        notifier = FakeNotifier()

        await SideEffectProcessor(session_factory, notifier).process(
            BackgroundJob.INCREMENT_VERSION, {"anchor_id": str(anchor.id), "actor_id": str(owner.id)}
        )

        assert notifier.sent == [
            {
                "anchor_id": str(anchor.id),
                "anchor_title": "Trip plan",
                "author_id": str(owner.id),
                "version": 8,
                "recipient_ids": [str(follower.id)],
            }
        ]

    async def test_failed_publish_keeps_the_increment(self, factory, session_factory):
        owner = await factory.user("owner")
        follower = await factory.user("follower")
        anchor = await factory.anchor(owner)
        await factory.follow_anchor(follower, anchor)

        # must not raise, or the runner would retry and increment again
        await SideEffectProcessor(session_factory, FakeNotifier(fail=True)).process(
            BackgroundJob.INCREMENT_VERSION, {"anchor_id": str(anchor.id), "actor_id": None}
        )

        async with session_factory() as session:
            assert (await session.get(Anchor, anchor.id)).version == 2

    async def test_no_recipients_no_message(self, factory, session_factory):
        owner = await factory.user("owner")
        anchor = await factory.anchor(owner)
        notifier = FakeNotifier()

        await SideEffectProcessor(session_factory, notifier).process(
            BackgroundJob.INCREMENT_VERSION, {"anchor_id": str(anchor.id)}
        )

        assert notifier.sent == []

    async def test_mark_seen(self, factory, session_factory):
        owner = await factory.user("owner")
        reader = await factory.user("reader")
        anchor = await factory.anchor(owner, version=6)
        follow = await factory.follow_anchor(reader, anchor, last_seen_version=2)

        await SideEffectProcessor(session_factory).process(
            BackgroundJob.MARK_SEEN, {"user_id": str(reader.id), "anchor_id": str(anchor.id)}
        )

        async with session_factory() as session:
            assert (await session.get(AnchorFollow, follow.id)).last_seen_version == 6

    async def test_recompute_engagement(self, factory, session_factory):
        owner = await factory.user("owner")
        anchor = await factory.anchor(owner, like_count=4, clone_count=2, comment_count=1)

        await SideEffectProcessor(session_factory).process(
            BackgroundJob.RECOMPUTE_ENGAGEMENT, {"anchor_id": str(anchor.id)}
        )

        async with session_factory() as session:
            assert (await session.get(Anchor, anchor.id)).engagement_score == 4 * 2 + 2 * 3 + 1


class TestNotificationThroughSQSAdapter:
    @pytest.fixture
    async def followed_anchor(self, factory):
        owner = await factory.user("owner")
        follower = await factory.user("follower")
        anchor = await factory.anchor(owner, title="Trip plan")
        await factory.follow_anchor(follower, anchor)
        return owner, anchor

    async def test_unconfigured_queue_is_quiet(self, session_factory, followed_anchor):
        owner, anchor = followed_anchor
        client = MagicMock()
        processor = SideEffectProcessor(session_factory, SQSAdapter(queue_url="", client=client))

        with capture_logs() as logs:
            await processor.process(
                BackgroundJob.INCREMENT_VERSION, {"anchor_id": str(anchor.id), "actor_id": str(owner.id)}
            )

        assert [entry for entry in logs if entry["log_level"] == "error"] == []
        client.send_message.assert_not_called()
        async with session_factory() as session:
            assert (await session.get(Anchor, anchor.id)).version == 2

    async def test_configured_queue_sends_without_error(self, session_factory, followed_anchor):
        owner, anchor = followed_anchor
        client = MagicMock()
        client.send_message.return_value = {"MessageId": "m-1"}
        adapter = SQSAdapter(queue_url="https://sqs.us-east-1.amazonaws.com/1/notify", client=client)

        with capture_logs() as logs:
            await SideEffectProcessor(session_factory, adapter).process(
                BackgroundJob.INCREMENT_VERSION, {"anchor_id": str(anchor.id), "actor_id": str(owner.id)}
            )

        assert [entry for entry in logs if entry["log_level"] == "error"] == []
        assert "Notification message sent" in [entry["event"] for entry in logs]
        client.send_message.assert_called_once()
