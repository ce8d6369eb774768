"""Tests for anchor follows and version tracking."""

from uuid import uuid4

import pytest

from src.shared.core.exceptions import (
    AnchorNotFoundError,
    AuthorizationError,
    FollowNotFoundError,
    ValidationError,
)
from src.shared.models import Anchor, AnchorFollow, BackgroundJob, FollowingSort, Visibility
from src.shared.services.anchor_follow_service import (
    FollowVersionTracker,
    clamp_list_limit,
    clamp_list_page,
    compute_update_status,
)
from src.shared.services.anchor_service import AnchorService

from conftest import minutes_ago


async def _reload(session_factory, model, record_id):
    async with session_factory() as session:
        return await session.get(model, record_id)


class TestUpdateStatus:
    @pytest.mark.parametrize(
        "last_seen, current, expected",
        [
            (1, 3, (True, 2)),
            (3, 3, (False, 0)),
            # corrupted row: seen more than exists
            (5, 3, (False, 0)),
        ],
    )
    def test_compute_update_status(self, last_seen, current, expected):
        assert compute_update_status(last_seen, current) == expected

    @pytest.mark.parametrize("limit, expected", [(None, 20), (0, 20), (-3, 20), (51, 20), (1, 1), (50, 50)])
    def test_clamp_list_limit(self, limit, expected):
        assert clamp_list_limit(limit) == expected

    @pytest.mark.parametrize("page, expected", [(-5, 1), (0, 1), (1, 1), (10_000, 10_000), (10_001, 10_000), (10**30, 10_000)])
    def test_clamp_list_page(self, page, expected):
        assert clamp_list_page(page) == expected


class TestFollow:
    @pytest.fixture
    async def setup(self, factory):
        owner = await factory.user("owner")
        reader = await factory.user("reader")
        anchor = await factory.anchor(owner, title="Recipes", version=4)
        return owner, reader, anchor

    async def test_new_follow_starts_at_current_version(self, db, setup):
        _, reader, anchor = setup
        tracker = FollowVersionTracker(db)

        status = await tracker.follow(reader.id, anchor.id)
        await db.commit()

        assert status.is_following is True
        assert status.notify_on_update is True
        assert status.last_seen_version == 4
        assert status.has_updates is False
        assert status.follower_count == 1

    async def test_follow_is_idempotent_but_updates_notify(self, db, setup):
        _, reader, anchor = setup
        tracker = FollowVersionTracker(db)
        await tracker.follow(reader.id, anchor.id)

        status = await tracker.follow(reader.id, anchor.id, notify_on_update=False)
        await db.commit()

        assert status.notify_on_update is False
        assert status.follower_count == 1

    async def test_losing_the_first_follow_race(self, db, factory, session_factory, setup, monkeypatch):
        _, reader, anchor = setup
        # a concurrent request inserted the row after this one looked
        existing = await factory.follow_anchor(reader, anchor, last_seen_version=4)
        tracker = FollowVersionTracker(db)
        real_get_follow = tracker.follow_repo.get_follow
        reads = []

        async def first_read_misses(user_id, anchor_id):
            reads.append(anchor_id)
            return None if len(reads) == 1 else await real_get_follow(user_id, anchor_id)

        monkeypatch.setattr(tracker.follow_repo, "get_follow", first_read_misses)

        status = await tracker.follow(reader.id, anchor.id, notify_on_update=False)
        await db.commit()

        assert status.is_following is True
        assert status.notify_on_update is False
        assert status.follower_count == 0
        assert len(reads) == 2
        stored = await _reload(session_factory, AnchorFollow, existing.id)
        assert stored.notify_on_update is False
        assert (await _reload(session_factory, Anchor, anchor.id)).follower_count == 0

    async def test_cannot_follow_own_anchor(self, db, setup):
        owner, _, anchor = setup

        with pytest.raises(ValidationError) as exc_info:
            await FollowVersionTracker(db).follow(owner.id, anchor.id)
        assert exc_info.value.error_code == "CANNOT_FOLLOW_OWN"

    async def test_cannot_follow_private_anchor(self, db, factory, setup):
        owner, reader, _ = setup
        private = await factory.anchor(owner, visibility=Visibility.PRIVATE)

        with pytest.raises(AuthorizationError):
            await FollowVersionTracker(db).follow(reader.id, private.id)

    async def test_missing_anchor(self, db, factory, setup):
        _, reader, _ = setup
        owner = await factory.user("other")
        gone = await factory.anchor(owner, deleted_at=minutes_ago(1))

        with pytest.raises(AnchorNotFoundError):
            await FollowVersionTracker(db).follow(reader.id, gone.id)

    async def test_unfollow_twice(self, db, setup):
        _, reader, anchor = setup
        tracker = FollowVersionTracker(db)
        await tracker.follow(reader.id, anchor.id)

        first = await tracker.unfollow(reader.id, anchor.id)
        second = await tracker.unfollow(reader.id, anchor.id)

        assert first.is_following is False
        assert first.follower_count == 0
        assert second.follower_count == 0

    async def test_set_notifications_requires_follow(self, db, setup):
        _, reader, anchor = setup

        with pytest.raises(FollowNotFoundError):
            await FollowVersionTracker(db).set_notifications(reader.id, anchor.id, False)

    async def test_status_when_not_following(self, db, setup):
        _, reader, anchor = setup

        status = await FollowVersionTracker(db).get_follow_status(reader.id, anchor.id)

        assert status.is_following is False
        assert status.current_version == 4
        assert status.followed_at is None


class TestVersionTracking:
    async def test_view_then_change_cycle(self, db, factory, session_factory, runner):
        owner = await factory.user("owner")
        reader = await factory.user("reader")
        anchor = await factory.anchor(owner, version=3)
        await factory.follow_anchor(reader, anchor, last_seen_version=1)
        tracker = FollowVersionTracker(db, runner)

        status = await tracker.get_follow_status(reader.id, anchor.id)
        assert (status.has_updates, status.updates_since_last_seen) == (True, 2)

        await AnchorService(db, runner).get_anchor_detail(anchor.id, reader.id)
        await runner.drain()

        async with session_factory() as session:
            status = await FollowVersionTracker(session).get_follow_status(reader.id, anchor.id)
        assert (status.has_updates, status.updates_since_last_seen) == (False, 0)
        assert status.last_seen_version == 3

        tracker.record_content_change(anchor.id, actor_id=owner.id)
        await runner.drain()

        async with session_factory() as session:
            status = await FollowVersionTracker(session).get_follow_status(reader.id, anchor.id)
        assert status.current_version == 4
        assert (status.has_updates, status.updates_since_last_seen) == (True, 1)

    async def test_mark_seen_never_moves_backwards(self, db, factory, session_factory):
        owner = await factory.user("owner")
        reader = await factory.user("reader")
        anchor = await factory.anchor(owner, version=2)
        follow = await factory.follow_anchor(reader, anchor, last_seen_version=5)

        moved = await FollowVersionTracker(db).mark_seen(reader.id, anchor.id)
        await db.commit()

        assert moved is False
        assert (await _reload(session_factory, AnchorFollow, follow.id)).last_seen_version == 5

    async def test_mark_seen_without_follow(self, db, factory):
        owner = await factory.user("owner")
        anchor = await factory.anchor(owner)

        assert await FollowVersionTracker(db).mark_seen(owner.id, anchor.id) is False

    async def test_content_change_collects_recipients(self, db, factory, session_factory):
        owner = await factory.user("owner")
        loud = await factory.user("loud")
        quiet = await factory.user("quiet")
        editor = await factory.user("editor")
        anchor = await factory.anchor(owner, title="Reading list")
        await factory.follow_anchor(loud, anchor)
        await factory.follow_anchor(quiet, anchor, notify_on_update=False)
        await factory.follow_anchor(editor, anchor)

        change = await FollowVersionTracker(db).apply_content_change(anchor.id, actor_id=editor.id)
        await db.commit()

        assert change.version == 2
        assert change.anchor_title == "Reading list"
        assert change.author_id == owner.id
        assert change.recipient_ids == [loud.id]
        assert (await _reload(session_factory, Anchor, anchor.id)).version == 2

    async def test_content_change_on_missing_anchor(self, db, factory):
        owner = await factory.user("owner")
        gone = await factory.anchor(owner, deleted_at=minutes_ago(1))

        assert await FollowVersionTracker(db).apply_content_change(gone.id, None) is None

    def test_scheduling_submits_string_ids(self, db, recorder):
        user_id, anchor_id = uuid4(), uuid4()
        tracker = FollowVersionTracker(db, recorder)

        tracker.schedule_mark_seen(user_id, anchor_id)
        tracker.record_content_change(anchor_id)

        assert recorder.jobs == [
            (BackgroundJob.MARK_SEEN, {"user_id": str(user_id), "anchor_id": str(anchor_id)}),
            (BackgroundJob.INCREMENT_VERSION, {"anchor_id": str(anchor_id), "actor_id": None}),
        ]

    def test_scheduling_needs_a_runner(self, db):
        with pytest.raises(RuntimeError):
            FollowVersionTracker(db).schedule_mark_seen(uuid4(), uuid4())


class TestFollowingAnchorsList:
    @pytest.fixture
    async def follows(self, factory):
        owner = await factory.user("owner")
        reader = await factory.user("reader")
        behind = await factory.anchor(owner, title="banana", version=5)
        current = await factory.anchor(owner, title="Apple", version=2)
        slightly = await factory.anchor(owner, title="cherry", version=3)
        hidden = await factory.anchor(owner, title="private", visibility=Visibility.PRIVATE, version=9)
        await factory.follow_anchor(reader, behind, last_seen_version=1, created_at=minutes_ago(30))
        await factory.follow_anchor(reader, current, last_seen_version=2, created_at=minutes_ago(20))
        await factory.follow_anchor(reader, slightly, last_seen_version=2, created_at=minutes_ago(10))
        await factory.follow_anchor(reader, hidden, last_seen_version=1)
        return reader

    async def test_stale_first_by_default(self, db, follows):
        page = await FollowVersionTracker(db).list_following_anchors(follows.id)

        assert [item.anchor.title for item in page.items] == ["banana", "cherry", "Apple"]
        assert [item.updates_since_last_seen for item in page.items] == [4, 1, 0]
        assert page.total == 3
        assert page.total_with_updates == 2
        assert page.sort == FollowingSort.STALE

    async def test_alphabetical_ignores_case(self, db, follows):
        page = await FollowVersionTracker(db).list_following_anchors(follows.id, sort=FollowingSort.ALPHABETICAL)

        assert [item.anchor.title for item in page.items] == ["Apple", "banana", "cherry"]

    async def test_recent_follows_first(self, db, follows):
        page = await FollowVersionTracker(db).list_following_anchors(follows.id, sort=FollowingSort.RECENT)

        assert [item.anchor.title for item in page.items] == ["cherry", "Apple", "banana"]

    async def test_only_with_updates(self, db, follows):
        page = await FollowVersionTracker(db).list_following_anchors(follows.id, only_with_updates=True)

        assert [item.anchor.title for item in page.items] == ["banana", "cherry"]
        assert page.total == page.total_with_updates == 2

    async def test_offset_pagination(self, db, follows):
        tracker = FollowVersionTracker(db)

        first = await tracker.list_following_anchors(follows.id, page=1, limit=2)
        last = await tracker.list_following_anchors(follows.id, page=2, limit=2)

        assert (first.total_pages, first.has_more) == (2, True)
        assert [item.anchor.title for item in last.items] == ["Apple"]
        assert last.has_more is False

    async def test_out_of_range_limit_falls_back(self, db, follows):
        page = await FollowVersionTracker(db).list_following_anchors(follows.id, limit=500, page=0)

        assert (page.limit, page.page) == (20, 1)

    async def test_page_far_past_the_end(self, db, follows):
        page = await FollowVersionTracker(db).list_following_anchors(follows.id, page=10**30)

        assert page.page == 10_000
        assert page.items == []
        assert page.total == 3
