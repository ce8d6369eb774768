"""Tests for viewer engagement and like summaries."""

from uuid import uuid4

import pytest

from src.shared.models import Anchor, User
from src.shared.services.engagement_service import EngagementService, select_shown_likers


class FakeLikes:
    def __init__(self, liked=(), recent=None):
        self.liked = set(liked)
        self.recent = recent or {}
        self.recent_calls = []

    async def get_liked_anchor_ids(self, user_id, anchor_ids):
        return {anchor_id for anchor_id in anchor_ids if anchor_id in self.liked}

    async def get_recent_liker_ids(self, anchor_ids, per_anchor):
        self.recent_calls.append(list(anchor_ids))
        return {anchor_id: self.recent[anchor_id][:per_anchor] for anchor_id in anchor_ids if anchor_id in self.recent}


class FakeClones:
    def __init__(self, cloned=()):
        self.cloned = set(cloned)

    async def get_cloned_anchor_ids(self, user_id, anchor_ids):
        return {anchor_id for anchor_id in anchor_ids if anchor_id in self.cloned}


class FakeFollows:
    def __init__(self, followed=()):
        self.followed = set(followed)

    async def get_followed_subset(self, user_id, candidate_ids):
        return {user_id for user_id in candidate_ids if user_id in self.followed}


class FakeProfiles:
    def __init__(self, users):
        self.users = {user.id: user for user in users}

    async def get_map(self, ids):
        return {user_id: self.users[user_id] for user_id in ids if user_id in self.users}


def _users(count):
    return [User(id=uuid4(), username=f"u{i}", display_name=f"U{i}") for i in range(count)]


class TestSelectShownLikers:
    @pytest.fixture
    def likers(self):
        return [uuid4() for _ in range(6)]

    def test_anonymous_sees_most_recent(self, likers):
        shown = select_shown_likers(likers, set(), authenticated=False, include_strangers=False, shown=3)

        assert shown == likers[:3]

    def test_feed_shows_only_followed(self, likers):
        followed = {likers[1], likers[4]}
        shown = select_shown_likers(likers, followed, authenticated=True, include_strangers=False, shown=3)

        assert shown == [likers[1], likers[4]]

    def test_detail_fills_with_strangers_after_followed(self, likers):
        followed = {likers[3]}
        shown = select_shown_likers(likers, followed, authenticated=True, include_strangers=True, shown=3)

        assert shown == [likers[3], likers[0], likers[1]]


class TestEngagementService:
    async def test_like_summary_prioritizes_followed_likers(self):
        # 10 likes, the viewer follows two of the twenty most recent likers
        users = _users(10)
        anchor = Anchor(id=uuid4(), like_count=10)
        viewer = uuid4()
        service = EngagementService(
            likes=FakeLikes(recent={anchor.id: [user.id for user in users]}),
            clones=FakeClones(),
            follows=FakeFollows(followed={users[2].id, users[7].id}),
            profiles=FakeProfiles(users),
        )

        summary = (await service.enrich([anchor], viewer))[anchor.id].like_summary

        assert [user.id for user in summary.liked_by_following] == [users[2].id, users[7].id]
        assert summary.total_count == 10
        assert summary.other_likers_count == 8

    async def test_viewer_flags(self):
        liked, cloned, neither = (Anchor(id=uuid4(), like_count=0) for _ in range(3))
        service = EngagementService(
            likes=FakeLikes(liked={liked.id}),
            clones=FakeClones(cloned={cloned.id}),
            follows=FakeFollows(),
            profiles=FakeProfiles([]),
        )

        result = await service.enrich([liked, cloned, neither], uuid4())

        assert (result[liked.id].has_liked, result[liked.id].has_cloned) == (True, False)
        assert (result[cloned.id].has_liked, result[cloned.id].has_cloned) == (False, True)
        assert (result[neither.id].has_liked, result[neither.id].has_cloned) == (False, False)

    async def test_anonymous_viewer_gets_recent_likers_and_no_flags(self):
        users = _users(5)
        anchor = Anchor(id=uuid4(), like_count=5)
        service = EngagementService(
            likes=FakeLikes(liked={anchor.id}, recent={anchor.id: [user.id for user in users]}),
            clones=FakeClones(cloned={anchor.id}),
            follows=FakeFollows(),
            profiles=FakeProfiles(users),
            shown=3,
        )

        engagement = (await service.enrich([anchor], None))[anchor.id]

        assert engagement.has_liked is False
        assert engagement.has_cloned is False
        assert [user.id for user in engagement.like_summary.liked_by_following] == [u.id for u in users[:3]]
        assert engagement.like_summary.other_likers_count == 2

    async def test_unliked_anchors_skip_the_likes_lookup(self):
        likes = FakeLikes()
        anchor = Anchor(id=uuid4(), like_count=0)
        service = EngagementService(likes, FakeClones(), FakeFollows(), FakeProfiles([]))

        summary = (await service.enrich([anchor], uuid4()))[anchor.id].like_summary

        assert likes.recent_calls == []
        assert (summary.total_count, summary.liked_by_following, summary.other_likers_count) == (0, [], 0)

    async def test_other_count_never_negative(self):
        # Denormalized count lags behind the rows
        users = _users(3)
        anchor = Anchor(id=uuid4(), like_count=1)
        service = EngagementService(
            likes=FakeLikes(recent={anchor.id: [user.id for user in users]}),
            clones=FakeClones(),
            follows=FakeFollows(),
            profiles=FakeProfiles(users),
        )

        summary = (await service.enrich([anchor], None))[anchor.id].like_summary

        assert summary.other_likers_count == 0

    async def test_empty_page(self):
        service = EngagementService(FakeLikes(), FakeClones(), FakeFollows(), FakeProfiles([]))

        assert await service.enrich([], uuid4()) == {}
