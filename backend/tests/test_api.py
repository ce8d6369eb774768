"""HTTP-level tests: routing, auth, query validation and response shape."""

from uuid import uuid4

import pytest

from src.shared.models import ItemType, Visibility

from conftest import auth_headers, minutes_ago


@pytest.fixture
async def world(factory):
    viewer = await factory.user("viewer")
    alice = await factory.user("alice", is_verified=True)
    stranger = await factory.user("stranger")
    await factory.follow_user(viewer, alice)
    return viewer, alice, stranger


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_ready_reports_runner(self, client):
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    async def test_request_id_is_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"

    async def test_request_id_is_generated(self, client):
        response = await client.get("/health")

        assert len(response.headers["X-Request-ID"]) == 32

    async def test_unknown_route_uses_error_envelope(self, client):
        response = await client.get("/nowhere")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestFollowingFeedEndpoint:
    async def test_requires_authentication(self, client):
        response = await client.get("/feed/following")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTHENTICATION_ERROR"

    async def test_rejects_bad_token(self, client):
        response = await client.get("/feed/following", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    async def test_page_shape(self, client, factory, world):
        viewer, alice, _ = world
        anchor = await factory.anchor(alice, title="Weekend", tags=("travel",), last_item_added_at=minutes_ago(5))
        await factory.item(anchor, ItemType.URL, url_data={"title": "Guide", "favicon": "https://x/f.ico"})

        response = await client.get("/feed/following", headers=auth_headers(viewer.id))

        assert response.status_code == 200
        body = response.json()
        item = body["items"][0]
        assert item["title"] == "Weekend"
        assert item["tags"] == ["travel"]
        assert item["author"]["username"] == "alice"
        assert item["author"]["isVerified"] is True
        assert "followerCount" not in item["author"]
        assert "engagementScore" not in item
        assert item["engagement"]["likeSummary"]["totalCount"] == 0
        assert item["preview"]["items"] == [{"type": "url", "thumbnail": "https://x/f.ico", "title": "Guide"}]
        assert body["pagination"] == {"limit": 20, "hasMore": False, "itemCount": 1}
        assert body["meta"] == {
            "feedType": "following",
            "isAuthenticated": True,
            "includesOwnAnchors": True,
            "totalFollowing": 1,
        }

    async def test_cursor_walk(self, client, factory, world):
        viewer, alice, _ = world
        for i in range(3):
            await factory.anchor(alice, title=f"a{i}", last_item_added_at=minutes_ago(10 - i))
        headers = auth_headers(viewer.id)

        first = (await client.get("/feed/following", params={"limit": 2}, headers=headers)).json()
        second = (
            await client.get(
                "/feed/following",
                params={"limit": 2, "cursor": first["pagination"]["nextCursor"]},
                headers=headers,
            )
        ).json()

        assert [item["title"] for item in first["items"]] == ["a2", "a1"]
        assert [item["title"] for item in second["items"]] == ["a0"]
        assert "nextCursor" not in second["pagination"]

    async def test_no_following_reason(self, client, factory):
        loner = await factory.user("loner")

        response = await client.get(
            "/feed/following", params={"includeOwn": "false"}, headers=auth_headers(loner.id)
        )

        assert response.json()["meta"]["emptyReason"] == "NO_FOLLOWING"

    @pytest.mark.parametrize("limit", ["0", "51", "abc"])
    async def test_invalid_limit(self, client, world, limit):
        viewer, _, _ = world

        response = await client.get("/feed/following", params={"limit": limit}, headers=auth_headers(viewer.id))

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INVALID_QUERY"
        assert error["details"]["errors"][0]["field"] == "limit"

    async def test_invalid_cursor(self, client, world):
        viewer, _, _ = world

        response = await client.get(
            "/feed/following", params={"cursor": "@@@"}, headers=auth_headers(viewer.id)
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_CURSOR"


class TestDiscoverEndpoint:
    async def test_anonymous_access(self, client, factory, world):
        _, alice, stranger = world
        await factory.anchor(alice, title="one", engagement_score=3)
        await factory.anchor(stranger, title="two", engagement_score=5)

        response = await client.get("/feed/discover", params={"category": "popular"})

        body = response.json()
        assert response.status_code == 200
        assert [item["title"] for item in body["items"]] == ["two", "one"]
        assert body["items"][0]["engagementScore"] == 5
        assert body["items"][0]["author"]["followerCount"] == 0
        assert body["meta"]["isAuthenticated"] is False
        assert body["meta"]["category"] == "popular"

    async def test_signed_in_viewer_excludes_followed(self, client, factory, world):
        viewer, alice, stranger = world
        await factory.anchor(alice, title="followed")
        await factory.anchor(stranger, title="new to me")

        response = await client.get("/feed/discover", headers=auth_headers(viewer.id))

        assert [item["title"] for item in response.json()["items"]] == ["new to me"]

    async def test_unknown_category(self, client):
        response = await client.get("/feed/discover", params={"category": "hot"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_QUERY"

    async def test_tag_is_normalized(self, client, factory, world):
        _, _, stranger = world
        await factory.anchor(stranger, title="tagged", tags=("travel",))

        response = await client.get("/feed/discover", params={"tag": "  Travel ", "category": "recent"})

        body = response.json()
        assert [item["title"] for item in body["items"]] == ["tagged"]
        assert body["meta"]["tag"] == "travel"

    async def test_tag_too_short(self, client):
        response = await client.get("/feed/discover", params={"tag": "x"})

        assert response.status_code == 400
        assert response.json()["error"]["details"]["errors"][0]["field"] == "tag"

    async def test_tag_feed(self, client, factory, world):
        _, _, stranger = world
        await factory.anchor(stranger, title="food", tags=("food",))

        body = (await client.get("/feed/tags/Food")).json()

        assert [item["title"] for item in body["items"]] == ["food"]
        assert body["meta"]["feedType"] == "tag"

    async def test_tag_feed_without_matches(self, client):
        body = (await client.get("/feed/tags/nothing")).json()

        assert body["items"] == []
        assert body["meta"]["emptyReason"] == "NO_TAG_CONTENT"


class TestAnchorEndpoints:
    async def test_detail_shows_items(self, client, factory, world):
        _, alice, _ = world
        anchor = await factory.anchor(alice, title="Notes")
        await factory.item(anchor, ItemType.TEXT, position=1, text_data={"content": "second"})
        await factory.item(anchor, ItemType.TEXT, position=0, text_data={"content": "first"})

        response = await client.get(f"/anchors/{anchor.id}")

        body = response.json()
        assert response.status_code == 200
        assert [item["textData"]["content"] for item in body["items"]] == ["first", "second"]
        assert body["version"] == 1

    async def test_private_anchor_is_hidden(self, client, factory, world):
        viewer, alice, _ = world
        anchor = await factory.anchor(alice, visibility=Visibility.PRIVATE)

        assert (await client.get(f"/anchors/{anchor.id}", headers=auth_headers(viewer.id))).status_code == 404
        assert (await client.get(f"/anchors/{anchor.id}", headers=auth_headers(alice.id))).status_code == 200

    async def test_unknown_anchor(self, client):
        response = await client.get(f"/anchors/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    async def test_like_round_trip(self, client, factory, runner, world):
        viewer, alice, _ = world
        anchor = await factory.anchor(alice)
        headers = auth_headers(viewer.id)

        liked = await client.post(f"/anchors/{anchor.id}/like", json={"action": "like"}, headers=headers)
        await runner.drain()
        unliked = await client.post(f"/anchors/{anchor.id}/like", json={"action": "unlike"}, headers=headers)
        await runner.drain()

        assert liked.json() == {"hasLiked": True, "likeCount": 1}
        assert unliked.json() == {"hasLiked": False, "likeCount": 0}

    async def test_like_requires_auth(self, client, factory, world):
        _, alice, _ = world
        anchor = await factory.anchor(alice)

        response = await client.post(f"/anchors/{anchor.id}/like", json={"action": "like"})

        assert response.status_code == 401

    async def test_follow_view_and_status(self, client, factory, runner, world):
        viewer, alice, _ = world
        anchor = await factory.anchor(alice, version=2)
        headers = auth_headers(viewer.id)

        followed = await client.post(
            f"/anchors/{anchor.id}/follow",
            json={"action": "follow", "notifyOnUpdate": False},
            headers=headers,
        )
        assert followed.json() == {"isFollowing": True, "notifyOnUpdate": False, "followerCount": 1}

        status = (await client.get(f"/anchors/{anchor.id}/follow/status", headers=headers)).json()
        assert status["hasUpdates"] is False
        assert status["lastSeenVersion"] == 2

        patched = await client.patch(
            f"/anchors/{anchor.id}/follow/notifications",
            json={"notifyOnUpdate": True},
            headers=headers,
        )
        assert patched.json()["notifyOnUpdate"] is True

        unfollowed = await client.post(f"/anchors/{anchor.id}/follow", json={"action": "unfollow"}, headers=headers)
        assert unfollowed.json()["isFollowing"] is False

    async def test_cannot_follow_own_anchor(self, client, factory, world):
        _, alice, _ = world
        anchor = await factory.anchor(alice)

        response = await client.post(
            f"/anchors/{anchor.id}/follow", json={"action": "follow"}, headers=auth_headers(alice.id)
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "CANNOT_FOLLOW_OWN"

    async def test_notifications_without_follow(self, client, factory, world):
        viewer, alice, _ = world
        anchor = await factory.anchor(alice)

        response = await client.patch(
            f"/anchors/{anchor.id}/follow/notifications",
            json={"notifyOnUpdate": False},
            headers=auth_headers(viewer.id),
        )

        assert response.status_code == 404


class TestFollowingAnchorsEndpoint:
    async def test_list_with_badges(self, client, factory, world):
        viewer, alice, _ = world
        behind = await factory.anchor(alice, title="behind", version=4)
        current = await factory.anchor(alice, title="current", version=1)
        await factory.follow_anchor(viewer, behind, last_seen_version=1)
        await factory.follow_anchor(viewer, current, last_seen_version=1, created_at=minutes_ago(30))

        response = await client.get("/users/me/following-anchors", headers=auth_headers(viewer.id))

        body = response.json()
        assert [item["title"] for item in body["data"]] == ["behind", "current"]
        assert body["data"][0]["updatesSinceLastSeen"] == 3
        assert body["pagination"] == {"page": 1, "limit": 20, "total": 2, "totalPages": 1, "hasMore": False}
        assert body["meta"] == {"sort": "stale", "totalWithUpdates": 1}

    async def test_has_updates_filter_and_limit_clamp(self, client, factory, world):
        viewer, alice, _ = world
        behind = await factory.anchor(alice, title="behind", version=4)
        current = await factory.anchor(alice, title="current", version=1)
        await factory.follow_anchor(viewer, behind, last_seen_version=1)
        await factory.follow_anchor(viewer, current, last_seen_version=1)

        response = await client.get(
            "/users/me/following-anchors",
            params={"hasUpdates": "true", "limit": 999},
            headers=auth_headers(viewer.id),
        )

        body = response.json()
        assert [item["title"] for item in body["data"]] == ["behind"]
        assert body["pagination"]["limit"] == 20

    async def test_huge_page_reads_an_empty_page(self, client, factory, world):
        viewer, alice, _ = world
        await factory.follow_anchor(viewer, await factory.anchor(alice, title="only"))

        response = await client.get(
            "/users/me/following-anchors",
            params={"page": str(10**30)},
            headers=auth_headers(viewer.id),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["data"] == []
        assert body["pagination"]["page"] == 10_000
