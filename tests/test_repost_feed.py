"""
Tests for reposting and the following feed
"""

import pytest

from posts.models import Repost

pytestmark = pytest.mark.django_db

FEED_URL = "/api/v1/posts/feed"


def repost_url(post_id):
    return f"/api/v1/posts/repost/{post_id}"


class TestRepost:
    def test_repost_appends_and_increments(self, auth_client, user, make_user, make_post):
        post = make_post(make_user("bob"))

        response = auth_client.get(repost_url(post.pk))

        assert response.status_code == 201
        assert response.json() == {"success": True, "message": "Post reposted successfully"}
        post.refresh_from_db()
        assert post.number_of_reposts == 1
        assert list(user.reposts.values_list("post_id", flat=True)) == [post.pk]

    def test_repeated_reposts_do_not_collapse(self, auth_client, user, make_user, make_post):
        post = make_post(make_user("bob"))

        for _ in range(3):
            assert auth_client.get(repost_url(post.pk)).status_code == 201

        post.refresh_from_db()
        assert post.number_of_reposts == 3
        assert Repost.objects.filter(user=user, post=post).count() == 3

    def test_self_repost_is_rejected_without_state_change(self, auth_client, user, make_post):
        post = make_post(user)

        response = auth_client.get(repost_url(post.pk))

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "You can't repost your post"}
        post.refresh_from_db()
        assert post.number_of_reposts == 0
        assert not Repost.objects.exists()

    def test_missing_post_is_404(self, auth_client):
        response = auth_client.get(repost_url(777))

        assert response.status_code == 404
        assert response.json()["message"] == "User or post not found"

    def test_reposts_show_on_profile(self, auth_client, make_user, make_post):
        first = make_post(make_user("bob"))
        second = make_post(make_user("carol"))
        auth_client.get(repost_url(second.pk))
        auth_client.get(repost_url(first.pk))

        reposts = auth_client.get("/api/v1/users/me").json()["user"]["reposts"]

        assert [r["post"] for r in reposts] == [second.pk, first.pk]


class TestFollowingFeed:
    def test_following_nobody_is_400(self, auth_client, make_user, make_post):
        make_post(make_user("bob"))

        response = auth_client.get(FEED_URL)

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "You aren't following anyone."}

    def test_only_followed_authors_newest_first(self, auth_client, user, make_user, make_post):
        bob = make_user("bob")
        carol = make_user("carol")
        user.following.add(bob)
        p1 = make_post(bob, "P1")
        make_post(carol, "not followed")
        make_post(user, "my own")
        p2 = make_post(bob, "P2")

        response = auth_client.get(FEED_URL)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Feed fetched successfully."
        assert [p["id"] for p in body["posts"]] == [p2.pk, p1.pk]
        assert body["posts"][0]["posted_by"]["username"] == "bob"

    def test_deleted_post_drops_out_of_feed(self, client_for, make_user, make_post, mock_cloudinary):
        a = make_user("a")
        b = make_user("b")
        a.following.add(b)
        p1 = make_post(b, "P1")
        p2 = make_post(b, "P2")
        a_client = client_for(a)

        assert [p["id"] for p in a_client.get(FEED_URL).json()["posts"]] == [p2.pk, p1.pk]

        assert client_for(b).delete(f"/api/v1/posts/{p2.pk}").status_code == 200

        assert [p["id"] for p in a_client.get(FEED_URL).json()["posts"]] == [p1.pk]

    def test_followed_authors_without_posts_is_404(self, auth_client, user, make_user):
        user.following.add(make_user("quiet"))

        response = auth_client.get(FEED_URL)

        assert response.status_code == 404
        assert response.json()["message"] == "Feed post not found"

    def test_empty_feed_as_list_when_configured(self, auth_client, user, make_user, settings):
        settings.EMPTY_RESULT_AS_ERROR = False
        user.following.add(make_user("quiet"))

        response = auth_client.get(FEED_URL)

        assert response.status_code == 200
        assert response.json()["posts"] == []

