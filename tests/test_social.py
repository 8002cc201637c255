"""Follows, profiles and the home feed."""
import math

from sqlalchemy import update

from app.models.user import User
from conftest import API


def test_follow_and_profile_counts(client, make_user):
    alice = make_user("alice")
    make_user("bob")

    resp = client.post(f"{API}/users/bob/follow", headers=alice["headers"])
    assert resp.status_code == 200
    assert resp.json()["message"] == "User followed successfully"

    profile = client.get(f"{API}/users/bob", headers=alice["headers"]).json()["data"]
    assert profile["followers_count"] == 1
    assert profile["is_following"] is True
    assert profile["email"] is None

    own = client.get(f"{API}/users/alice", headers=alice["headers"]).json()["data"]
    assert own["following_count"] == 1
    assert own["email"] == "alice@example.com"

    anonymous = client.get(f"{API}/users/bob").json()["data"]
    assert anonymous["is_following"] is None


def test_cannot_follow_self(client, make_user):
    alice = make_user("alice")
    resp = client.post(f"{API}/users/alice/follow", headers=alice["headers"])
    assert resp.status_code == 400
    assert resp.json()["error"] == "Cannot follow yourself"


def test_duplicate_follow_rejected(client, make_user):
    alice = make_user("alice")
    make_user("bob")
    client.post(f"{API}/users/bob/follow", headers=alice["headers"])
    resp = client.post(f"{API}/users/bob/follow", headers=alice["headers"])
    assert resp.status_code == 400
    assert resp.json()["error"] == "Already following this user"


def test_follow_unknown_user(client, make_user):
    alice = make_user("alice")
    assert client.post(f"{API}/users/ghost/follow", headers=alice["headers"]).status_code == 404
    assert client.get(f"{API}/users/ghost").status_code == 404


def test_unfollow_is_silent_when_not_following(client, make_user):
    alice = make_user("alice")
    make_user("bob")
    assert client.delete(f"{API}/users/bob/follow", headers=alice["headers"]).status_code == 200

    client.post(f"{API}/users/bob/follow", headers=alice["headers"])
    resp = client.delete(f"{API}/users/bob/follow", headers=alice["headers"])
    assert resp.status_code == 200
    assert resp.json()["message"] == "User unfollowed successfully"
    assert client.get(f"{API}/users/bob").json()["data"]["followers_count"] == 0


def test_followers_and_following_lists(client, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    make_user("carol")
    client.post(f"{API}/users/carol/follow", headers=alice["headers"])
    client.post(f"{API}/users/carol/follow", headers=bob["headers"])

    followers = client.get(f"{API}/users/carol/followers").json()
    assert {u["username"] for u in followers["data"]} == {"alice", "bob"}
    assert followers["pagination"]["total"] == 2

    following = client.get(f"{API}/users/alice/following").json()
    assert [u["username"] for u in following["data"]] == ["carol"]


def test_update_profile(client, make_user):
    alice = make_user("alice")
    resp = client.patch(
        f"{API}/users/me",
        json={"bio": "hello there", "location": "Lisbon", "first_name": "Ally"},
        headers=alice["headers"],
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["bio"] == "hello there"
    assert data["location"] == "Lisbon"
    assert data["first_name"] == "Ally"
    assert client.get(f"{API}/users/alice").json()["data"]["bio"] == "hello there"

    bad = client.patch(f"{API}/users/me", json={"profile_visibility": "everyone"}, headers=alice["headers"])
    assert bad.status_code == 400


def test_feed_like_and_notification_scenario(client, make_user):
    a = make_user("usera")
    b = make_user("userb")
    client.post(f"{API}/users/userb/follow", headers=a["headers"])
    post_id = client.post(f"{API}/posts", json={"content": "from b"}, headers=b["headers"]).json()["data"]["id"]

    feed = client.get(f"{API}/feed", headers=a["headers"]).json()
    assert [p["id"] for p in feed["data"]] == [post_id]
    assert feed["data"][0]["is_liked"] is False

    assert client.post(f"{API}/posts/{post_id}/like", headers=a["headers"]).status_code == 200

    notifications = client.get(f"{API}/notifications", headers=b["headers"]).json()["data"]
    likes = [n for n in notifications if n["notification_type"] == "like"]
    assert len(likes) == 1
    assert likes[0]["sender"]["username"] == "usera"
    assert likes[0]["post_id"] == post_id

    feed = client.get(f"{API}/feed", headers=a["headers"]).json()
    assert feed["data"][0]["is_liked"] is True
    assert feed["data"][0]["like_count"] == 1


def test_feed_includes_own_posts_only_from_followed_authors(client, make_user):
    a = make_user("usera")
    b = make_user("userb")
    c = make_user("userc")
    client.post(f"{API}/users/userb/follow", headers=a["headers"])
    client.post(f"{API}/posts", json={"content": "mine"}, headers=a["headers"])
    client.post(f"{API}/posts", json={"content": "followed"}, headers=b["headers"])
    client.post(f"{API}/posts", json={"content": "stranger"}, headers=c["headers"])

    feed = client.get(f"{API}/feed", headers=a["headers"]).json()
    assert [p["content"] for p in feed["data"]] == ["followed", "mine"]
    assert client.get(f"{API}/feed").status_code == 401


def test_feed_pages_do_not_overlap(client, make_user):
    a = make_user("usera")
    b = make_user("userb")
    client.post(f"{API}/users/userb/follow", headers=a["headers"])
    for i in range(7):
        client.post(f"{API}/posts", json={"content": f"post {i}"}, headers=b["headers"])

    page1 = client.get(f"{API}/feed", params={"page": 1, "limit": 4}, headers=a["headers"]).json()
    page2 = client.get(f"{API}/feed", params={"page": 2, "limit": 4}, headers=a["headers"]).json()
    ids1 = {p["id"] for p in page1["data"]}
    ids2 = {p["id"] for p in page2["data"]}
    assert len(ids1) == 4
    assert len(ids2) == 3
    assert not ids1 & ids2
    assert page1["pagination"]["total"] == 7
    assert page1["pagination"]["total_pages"] == math.ceil(7 / 4)


def test_deactivated_follower_leaves_counts_and_lists_in_agreement(client, make_user, run_db):
    alice = make_user("alice")
    bob = make_user("bob")
    make_user("carol")
    client.post(f"{API}/users/carol/follow", headers=alice["headers"])
    client.post(f"{API}/users/carol/follow", headers=bob["headers"])
    client.post(f"{API}/users/alice/follow", headers=bob["headers"])

    async def deactivate(session):
        await session.execute(update(User).where(User.username == "bob").values(is_active=False))

    run_db(deactivate)

    carol = client.get(f"{API}/users/carol").json()["data"]
    followers = client.get(f"{API}/users/carol/followers").json()
    assert carol["followers_count"] == 1
    assert followers["pagination"]["total"] == 1
    assert [u["username"] for u in followers["data"]] == ["alice"]

    alice_profile = client.get(f"{API}/users/alice").json()["data"]
    assert alice_profile["followers_count"] == 0
    assert alice_profile["following_count"] == 1
    assert client.get(f"{API}/users/alice/followers").json()["pagination"]["total"] == 0
