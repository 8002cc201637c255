"""Posts, likes and comments."""
from uuid import uuid4

from conftest import API


def _post(client, user, content="hello world", **extra):
    return client.post(f"{API}/posts", json={"content": content, **extra}, headers=user["headers"])


def test_create_post(client, make_user):
    alice = make_user("alice")
    resp = _post(client, alice, "  first post  ", category="question")
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["content"] == "first post"
    assert data["category"] == "question"
    assert data["like_count"] == 0
    assert data["comment_count"] == 0
    assert data["is_liked"] is False
    assert data["author"]["username"] == "alice"


def test_create_post_requires_auth(client):
    assert client.post(f"{API}/posts", json={"content": "hi"}).status_code == 401


def test_create_post_validation(client, make_user):
    alice = make_user("alice")
    empty = _post(client, alice, "   ")
    assert empty.status_code == 400
    assert empty.json()["error"] == "Content is required"

    assert _post(client, alice, "x" * 280).status_code == 201
    too_long = _post(client, alice, "x" * 281)
    assert too_long.status_code == 400
    assert too_long.json()["error"] == "Content must be 280 characters or less"

    bad_category = _post(client, alice, "hi", category="memes")
    assert bad_category.status_code == 400
    assert bad_category.json()["error"] == "Invalid category"


def test_list_posts_newest_first_with_filters(client, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    _post(client, alice, "a1")
    _post(client, bob, "b1", category="announcement")
    _post(client, alice, "a2", category="announcement")

    resp = client.get(f"{API}/posts")
    assert resp.status_code == 200
    body = resp.json()
    assert [p["content"] for p in body["data"]] == ["a2", "b1", "a1"]
    assert body["pagination"] == {"page": 1, "limit": 20, "total": 3, "total_pages": 1}

    by_category = client.get(f"{API}/posts", params={"category": "announcement"}).json()
    assert {p["content"] for p in by_category["data"]} == {"a2", "b1"}
    assert by_category["pagination"]["total"] == 2

    by_author = client.get(f"{API}/posts", params={"author_id": alice["id"]}).json()
    assert [p["content"] for p in by_author["data"]] == ["a2", "a1"]
    assert by_author["pagination"]["total"] == 2


def test_list_posts_pagination_bounds(client, make_user):
    alice = make_user("alice")
    for i in range(5):
        _post(client, alice, f"post {i}")
    page = client.get(f"{API}/posts", params={"page": 3, "limit": 2}).json()
    assert len(page["data"]) == 1
    assert page["pagination"] == {"page": 3, "limit": 2, "total": 5, "total_pages": 3}

    assert client.get(f"{API}/posts", params={"page": 0}).status_code == 400
    assert client.get(f"{API}/posts", params={"limit": 101}).status_code == 400


def test_page_beyond_offset_range_is_rejected(client, make_user):
    alice = make_user("alice")
    resp = client.get(f"{API}/posts", params={"page": 10**18})
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert client.get(f"{API}/feed", params={"page": 10**18}, headers=alice["headers"]).status_code == 400
    assert client.get(f"{API}/posts", params={"page": 10**6}).status_code == 200


def test_get_and_delete_post(client, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    post_id = _post(client, alice).json()["data"]["id"]

    assert client.get(f"{API}/posts/{post_id}").json()["data"]["id"] == post_id
    assert client.get(f"{API}/posts/{uuid4()}").status_code == 404

    forbidden = client.delete(f"{API}/posts/{post_id}", headers=bob["headers"])
    assert forbidden.status_code == 403

    assert client.delete(f"{API}/posts/{post_id}", headers=alice["headers"]).status_code == 200
    assert client.get(f"{API}/posts/{post_id}").status_code == 404
    assert client.get(f"{API}/posts").json()["pagination"]["total"] == 0


def test_like_twice_is_rejected(client, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    post_id = _post(client, alice).json()["data"]["id"]

    first = client.post(f"{API}/posts/{post_id}/like", headers=bob["headers"])
    assert first.status_code == 200
    assert first.json()["message"] == "Post liked successfully"
    assert first.json()["data"]["like_count"] == 1
    assert first.json()["data"]["is_liked"] is True

    second = client.post(f"{API}/posts/{post_id}/like", headers=bob["headers"])
    assert second.status_code == 400
    assert second.json()["error"] == "Post already liked"
    assert client.get(f"{API}/posts/{post_id}").json()["data"]["like_count"] == 1


def test_like_missing_post(client, make_user):
    bob = make_user("bob")
    assert client.post(f"{API}/posts/{uuid4()}/like", headers=bob["headers"]).status_code == 404


def test_unlike_is_idempotent(client, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    carol = make_user("carol")
    post_id = _post(client, alice).json()["data"]["id"]
    client.post(f"{API}/posts/{post_id}/like", headers=bob["headers"])
    client.post(f"{API}/posts/{post_id}/like", headers=carol["headers"])

    resp = client.delete(f"{API}/posts/{post_id}/like", headers=bob["headers"])
    assert resp.status_code == 200
    assert resp.json()["data"]["like_count"] == 1
    assert resp.json()["data"]["is_liked"] is False

    again = client.delete(f"{API}/posts/{post_id}/like", headers=bob["headers"])
    assert again.status_code == 200
    assert again.json()["data"]["like_count"] == 1

    never_liked = client.delete(f"{API}/posts/{post_id}/like", headers=alice["headers"])
    assert never_liked.status_code == 200
    assert never_liked.json()["data"]["like_count"] == 1


def test_like_count_matches_edges_after_mixed_operations(client, make_user):
    author = make_user("author")
    fans = [make_user(f"fan{i}") for i in range(3)]
    post_id = _post(client, author).json()["data"]["id"]
    for fan in fans:
        client.post(f"{API}/posts/{post_id}/like", headers=fan["headers"])
    client.delete(f"{API}/posts/{post_id}/like", headers=fans[0]["headers"])
    client.post(f"{API}/posts/{post_id}/like", headers=fans[0]["headers"])
    client.delete(f"{API}/posts/{post_id}/like", headers=fans[1]["headers"])
    assert client.get(f"{API}/posts/{post_id}").json()["data"]["like_count"] == 2


def test_comments(client, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    post_id = _post(client, alice).json()["data"]["id"]

    created = client.post(f"{API}/posts/{post_id}/comments", json={"content": "nice"}, headers=bob["headers"])
    assert created.status_code == 201
    comment = created.json()["data"]
    assert comment["content"] == "nice"
    assert comment["author"]["username"] == "bob"
    assert comment["post_id"] == post_id

    client.post(f"{API}/posts/{post_id}/comments", json={"content": "thanks"}, headers=alice["headers"])

    listed = client.get(f"{API}/posts/{post_id}/comments").json()
    assert [c["content"] for c in listed["data"]] == ["nice", "thanks"]
    assert listed["pagination"]["total"] == 2
    assert client.get(f"{API}/posts/{post_id}").json()["data"]["comment_count"] == 2


def test_comment_validation(client, make_user):
    alice = make_user("alice")
    post_id = _post(client, alice).json()["data"]["id"]
    url = f"{API}/posts/{post_id}/comments"

    assert client.post(url, json={"content": "  "}, headers=alice["headers"]).status_code == 400
    too_long = client.post(url, json={"content": "y" * 201}, headers=alice["headers"])
    assert too_long.status_code == 400
    assert too_long.json()["error"] == "Comment must be 200 characters or less"
    assert client.post(url, json={"content": "hi"}).status_code == 401

    missing = client.post(f"{API}/posts/{uuid4()}/comments", json={"content": "hi"}, headers=alice["headers"])
    assert missing.status_code == 404
