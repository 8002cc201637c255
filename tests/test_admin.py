"""Admin dashboard access control and user management."""
from datetime import date

from sqlalchemy import update

from app.models.user import User
from conftest import API, login


def _promote(run_db, username):
    async def promote(session):
        await session.execute(update(User).where(User.username == username).values(role="admin"))

    run_db(promote)


def test_admin_routes_require_admin(client, make_user):
    assert client.get(f"{API}/admin/stats").status_code == 401
    alice = make_user("alice")
    resp = client.get(f"{API}/admin/stats", headers=alice["headers"])
    assert resp.status_code == 403
    assert resp.json() == {"success": False, "error": "Admin access required"}
    assert client.get(f"{API}/admin/users", headers=alice["headers"]).status_code == 403


def test_role_is_read_from_database(client, make_user, run_db):
    root = make_user("root")
    # Token was minted while the account was a plain user
    _promote(run_db, "root")
    assert client.get(f"{API}/admin/stats", headers=root["headers"]).status_code == 200


def test_stats(client, make_user, run_db):
    root = make_user("root")
    alice = make_user("alice")
    _promote(run_db, "root")
    post_id = client.post(f"{API}/posts", json={"content": "hi"}, headers=alice["headers"]).json()["data"]["id"]
    client.post(f"{API}/posts/{post_id}/like", headers=root["headers"])
    client.post(f"{API}/posts/{post_id}/comments", json={"content": "c"}, headers=root["headers"])

    data = client.get(f"{API}/admin/stats", headers=root["headers"]).json()["data"]
    assert data["total"] == {"users": 2, "posts": 1, "comments": 1, "likes": 1}
    assert data["today"] == {"users": 2, "posts": 1, "comments": 1, "likes": 1}
    assert data["active_users"] == 2


def test_growth_is_zero_filled(client, make_user, run_db):
    root = make_user("root")
    _promote(run_db, "root")
    data = client.get(f"{API}/admin/growth", params={"days": 5}, headers=root["headers"]).json()["data"]
    assert len(data) == 5
    assert sum(item["users"] for item in data) == 1
    assert data[-1]["users"] == 1
    assert [item["date"] for item in data] == sorted(item["date"] for item in data)
    assert date.fromisoformat(data[-1]["date"])


def test_list_users_with_search(client, make_user, run_db):
    root = make_user("root")
    make_user("alice")
    make_user("alfred")
    make_user("bob")
    _promote(run_db, "root")

    everyone = client.get(f"{API}/admin/users", headers=root["headers"]).json()
    assert everyone["pagination"]["total"] == 4
    assert "password_hash" not in everyone["data"][0]

    found = client.get(f"{API}/admin/users", params={"search": "AL"}, headers=root["headers"]).json()
    assert {u["username"] for u in found["data"]} == {"alice", "alfred"}
    assert found["pagination"]["total"] == 2


def test_deactivate_user(client, make_user, run_db):
    root = make_user("root")
    alice = make_user("alice")
    _promote(run_db, "root")

    resp = client.patch(
        f"{API}/admin/users/{alice['id']}/active", json={"is_active": False}, headers=root["headers"]
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["is_active"] is False

    assert client.get(f"{API}/auth/me", headers=alice["headers"]).status_code == 401
    assert login(client, "alice").status_code == 401
    assert client.post(f"{API}/auth/refresh", json={"refresh_token": alice["refresh_token"]}).status_code == 401

    client.patch(f"{API}/admin/users/{alice['id']}/active", json={"is_active": True}, headers=root["headers"])
    assert login(client, "alice").status_code == 200


def test_admin_cannot_deactivate_self(client, make_user, run_db):
    root = make_user("root")
    _promote(run_db, "root")
    resp = client.patch(f"{API}/admin/users/{root['id']}/active", json={"is_active": False}, headers=root["headers"])
    assert resp.status_code == 400
