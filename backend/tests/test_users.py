from forum.models.user import User
from tests.conftest import auth_headers, create_thread


def test_list_users_requires_view_permission(client, seed_users):
    resp = client.get("/api/users", headers=auth_headers(client, "member"))
    assert resp.status_code == 403


def test_list_users_with_search(client, seed_users):
    headers = auth_headers(client, "moderator")
    resp = client.get("/api/users", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["pagination"]["total"] == len(seed_users)

    searched = client.get("/api/users", params={"q": "memb"}, headers=headers)
    assert [u["username"] for u in searched.json()["users"]] == ["member"]


def test_profile_by_id_and_username(client, seed_users, seed_forums):
    create_thread(client, auth_headers(client, "member"), seed_forums["talk"].forum_id, title="프로필 스레드")
    by_name = client.get("/api/users/member")
    assert by_name.status_code == 200
    body = by_name.json()
    assert body["user"]["username"] == "member"
    assert "email" not in body["user"]
    assert [t["title"] for t in body["recent_threads"]] == ["프로필 스레드"]
    assert len(body["recent_posts"]) == 1

    by_id = client.get(f"/api/users/{seed_users['member'].user_id}")
    assert by_id.json()["user"]["username"] == "member"

    assert client.get("/api/users/nobody").status_code == 404


def test_update_own_profile(client, seed_users):
    headers = auth_headers(client, "member")
    resp = client.put("/api/users/me/profile", json={"signature": "  안녕하세요  ", "about": "소개"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["signature"] == "안녕하세요"
    assert resp.json()["about"] == "소개"


def test_update_profile_signature_too_long(client, seed_users):
    headers = auth_headers(client, "member")
    resp = client.put("/api/users/me/profile", json={"signature": "x" * 501}, headers=headers)
    assert resp.status_code == 400


def test_guest_cannot_edit_profile(client, seed_users):
    resp = client.put("/api/users/me/profile", json={"about": "hi"}, headers=auth_headers(client, "guest"))
    assert resp.status_code == 403


def test_ban_and_unban(client, db, seed_users):
    admin_headers = auth_headers(client, "admin")
    member_id = seed_users["member"].user_id

    banned = client.post(f"/api/users/{member_id}/ban", json={"reason": "도배", "duration_days": 3}, headers=admin_headers)
    assert banned.status_code == 200
    assert banned.json()["is_banned"] is True
    assert banned.json()["ban_expires_at"] is not None
    assert client.post("/api/auth/login", json={"username": "member", "password": "password123"}).status_code == 401

    unbanned = client.post(f"/api/users/{member_id}/unban", headers=admin_headers)
    assert unbanned.status_code == 200
    assert unbanned.json()["is_banned"] is False
    assert client.post("/api/auth/login", json={"username": "member", "password": "password123"}).status_code == 200


def test_ban_requires_permission(client, seed_users):
    resp = client.post(
        f"/api/users/{seed_users['other'].user_id}/ban",
        json={"reason": "x"},
        headers=auth_headers(client, "moderator"),
    )
    assert resp.status_code == 403


def test_administrators_cannot_be_banned(client, db, seed_groups, seed_users):
    second_admin = User(
        username="admin2", email="admin2@example.com", password_hash=seed_users["admin"].password_hash,
        group_id=seed_groups["administrator"].group_id,
    )
    db.add(second_admin)
    db.commit()
    resp = client.post(f"/api/users/{second_admin.user_id}/ban", json={}, headers=auth_headers(client, "admin"))
    assert resp.status_code == 403


def test_change_group(client, seed_groups, seed_users):
    resp = client.put(
        f"/api/users/{seed_users['member'].user_id}/group",
        json={"group_id": seed_groups["moderator"].group_id},
        headers=auth_headers(client, "admin"),
    )
    assert resp.status_code == 200
    assert resp.json()["group_name"] == "moderator"


def test_change_group_requires_permission(client, seed_groups, seed_users):
    resp = client.put(
        f"/api/users/{seed_users['member'].user_id}/group",
        json={"group_id": seed_groups["administrator"].group_id},
        headers=auth_headers(client, "moderator"),
    )
    assert resp.status_code == 403


def test_admin_cannot_demote_self(client, seed_groups, seed_users):
    headers = auth_headers(client, "admin")
    resp = client.put(
        f"/api/users/{seed_users['admin'].user_id}/group",
        json={"group_id": seed_groups["member"].group_id},
        headers=headers,
    )
    assert resp.status_code == 403
    me = client.get("/api/auth/me", headers=headers)
    assert me.json()["group_name"] == "administrator"


def test_user_search_treats_wildcards_literally(client, seed_users):
    headers = auth_headers(client, "moderator")
    for pattern in ("%", "_"):
        resp = client.get("/api/users", params={"q": pattern}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["pagination"]["total"] == 0
