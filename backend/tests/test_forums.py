from forum.models.forum import Post, Thread
from tests.conftest import auth_headers, create_post, create_thread


def test_forum_tree_is_public_and_nested(client, seed_forums):
    resp = client.get("/api/forums")
    assert resp.status_code == 200
    roots = resp.json()
    assert [f["name"] for f in roots] == ["일반"]
    assert roots[0]["is_category"] is True
    assert [f["name"] for f in roots[0]["subforums"]] == ["자유 토론", "질문 답변"]


def test_create_forum_and_category(client, seed_users):
    headers = auth_headers(client, "admin")
    category = client.post("/api/forums", json={"name": "Community", "is_category": True}, headers=headers)
    assert category.status_code == 201, category.text
    assert category.json()["slug"] == "community"

    forum = client.post(
        "/api/forums",
        json={"name": "Community", "parent_id": category.json()["forum_id"], "description": "잡담"},
        headers=headers,
    )
    assert forum.status_code == 201
    assert forum.json()["slug"] == "community-2"
    assert forum.json()["parent_id"] == category.json()["forum_id"]


def test_create_forum_requires_permission(client, seed_users):
    resp = client.post("/api/forums", json={"name": "Nope forum"}, headers=auth_headers(client, "moderator"))
    assert resp.status_code == 403


def test_create_forum_name_too_short(client, seed_users):
    resp = client.post("/api/forums", json={"name": "ab"}, headers=auth_headers(client, "admin"))
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["details"][0]["field"] == "name"


def test_create_forum_unknown_parent(client, seed_users):
    resp = client.post("/api/forums", json={"name": "Orphan", "parent_id": 999}, headers=auth_headers(client, "admin"))
    assert resp.status_code == 404


def test_update_forum_rejects_cycle(client, seed_forums):
    headers = auth_headers(client, "admin")
    category_id = seed_forums["category"].forum_id
    talk_id = seed_forums["talk"].forum_id
    resp = client.put(f"/api/forums/{category_id}", json={"parent_id": talk_id}, headers=headers)
    assert resp.status_code == 400
    self_parent = client.put(f"/api/forums/{talk_id}", json={"parent_id": talk_id}, headers=headers)
    assert self_parent.status_code == 400


def test_update_forum_renames_and_reslugs(client, seed_forums):
    headers = auth_headers(client, "admin")
    resp = client.put(
        f"/api/forums/{seed_forums['talk'].forum_id}",
        json={"name": "Open Talk", "display_order": 5},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["slug"] == "open-talk"
    assert resp.json()["display_order"] == 5


def test_forum_detail_lists_sticky_first(client, seed_forums):
    member = auth_headers(client, "member")
    forum_id = seed_forums["talk"].forum_id
    pinned = create_thread(client, member, forum_id, title="고정될 스레드")
    create_thread(client, member, forum_id, title="최신 스레드")
    client.patch(f"/api/threads/{pinned['thread_id']}/sticky", json={"is_sticky": True}, headers=auth_headers(client, "moderator"))

    resp = client.get(f"/api/forums/{forum_id}")
    assert resp.status_code == 200
    body = resp.json()
    assert [t["title"] for t in body["threads"]] == ["고정될 스레드", "최신 스레드"]
    assert body["pagination"] == {"total": 2, "page": 1, "pages": 1}
    assert body["forum"]["thread_count"] == 2
    assert body["threads"][0]["author_name"] == "member"


def test_forum_detail_pagination(client, seed_forums):
    member = auth_headers(client, "member")
    forum_id = seed_forums["talk"].forum_id
    for i in range(3):
        create_thread(client, member, forum_id, title=f"스레드 {i}")
    resp = client.get(f"/api/forums/{forum_id}", params={"page": 2, "limit": 2})
    body = resp.json()
    assert len(body["threads"]) == 1
    assert body["pagination"] == {"total": 3, "page": 2, "pages": 2}


def test_forum_not_found(client, seed_users):
    assert client.get("/api/forums/999").status_code == 404


def test_delete_forum_with_subforums_refused(client, seed_forums):
    resp = client.delete(f"/api/forums/{seed_forums['category'].forum_id}", headers=auth_headers(client, "admin"))
    assert resp.status_code == 400


def test_delete_forum_removes_threads_and_posts(client, db, seed_forums):
    member = auth_headers(client, "member")
    forum_id = seed_forums["help"].forum_id
    thread = create_thread(client, member, forum_id)
    create_post(client, auth_headers(client, "other"), thread["thread_id"])

    resp = client.delete(f"/api/forums/{forum_id}", headers=auth_headers(client, "admin"))
    assert resp.status_code == 204
    assert client.get(f"/api/forums/{forum_id}").status_code == 404
    db.expire_all()
    assert db.query(Thread).filter(Thread.thread_id == thread["thread_id"]).count() == 0
    assert db.query(Post).filter(Post.thread_id == thread["thread_id"]).count() == 0


def test_cannot_create_thread_in_category(client, seed_forums):
    resp = client.post(
        f"/api/forums/{seed_forums['category'].forum_id}/threads",
        json={"title": "카테고리 글", "content": "카테고리에는 쓸 수 없습니다."},
        headers=auth_headers(client, "member"),
    )
    assert resp.status_code == 400
