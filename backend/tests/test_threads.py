from datetime import datetime, timedelta

from forum.models.forum import Tag, Thread
from tests.conftest import auth_headers, create_post, create_thread


def test_create_thread_requires_auth(client, seed_forums):
    resp = client.post(
        f"/api/forums/{seed_forums['talk'].forum_id}/threads",
        json={"title": "익명", "content": "로그인 없이 작성 시도"},
    )
    assert resp.status_code in (401, 403)


def test_guest_group_cannot_create_thread(client, seed_forums):
    resp = client.post(
        f"/api/forums/{seed_forums['talk'].forum_id}/threads",
        json={"title": "게스트", "content": "게스트는 작성할 수 없습니다."},
        headers=auth_headers(client, "guest"),
    )
    assert resp.status_code == 403


def test_create_thread_validates_content_length(client, seed_forums):
    resp = client.post(
        f"/api/forums/{seed_forums['talk'].forum_id}/threads",
        json={"title": "짧은 글", "content": "짧다"},
        headers=auth_headers(client, "member"),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["details"][0]["field"] == "content"


def test_create_thread_sets_counters(client, seed_forums):
    thread = create_thread(client, auth_headers(client, "member"), seed_forums["talk"].forum_id, title="Hello World")
    assert thread["post_count"] == 1
    assert thread["slug"] == "hello-world"
    assert thread["author_name"] == "member"
    assert thread["last_post_id"] is not None


def test_get_thread_increments_views_and_lists_posts(client, seed_forums):
    member = auth_headers(client, "member")
    thread = create_thread(client, member, seed_forums["talk"].forum_id)
    create_post(client, auth_headers(client, "other"), thread["thread_id"])

    first = client.get(f"/api/threads/{thread['thread_id']}")
    second = client.get(f"/api/threads/{thread['thread_id']}")
    assert first.status_code == 200
    assert first.json()["thread"]["views"] == 1
    assert second.json()["thread"]["views"] == 2
    posts = second.json()["posts"]
    assert [p["is_first_post"] for p in posts] == [True, False]
    assert [p["author_name"] for p in posts] == ["member", "other"]


def test_get_thread_not_found(client, seed_users):
    assert client.get("/api/threads/999").status_code == 404


def test_update_thread_title_owner_and_moderator(client, seed_forums):
    thread = create_thread(client, auth_headers(client, "member"), seed_forums["talk"].forum_id)
    url = f"/api/threads/{thread['thread_id']}"

    denied = client.put(url, json={"title": "남의 스레드"}, headers=auth_headers(client, "other"))
    assert denied.status_code == 403

    own = client.put(url, json={"title": "Renamed Thread"}, headers=auth_headers(client, "member"))
    assert own.status_code == 200
    assert own.json()["slug"] == "renamed-thread"

    moderated = client.put(url, json={"title": "Moderated"}, headers=auth_headers(client, "moderator"))
    assert moderated.status_code == 200

    forum = client.get(f"/api/forums/{seed_forums['talk'].forum_id}").json()["forum"]
    assert forum["last_thread_title"] == "Moderated"


def test_lock_requires_moderation_and_blocks_replies(client, seed_forums):
    thread = create_thread(client, auth_headers(client, "member"), seed_forums["talk"].forum_id)
    url = f"/api/threads/{thread['thread_id']}/lock"

    assert client.patch(url, json={"is_locked": True}, headers=auth_headers(client, "member")).status_code == 403
    locked = client.patch(url, json={"is_locked": True}, headers=auth_headers(client, "moderator"))
    assert locked.status_code == 200
    assert locked.json()["is_locked"] is True

    reply = client.post(
        f"/api/threads/{thread['thread_id']}/posts",
        json={"content": "잠긴 스레드에 답글"},
        headers=auth_headers(client, "other"),
    )
    assert reply.status_code == 403

    admin_reply = client.post(
        f"/api/threads/{thread['thread_id']}/posts",
        json={"content": "관리자는 잠긴 스레드에도 씁니다"},
        headers=auth_headers(client, "admin"),
    )
    assert admin_reply.status_code == 201


def test_sticky_requires_pin_permission(client, seed_forums):
    thread = create_thread(client, auth_headers(client, "member"), seed_forums["talk"].forum_id)
    url = f"/api/threads/{thread['thread_id']}/sticky"
    assert client.patch(url, json={"is_sticky": True}, headers=auth_headers(client, "member")).status_code == 403
    resp = client.patch(url, json={"is_sticky": True}, headers=auth_headers(client, "moderator"))
    assert resp.json()["is_sticky"] is True


def test_move_thread(client, seed_forums):
    talk_id, help_id = seed_forums["talk"].forum_id, seed_forums["help"].forum_id
    thread = create_thread(client, auth_headers(client, "member"), talk_id)
    url = f"/api/threads/{thread['thread_id']}/move"

    assert client.post(url, json={"target_forum_id": help_id}, headers=auth_headers(client, "member")).status_code == 403

    moderator = auth_headers(client, "moderator")
    assert client.post(url, json={"target_forum_id": talk_id}, headers=moderator).status_code == 400
    assert client.post(url, json={"target_forum_id": 999}, headers=moderator).status_code == 404
    category_id = seed_forums["category"].forum_id
    assert client.post(url, json={"target_forum_id": category_id}, headers=moderator).status_code == 400

    moved = client.post(url, json={"target_forum_id": help_id}, headers=moderator)
    assert moved.status_code == 200
    assert moved.json()["forum_id"] == help_id

    talk = client.get(f"/api/forums/{talk_id}").json()["forum"]
    help_forum = client.get(f"/api/forums/{help_id}").json()["forum"]
    assert talk["thread_count"] == 0
    assert talk["last_thread_id"] is None
    assert help_forum["thread_count"] == 1
    assert help_forum["last_thread_id"] == thread["thread_id"]


def test_delete_thread_owner_or_permission(client, seed_forums):
    member = auth_headers(client, "member")
    forum_id = seed_forums["talk"].forum_id
    first = create_thread(client, member, forum_id, title="첫 스레드")
    second = create_thread(client, member, forum_id, title="둘째 스레드")

    assert client.delete(f"/api/threads/{first['thread_id']}", headers=auth_headers(client, "other")).status_code == 403
    assert client.delete(f"/api/threads/{first['thread_id']}", headers=auth_headers(client, "moderator")).status_code == 403
    assert client.delete(f"/api/threads/{second['thread_id']}", headers=member).status_code == 204
    assert client.delete(f"/api/threads/{first['thread_id']}", headers=auth_headers(client, "admin")).status_code == 204

    forum = client.get(f"/api/forums/{forum_id}").json()["forum"]
    assert forum["thread_count"] == 0
    assert forum["post_count"] == 0
    assert forum["last_thread_id"] is None


def test_recent_and_search(client, seed_forums):
    member = auth_headers(client, "member")
    other = auth_headers(client, "other")
    create_thread(client, member, seed_forums["talk"].forum_id, title="Python 질문", content="파이썬 문법에 대해 묻습니다.")
    create_thread(client, other, seed_forums["help"].forum_id, title="일상 이야기", content="오늘은 Python 모임이 있었습니다.")

    recent = client.get("/api/threads/recent", params={"limit": 1})
    assert [t["title"] for t in recent.json()] == ["일상 이야기"]

    by_text = client.get("/api/threads/search", params={"q": "python"}).json()
    assert {t["title"] for t in by_text["threads"]} == {"Python 질문", "일상 이야기"}

    by_forum = client.get("/api/threads/search", params={"forum_id": seed_forums["talk"].forum_id}).json()
    assert [t["title"] for t in by_forum["threads"]] == ["Python 질문"]

    by_author = client.get("/api/threads/search", params={"author_id": 999}).json()
    assert by_author["threads"] == []
    assert by_author["pagination"]["total"] == 0


def test_search_treats_wildcards_literally(client, seed_forums):
    member = auth_headers(client, "member")
    create_thread(client, member, seed_forums["talk"].forum_id, title="목표 100% 달성")
    create_thread(client, member, seed_forums["talk"].forum_id, title="일반 제목")

    percent = client.get("/api/threads/search", params={"q": "%"}).json()
    assert [t["title"] for t in percent["threads"]] == ["목표 100% 달성"]

    underscore = client.get("/api/threads/search", params={"q": "_"}).json()
    assert underscore["pagination"]["total"] == 0


def test_thread_tags_create_update_and_filter(client, db, seed_forums):
    member = auth_headers(client, "member")
    resp = client.post(
        f"/api/forums/{seed_forums['talk'].forum_id}/threads",
        json={"title": "태그 스레드", "content": "태그가 붙은 스레드입니다.", "tags": [" Python ", "python", "FastAPI", ""]},
        headers=member,
    )
    assert resp.status_code == 201, resp.text
    thread = resp.json()
    assert [t["name"] for t in thread["tags"]] == ["fastapi", "python"]
    create_thread(client, member, seed_forums["help"].forum_id, title="태그 없는 스레드")

    tagged = client.get("/api/threads/search", params={"tag": "PYTHON"}).json()
    assert [t["title"] for t in tagged["threads"]] == ["태그 스레드"]

    url = f"/api/threads/{thread['thread_id']}"
    assert client.put(url, json={}, headers=member).status_code == 400
    updated = client.put(url, json={"tags": ["orm", "python"]}, headers=member)
    assert updated.status_code == 200, updated.text
    assert updated.json()["title"] == "태그 스레드"
    assert [t["name"] for t in updated.json()["tags"]] == ["orm", "python"]
    assert db.query(Tag).count() == 3

    assert client.get("/api/threads/search", params={"tag": "fastapi"}).json()["threads"] == []


def test_too_many_tags_rejected(client, seed_forums):
    resp = client.post(
        f"/api/forums/{seed_forums['talk'].forum_id}/threads",
        json={"title": "태그 과다", "content": "태그가 너무 많습니다.", "tags": [f"tag{i}" for i in range(11)]},
        headers=auth_headers(client, "member"),
    )
    assert resp.status_code == 400


def test_popular_threads_ranked_by_views_and_replies(client, db, seed_forums):
    member = auth_headers(client, "member")
    other = auth_headers(client, "other")
    forum_id = seed_forums["talk"].forum_id
    quiet = create_thread(client, member, forum_id, title="조용한 스레드")
    busy = create_thread(client, member, forum_id, title="답글 많은 스레드")
    create_post(client, other, busy["thread_id"])
    create_post(client, other, busy["thread_id"])
    viewed = create_thread(client, member, forum_id, title="조회 많은 스레드")
    old = create_thread(client, member, forum_id, title="오래된 스레드")

    db.query(Thread).filter(Thread.thread_id == viewed["thread_id"]).update({"views": 7})
    db.query(Thread).filter(Thread.thread_id == old["thread_id"]).update(
        {"views": 100, "created_at": datetime.utcnow() - timedelta(days=10)}
    )
    db.commit()

    week = client.get("/api/threads/popular").json()
    assert [t["thread_id"] for t in week] == [busy["thread_id"], viewed["thread_id"], quiet["thread_id"]]

    month = client.get("/api/threads/popular", params={"period": "month", "limit": 1}).json()
    assert [t["thread_id"] for t in month] == [old["thread_id"]]

    assert client.get("/api/threads/popular", params={"period": "decade"}).status_code == 422
