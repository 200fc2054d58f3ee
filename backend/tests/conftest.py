import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from forum.database import Base, get_db
from forum.main import app
from forum.models.user import User, UserGroup
from forum.models.forum import Forum
from forum.services import group_service
from forum.services.auth_service import hash_password

TEST_DB_URL = "sqlite:///./test_forum.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "password123"
_PASSWORD_HASH = hash_password(PASSWORD)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_groups(db):
    group_service.seed_default_groups(db)
    return {g.name: g for g in db.query(UserGroup).all()}


@pytest.fixture
def seed_users(db, seed_groups):
    users = {
        "admin": User(username="admin", email="admin@example.com", group_id=seed_groups["administrator"].group_id),
        "moderator": User(username="moderator", email="mod@example.com", group_id=seed_groups["moderator"].group_id),
        "member": User(username="member", email="member@example.com", group_id=seed_groups["member"].group_id),
        "other": User(username="other", email="other@example.com", group_id=seed_groups["member"].group_id),
        "guest": User(username="guest", email="guest@example.com", group_id=seed_groups["guest"].group_id),
    }
    for u in users.values():
        u.password_hash = _PASSWORD_HASH
        u.is_active = True
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


@pytest.fixture
def seed_forums(db, seed_users):
    category = Forum(name="일반", slug="general", description="일반 카테고리", is_category=True, display_order=0)
    db.add(category)
    db.flush()
    forums = {
        "category": category,
        "talk": Forum(name="자유 토론", slug="talk", parent_id=category.forum_id, display_order=1),
        "help": Forum(name="질문 답변", slug="help", parent_id=category.forum_id, display_order=2),
    }
    db.add(forums["talk"])
    db.add(forums["help"])
    db.commit()
    for f in forums.values():
        db.refresh(f)
    return forums


def get_token(client, username: str, password: str = PASSWORD) -> str:
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, username: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, username)}"}


def create_thread(client, headers: dict, forum_id: int, title: str = "첫 번째 스레드", content: str = "스레드 본문 내용입니다."):
    resp = client.post(
        f"/api/forums/{forum_id}/threads",
        json={"title": title, "content": content},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_post(client, headers: dict, thread_id: int, content: str = "답글 내용입니다. 충분히 깁니다."):
    resp = client.post(f"/api/threads/{thread_id}/posts", json={"content": content}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
