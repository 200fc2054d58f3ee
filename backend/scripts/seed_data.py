"""Seed the database with sample forums, users, threads and posts."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from forum.database import SessionLocal, engine, Base
import forum.models  # noqa: F401

from forum.models.forum import Forum
from forum.models.user import User
from forum.schemas.forum import PostCreate, ThreadCreate
from forum.services import group_service, post_service, thread_service
from forum.services.auth_service import hash_password

SAMPLE_PASSWORD = "password123"


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        group_service.seed_default_groups(db)
        groups = {g.name: g for g in group_service.list_groups(db)}

        # Users
        password_hash = hash_password(SAMPLE_PASSWORD)
        users = [
            User(username="admin", email="admin@example.com", group_id=groups["administrator"].group_id),
            User(username="moderator", email="moderator@example.com", group_id=groups["moderator"].group_id),
            User(username="alice", email="alice@example.com", group_id=groups["member"].group_id,
                 signature="파이썬을 좋아합니다."),
            User(username="bob", email="bob@example.com", group_id=groups["member"].group_id),
        ]
        for user in users:
            user.password_hash = password_hash
        db.add_all(users)
        db.flush()

        # Forum tree
        general = Forum(name="일반", slug="general", description="일반 카테고리", is_category=True, display_order=0)
        support = Forum(name="지원", slug="support", description="지원 카테고리", is_category=True, display_order=1)
        db.add_all([general, support])
        db.flush()
        forums = [
            Forum(name="공지사항", slug="announcements", parent_id=general.forum_id, display_order=0),
            Forum(name="자유 토론", slug="talk", parent_id=general.forum_id, display_order=1),
            Forum(name="질문 답변", slug="help", parent_id=support.forum_id, display_order=0),
        ]
        db.add_all(forums)
        db.commit()

        # Threads / replies
        admin, _, alice, bob = users
        notice = thread_service.create_thread(
            db, forums[0].forum_id,
            ThreadCreate(title="포럼 이용 안내", content="포럼 이용 규칙을 확인해 주세요."),
            admin,
        )
        thread_service.set_sticky(db, notice.thread_id, True, admin)
        question = thread_service.create_thread(
            db, forums[2].forum_id,
            ThreadCreate(title="SQLAlchemy 세션 질문", content="세션은 언제 닫아야 하나요? 요청 단위인가요?", tags=["sqlalchemy", "fastapi"]),
            alice,
        )
        answer = post_service.create_post(
            db, question.thread_id,
            PostCreate(content="FastAPI 의존성에서 요청마다 열고 닫으면 됩니다."),
            bob,
        )
        post_service.toggle_like(db, answer.post_id, alice)

        print("Seed data created successfully.")
        print(f"  Users: {len(users)} (password: {SAMPLE_PASSWORD})")
        print(f"  Forums: {db.query(Forum).count()}")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
