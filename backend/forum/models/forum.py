"""Forum / Thread / Post 도메인의 SQLAlchemy 모델 정의입니다.

카운터(thread_count, post_count)와 last_* 포인터는 조회 성능을 위한 비정규화 컬럼이며
forum.services.counter_service 를 통해서만 갱신합니다.
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index, Table, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from forum.database import Base


thread_tags = Table(
    "thread_tags",
    Base.metadata,
    Column("thread_id", Integer, ForeignKey("threads.thread_id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.tag_id", ondelete="CASCADE"), primary_key=True),
)


class Forum(Base):
    __tablename__ = "forums"

    forum_id = Column(Integer, primary_key=True, autoincrement=True)
    parent_id = Column(Integer, ForeignKey("forums.forum_id"), nullable=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(120), unique=True, nullable=False)
    description = Column(Text)
    display_order = Column(Integer, nullable=False, default=0)
    is_category = Column(Boolean, nullable=False, default=False)

    thread_count = Column(Integer, nullable=False, default=0)
    post_count = Column(Integer, nullable=False, default=0)
    last_thread_id = Column(Integer, nullable=True)
    last_thread_title = Column(String(200), nullable=True)
    last_post_id = Column(Integer, nullable=True)
    last_post_date = Column(DateTime, nullable=True)
    last_post_user_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    parent = relationship("Forum", remote_side=[forum_id], back_populates="subforums")
    subforums = relationship("Forum", back_populates="parent", order_by="Forum.display_order")
    threads = relationship("Thread", back_populates="forum", cascade="all, delete-orphan")


class Thread(Base):
    __tablename__ = "threads"

    thread_id = Column(Integer, primary_key=True, autoincrement=True)
    forum_id = Column(Integer, ForeignKey("forums.forum_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    title = Column(String(200), nullable=False)
    slug = Column(String(220), nullable=False)
    is_sticky = Column(Boolean, nullable=False, default=False)
    is_locked = Column(Boolean, nullable=False, default=False)
    views = Column(Integer, nullable=False, default=0)

    post_count = Column(Integer, nullable=False, default=0)
    last_post_id = Column(Integer, nullable=True)
    last_post_date = Column(DateTime, nullable=True)
    last_post_user_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    forum = relationship("Forum", back_populates="threads")
    author = relationship("User", back_populates="threads")
    posts = relationship("Post", back_populates="thread", order_by="Post.post_id", cascade="all, delete-orphan")
    tags = relationship("Tag", secondary=thread_tags, back_populates="threads", order_by="Tag.name")

    __table_args__ = (
        Index("idx_thread_forum_updated", "forum_id", "updated_at"),
    )


class Post(Base):
    __tablename__ = "posts"

    post_id = Column(Integer, primary_key=True, autoincrement=True)
    thread_id = Column(Integer, ForeignKey("threads.thread_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    content = Column(Text, nullable=False)
    is_first_post = Column(Boolean, nullable=False, default=False)
    is_edited = Column(Boolean, nullable=False, default=False)
    edited_at = Column(DateTime, nullable=True)
    edited_by = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    like_count = Column(Integer, nullable=False, default=0)
    ip_address = Column(String(45), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    thread = relationship("Thread", back_populates="posts")
    author = relationship("User", back_populates="posts", foreign_keys=[user_id])
    editor = relationship("User", foreign_keys=[edited_by])
    likes = relationship("PostLike", back_populates="post", cascade="all, delete-orphan")
    reports = relationship("PostReport", back_populates="post", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_post_thread_created", "thread_id", "created_at"),
    )


class PostLike(Base):
    __tablename__ = "post_likes"

    like_id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.post_id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    post = relationship("Post", back_populates="likes")

    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_post_like_post_user"),
        Index("idx_post_like_user", "user_id"),
    )


class PostReport(Base):
    __tablename__ = "post_reports"

    report_id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.post_id", ondelete="CASCADE"), nullable=False)
    reporter_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending / resolved / dismissed
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    post = relationship("Post", back_populates="reports")
    reporter = relationship("User", foreign_keys=[reporter_id])

    __table_args__ = (
        Index("idx_post_report_status", "status", "created_at"),
    )


class Tag(Base):
    __tablename__ = "tags"

    tag_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    threads = relationship("Thread", secondary=thread_tags, back_populates="tags")
