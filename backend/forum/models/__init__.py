"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from forum.models.user import User, UserGroup
from forum.models.forum import Forum, Thread, Post, PostLike, PostReport, Tag, thread_tags
from forum.models.message import Message, MessageFolder

__all__ = [
    "User", "UserGroup",
    "Forum", "Thread", "Post", "PostLike", "PostReport", "Tag", "thread_tags",
    "Message", "MessageFolder",
]
