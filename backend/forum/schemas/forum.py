"""Forum / Thread / Post 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional
from datetime import datetime


class ForumBase(BaseModel):
    name: str
    description: Optional[str] = None
    parent_id: Optional[int] = None
    display_order: int = 0
    is_category: bool = False


class ForumCreate(ForumBase):
    pass


class ForumUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[int] = None
    display_order: Optional[int] = None


class ForumOut(ForumBase):
    forum_id: int
    slug: str
    thread_count: int
    post_count: int
    last_thread_id: Optional[int] = None
    last_thread_title: Optional[str] = None
    last_post_id: Optional[int] = None
    last_post_date: Optional[datetime] = None
    last_post_user_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ForumTreeOut(ForumOut):
    subforums: List[ForumTreeOut] = []


class TagOut(BaseModel):
    tag_id: int
    name: str

    model_config = {"from_attributes": True}


class ThreadCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str
    tags: List[str] = []


class ThreadUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    tags: Optional[List[str]] = None


class ThreadLockRequest(BaseModel):
    is_locked: bool


class ThreadStickyRequest(BaseModel):
    is_sticky: bool


class ThreadMoveRequest(BaseModel):
    target_forum_id: int


class ThreadOut(BaseModel):
    thread_id: int
    forum_id: int
    user_id: int
    title: str
    slug: str
    is_sticky: bool
    is_locked: bool
    views: int
    post_count: int
    last_post_id: Optional[int] = None
    last_post_date: Optional[datetime] = None
    last_post_user_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    author_name: Optional[str] = None
    tags: List[TagOut] = []

    model_config = {"from_attributes": True}


class ThreadListOut(BaseModel):
    threads: List[ThreadOut]
    pagination: Dict[str, int]


class ForumDetailOut(BaseModel):
    forum: ForumTreeOut
    threads: List[ThreadOut]
    pagination: Dict[str, int]


class PostCreate(BaseModel):
    content: str


class PostUpdate(BaseModel):
    content: str


class PostOut(BaseModel):
    post_id: int
    thread_id: int
    user_id: int
    content: str
    is_first_post: bool
    is_edited: bool
    edited_at: Optional[datetime] = None
    edited_by: Optional[int] = None
    like_count: int = 0
    created_at: datetime
    author_name: Optional[str] = None

    model_config = {"from_attributes": True}


class ThreadPostsOut(BaseModel):
    thread: ThreadOut
    posts: List[PostOut]
    pagination: Dict[str, int]


class PostLikeOut(BaseModel):
    post_id: int
    like_count: int
    has_liked: bool


class PostReportCreate(BaseModel):
    reason: str


class PostReportOut(BaseModel):
    report_id: int
    post_id: int
    reporter_id: int
    reason: str
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class PostDeleteOut(BaseModel):
    outcome: Literal["post_deleted", "thread_deleted"]
    post_id: int
    thread_id: int
    forum_id: int
    is_thread_deleted: bool
    message: str


ForumTreeOut.model_rebuild()
