"""Threads 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session
from typing import List, Literal

from forum.database import get_db
from forum.middleware.auth_middleware import get_current_user
from forum.models.user import User
from forum.schemas.forum import (
    PostCreate,
    PostOut,
    ThreadListOut,
    ThreadLockRequest,
    ThreadMoveRequest,
    ThreadOut,
    ThreadPostsOut,
    ThreadStickyRequest,
    ThreadUpdate,
)
from forum.services import post_service, thread_service

router = APIRouter(prefix="/api/threads", tags=["threads"])


@router.get("/recent", response_model=List[ThreadOut])
def recent_threads(limit: int = Query(10, ge=1, le=50), db: Session = Depends(get_db)):
    return thread_service.list_recent_threads(db, limit=limit)


@router.get("/popular", response_model=List[ThreadOut])
def popular_threads(
    period: Literal["day", "week", "month", "year"] = "week",
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
):
    return thread_service.list_popular_threads(db, period=period, limit=limit)


@router.get("/search", response_model=ThreadListOut)
def search_threads(
    q: str | None = Query(None, max_length=100),
    forum_id: int | None = Query(None, ge=1),
    author_id: int | None = Query(None, ge=1),
    tag: str | None = Query(None, max_length=50),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    db: Session = Depends(get_db),
):
    return thread_service.search_threads(
        db, query_text=q, forum_id=forum_id, author_id=author_id, tag=tag, page=page, limit=limit,
    )


@router.get("/{thread_id}", response_model=ThreadPostsOut)
def get_thread(
    thread_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    db: Session = Depends(get_db),
):
    thread_service.view_thread(db, thread_id)
    return post_service.list_thread_posts(db, thread_id, page=page, limit=limit)


@router.put("/{thread_id}", response_model=ThreadOut)
def update_thread(
    thread_id: int,
    data: ThreadUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return thread_service.update_thread(db, thread_id, data, current_user)


@router.patch("/{thread_id}/lock", response_model=ThreadOut)
def lock_thread(
    thread_id: int,
    data: ThreadLockRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return thread_service.set_locked(db, thread_id, data.is_locked, current_user)


@router.patch("/{thread_id}/sticky", response_model=ThreadOut)
def sticky_thread(
    thread_id: int,
    data: ThreadStickyRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return thread_service.set_sticky(db, thread_id, data.is_sticky, current_user)


@router.post("/{thread_id}/move", response_model=ThreadOut)
def move_thread(
    thread_id: int,
    data: ThreadMoveRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return thread_service.move_thread(db, thread_id, data.target_forum_id, current_user)


@router.delete("/{thread_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_thread(
    thread_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    thread_service.delete_thread(db, thread_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{thread_id}/posts", response_model=PostOut, status_code=status.HTTP_201_CREATED)
def create_post(
    thread_id: int,
    data: PostCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ip_address = request.client.host if request.client else None
    return post_service.create_post(db, thread_id, data, current_user, ip_address=ip_address)
