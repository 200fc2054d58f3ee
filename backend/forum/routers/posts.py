"""Posts 기능 API 라우터입니다. 게시글 수정/삭제와 좋아요, 신고를 제공합니다."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from forum.database import get_db
from forum.middleware.auth_middleware import get_current_user
from forum.models.user import User
from forum.schemas.forum import (
    PostDeleteOut,
    PostLikeOut,
    PostOut,
    PostReportCreate,
    PostReportOut,
    PostUpdate,
)
from forum.services import post_service

router = APIRouter(prefix="/api/posts", tags=["posts"])


@router.put("/{post_id}", response_model=PostOut)
def update_post(
    post_id: int,
    data: PostUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return post_service.update_post(db, post_id, data, current_user)


@router.delete("/{post_id}", response_model=PostDeleteOut)
def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    outcome = post_service.delete_post(db, post_id, current_user)
    thread_deleted = isinstance(outcome, post_service.ThreadDeleted)
    return PostDeleteOut(
        outcome=outcome.outcome,
        post_id=outcome.post_id,
        thread_id=outcome.thread_id,
        forum_id=outcome.forum_id,
        is_thread_deleted=thread_deleted,
        message="스레드가 삭제되었습니다." if thread_deleted else "게시글이 삭제되었습니다.",
    )


@router.post("/{post_id}/like", response_model=PostLikeOut)
def toggle_like(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return post_service.toggle_like(db, post_id, current_user)


@router.post("/{post_id}/report", response_model=PostReportOut, status_code=status.HTTP_201_CREATED)
def report_post(
    post_id: int,
    data: PostReportCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return post_service.report_post(db, post_id, data.reason, current_user)
