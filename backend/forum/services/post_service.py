"""Post Service 도메인 서비스 레이어입니다. 게시글 작성/수정/삭제와 스레드·포럼 카운터 갱신을 담당합니다."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Union

from sqlalchemy.orm import Session

from forum.config import settings
from forum.database import transaction
from forum.models.forum import Post, PostLike, PostReport
from forum.models.user import User
from forum.schemas.forum import PostCreate, PostUpdate
from forum.services import counter_service, forum_service, thread_service
from forum.utils.errors import AuthorizationError, NotFoundError, ValidationError
from forum.utils.helpers import clamp_page, pagination_meta
from forum.utils.permissions import Permission, ensure_owner_or_permission, require_permission

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostDeleted:
    post_id: int
    thread_id: int
    forum_id: int
    outcome: str = "post_deleted"


@dataclass(frozen=True)
class ThreadDeleted:
    post_id: int
    thread_id: int
    forum_id: int
    outcome: str = "thread_deleted"


DeleteOutcome = Union[PostDeleted, ThreadDeleted]


def get_post(db: Session, post_id: int) -> Post:
    post = db.query(Post).filter(Post.post_id == post_id).first()
    if not post:
        raise NotFoundError("게시글을 찾을 수 없습니다.")
    return post


def list_thread_posts(db: Session, thread_id: int, page: int = 1, limit: int = 20) -> dict:
    thread = thread_service.get_thread(db, thread_id)
    page, limit, offset = clamp_page(page, limit)
    query = db.query(Post).filter(Post.thread_id == thread_id)
    total = query.count()
    posts = query.order_by(Post.created_at.asc(), Post.post_id.asc()).offset(offset).limit(limit).all()
    return {
        "thread": forum_service.with_author_name(thread),
        "posts": [forum_service.with_author_name(p) for p in posts],
        "pagination": pagination_meta(total, page, limit),
    }


def create_post(
    db: Session,
    thread_id: int,
    data: PostCreate,
    current_user: User,
    ip_address: str | None = None,
) -> Post:
    thread = thread_service.get_thread(db, thread_id)
    require_permission(current_user, Permission.CREATE_POST, thread)
    if thread.is_locked and not current_user.can(Permission.POST_IN_LOCKED_THREADS):
        logger.info("post rejected on locked thread thread_id=%s user_id=%s", thread_id, current_user.user_id)
        raise AuthorizationError("잠긴 스레드에는 답글을 작성할 수 없습니다.")
    content = thread_service.validate_post_content(data.content)

    forum = thread.forum
    with transaction(db):
        post = Post(
            thread_id=thread.thread_id,
            user_id=current_user.user_id,
            content=content,
            is_first_post=False,
            ip_address=ip_address,
        )
        db.add(post)
        db.flush()
        counter_service.apply_counter_delta(db, forum_id=forum.forum_id, thread_id=thread.thread_id, posts=1)
        counter_service.touch_thread(thread, post)
        counter_service.touch_forum(forum, thread, post)
    db.refresh(post)
    logger.info("post created post_id=%s thread_id=%s by=%s", post.post_id, thread.thread_id, current_user.user_id)
    return forum_service.with_author_name(post)


def _within_edit_window(post: Post) -> bool:
    if post.created_at is None:
        return False
    return datetime.utcnow() - post.created_at <= timedelta(minutes=settings.POST_EDIT_WINDOW_MINUTES)


def update_post(db: Session, post_id: int, data: PostUpdate, current_user: User) -> Post:
    post = get_post(db, post_id)
    is_owner = post.user_id == current_user.user_id
    if not current_user.can(Permission.EDIT_ANY_POST):
        if not is_owner:
            raise AuthorizationError("본인 게시글 또는 수정 권한이 있는 사용자만 수정할 수 있습니다.")
        if not _within_edit_window(post):
            raise AuthorizationError(
                f"작성 후 {settings.POST_EDIT_WINDOW_MINUTES}분이 지난 게시글은 수정할 수 없습니다."
            )
    content = thread_service.validate_post_content(data.content)
    with transaction(db):
        post.content = content
        post.is_edited = True
        post.edited_at = datetime.utcnow()
        post.edited_by = current_user.user_id
    db.refresh(post)
    return forum_service.with_author_name(post)


def delete_post(db: Session, post_id: int, current_user: User) -> DeleteOutcome:
    """게시글을 삭제한다. 첫 게시글이면 스레드 전체를 삭제하고 ``ThreadDeleted`` 를 돌려준다."""
    post = get_post(db, post_id)
    ensure_owner_or_permission(
        current_user, post.user_id, Permission.DELETE_ANY_POST,
        "본인 게시글 또는 삭제 권한이 있는 사용자만 삭제할 수 있습니다.",
    )
    thread = post.thread
    forum_id = thread.forum_id
    thread_id = thread.thread_id

    if post.is_first_post:
        ensure_owner_or_permission(
            current_user, thread.user_id, Permission.DELETE_ANY_THREAD,
            "첫 게시글을 삭제하면 스레드가 삭제됩니다. 스레드 삭제 권한이 필요합니다.",
        )
        with transaction(db):
            thread_service.remove_thread(db, thread)
        logger.info(
            "first post deleted, thread removed post_id=%s thread_id=%s by=%s",
            post_id, thread_id, current_user.user_id,
        )
        return ThreadDeleted(post_id=post_id, thread_id=thread_id, forum_id=forum_id)

    forum = thread.forum
    with transaction(db):
        was_last = thread.last_post_id == post.post_id
        db.delete(post)
        db.flush()
        counter_service.apply_counter_delta(db, forum_id=forum_id, thread_id=thread_id, posts=-1)
        if was_last:
            counter_service.recompute_thread_last_post(db, thread)
            if forum.last_post_id == post_id:
                counter_service.recompute_forum_last_thread(db, forum)
    logger.info("post deleted post_id=%s thread_id=%s by=%s", post_id, thread_id, current_user.user_id)
    return PostDeleted(post_id=post_id, thread_id=thread_id, forum_id=forum_id)


def toggle_like(db: Session, post_id: int, current_user: User) -> dict:
    """좋아요를 누르거나 취소한다. like_count 는 SQL 레벨로 증감한다."""
    post = get_post(db, post_id)
    existing = (
        db.query(PostLike)
        .filter(PostLike.post_id == post.post_id, PostLike.user_id == current_user.user_id)
        .first()
    )
    with transaction(db):
        if existing:
            db.delete(existing)
            delta = -1
        else:
            db.add(PostLike(post_id=post.post_id, user_id=current_user.user_id))
            delta = 1
        db.flush()
        db.query(Post).filter(Post.post_id == post.post_id).update(
            {"like_count": Post.like_count + delta},
            synchronize_session="fetch",
        )
    db.refresh(post)
    return {"post_id": post.post_id, "like_count": post.like_count, "has_liked": existing is None}


def report_post(db: Session, post_id: int, reason: str | None, current_user: User) -> PostReport:
    post = get_post(db, post_id)
    require_permission(current_user, Permission.REPORT_CONTENT, post)
    text = (reason or "").strip()
    if not text:
        raise ValidationError(
            "Validation failed",
            details=[{"field": "reason", "message": "신고 사유를 입력하세요."}],
        )
    if len(text) > settings.REPORT_REASON_MAX_LENGTH:
        raise ValidationError(f"신고 사유는 {settings.REPORT_REASON_MAX_LENGTH}자를 넘을 수 없습니다.")
    report = PostReport(post_id=post.post_id, reporter_id=current_user.user_id, reason=text, status="pending")
    with transaction(db):
        db.add(report)
    db.refresh(report)
    logger.warning("post reported post_id=%s report_id=%s by=%s", post.post_id, report.report_id, current_user.user_id)
    return report
