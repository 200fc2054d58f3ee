"""Thread Service 도메인 서비스 레이어입니다. 스레드 생성/수정/이동/삭제와 포럼 카운터 갱신 흐름을 캡슐화합니다."""

import logging
from datetime import datetime, timedelta
from typing import List

from sqlalchemy import or_
from sqlalchemy.orm import Session

from forum.config import settings
from forum.database import transaction
from forum.models.forum import Forum, Thread, Post, Tag
from forum.models.user import User
from forum.schemas.forum import ThreadCreate, ThreadUpdate
from forum.services import counter_service, forum_service
from forum.utils.errors import NotFoundError, ValidationError
from forum.utils.helpers import clamp_page, like_pattern, pagination_meta, slugify
from forum.utils.permissions import Permission, ensure_owner_or_permission, require_permission

logger = logging.getLogger(__name__)

POPULAR_PERIODS = {
    "day": timedelta(days=1),
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}


def validate_post_content(content: str | None) -> str:
    text = (content or "").strip()
    if len(text) < settings.POST_MIN_LENGTH:
        raise ValidationError(
            "Validation failed",
            details=[{"field": "content", "message": f"내용은 {settings.POST_MIN_LENGTH}자 이상이어야 합니다."}],
        )
    return text


def _validate_title(title: str | None) -> str:
    text = (title or "").strip()
    if not text:
        raise ValidationError(
            "Validation failed",
            details=[{"field": "title", "message": "제목을 입력하세요."}],
        )
    if len(text) > settings.THREAD_TITLE_MAX_LENGTH:
        raise ValidationError(f"제목은 {settings.THREAD_TITLE_MAX_LENGTH}자를 넘을 수 없습니다.")
    return text


def normalize_tags(names: List[str] | None) -> List[str]:
    """태그 이름을 소문자로 정규화하고 빈 값과 중복을 제거한다. 입력 순서는 유지한다."""
    result: List[str] = []
    for raw in names or []:
        name = (raw or "").strip().lower()
        if not name or name in result:
            continue
        if len(name) > settings.TAG_MAX_LENGTH:
            raise ValidationError(f"태그는 {settings.TAG_MAX_LENGTH}자를 넘을 수 없습니다.")
        result.append(name)
    if len(result) > settings.MAX_TAGS_PER_THREAD:
        raise ValidationError(f"태그는 최대 {settings.MAX_TAGS_PER_THREAD}개까지 지정할 수 있습니다.")
    return result


def resolve_tags(db: Session, names: List[str]) -> List[Tag]:
    """정규화된 이름 목록에 해당하는 태그를 찾고, 없으면 만든다. 트랜잭션은 호출자가 연다."""
    if not names:
        return []
    existing = {t.name: t for t in db.query(Tag).filter(Tag.name.in_(names)).all()}
    tags = []
    for name in names:
        tag = existing.get(name)
        if tag is None:
            tag = Tag(name=name)
            db.add(tag)
        tags.append(tag)
    return tags


def get_thread(db: Session, thread_id: int) -> Thread:
    thread = db.query(Thread).filter(Thread.thread_id == thread_id).first()
    if not thread:
        raise NotFoundError("스레드를 찾을 수 없습니다.")
    return thread


def view_thread(db: Session, thread_id: int) -> Thread:
    get_thread(db, thread_id)
    # 조회수는 updated_at 을 건드리지 않도록 SQL 레벨로 증가시킨다.
    with transaction(db):
        db.query(Thread).filter(Thread.thread_id == thread_id).update(
            {"views": Thread.views + 1, "updated_at": Thread.updated_at},
            synchronize_session=False,
        )
    return forum_service.with_author_name(get_thread(db, thread_id))


def create_thread(db: Session, forum_id: int, data: ThreadCreate, current_user: User, ip_address: str | None = None) -> Thread:
    forum = forum_service.get_forum(db, forum_id)
    require_permission(current_user, Permission.CREATE_THREAD, forum)
    if forum.is_category:
        raise ValidationError("카테고리에는 스레드를 작성할 수 없습니다.")
    title = _validate_title(data.title)
    content = validate_post_content(data.content)
    tag_names = normalize_tags(data.tags)

    with transaction(db):
        thread = Thread(
            forum_id=forum.forum_id,
            user_id=current_user.user_id,
            title=title,
            slug=slugify(title) or "thread",
            post_count=0,
        )
        thread.tags = resolve_tags(db, tag_names)
        db.add(thread)
        db.flush()
        post = Post(
            thread_id=thread.thread_id,
            user_id=current_user.user_id,
            content=content,
            is_first_post=True,
            ip_address=ip_address,
        )
        db.add(post)
        db.flush()
        counter_service.apply_counter_delta(db, forum_id=forum.forum_id, thread_id=thread.thread_id, threads=1, posts=1)
        counter_service.touch_thread(thread, post)
        counter_service.touch_forum(forum, thread, post)
    db.refresh(thread)
    logger.info("thread created thread_id=%s forum_id=%s by=%s", thread.thread_id, forum.forum_id, current_user.user_id)
    return forum_service.with_author_name(thread)


def update_thread(db: Session, thread_id: int, data: ThreadUpdate, current_user: User) -> Thread:
    thread = get_thread(db, thread_id)
    ensure_owner_or_permission(
        current_user, thread.user_id, Permission.EDIT_ANY_THREAD,
        "본인 스레드 또는 수정 권한이 있는 사용자만 수정할 수 있습니다.",
    )
    if data.title is None and data.tags is None:
        raise ValidationError("변경할 제목 또는 태그를 입력하세요.")
    title = _validate_title(data.title) if data.title is not None else None
    tag_names = normalize_tags(data.tags) if data.tags is not None else None
    with transaction(db):
        if title is not None:
            thread.title = title
            thread.slug = slugify(title) or "thread"
            forum = thread.forum
            if forum.last_thread_id == thread.thread_id:
                forum.last_thread_title = title
        if tag_names is not None:
            thread.tags = resolve_tags(db, tag_names)
    db.refresh(thread)
    return forum_service.with_author_name(thread)


def set_locked(db: Session, thread_id: int, is_locked: bool, current_user: User) -> Thread:
    require_permission(current_user, Permission.MODERATE_THREADS)
    thread = get_thread(db, thread_id)
    with transaction(db):
        thread.is_locked = bool(is_locked)
    db.refresh(thread)
    return forum_service.with_author_name(thread)


def set_sticky(db: Session, thread_id: int, is_sticky: bool, current_user: User) -> Thread:
    require_permission(current_user, Permission.PIN_THREADS)
    thread = get_thread(db, thread_id)
    with transaction(db):
        thread.is_sticky = bool(is_sticky)
    db.refresh(thread)
    return forum_service.with_author_name(thread)


def move_thread(db: Session, thread_id: int, target_forum_id: int, current_user: User) -> Thread:
    require_permission(current_user, Permission.MOVE_THREADS)
    thread = get_thread(db, thread_id)
    target = db.query(Forum).filter(Forum.forum_id == target_forum_id).first()
    if not target:
        raise NotFoundError("이동할 포럼을 찾을 수 없습니다.")
    if target.is_category:
        raise ValidationError("카테고리로는 스레드를 이동할 수 없습니다.")
    source = thread.forum
    if source.forum_id == target.forum_id:
        raise ValidationError("이미 해당 포럼에 있는 스레드입니다.")

    with transaction(db):
        moved_posts = int(thread.post_count or 0)
        thread.forum = target
        db.flush()
        counter_service.apply_counter_delta(db, forum_id=source.forum_id, threads=-1, posts=-moved_posts)
        counter_service.apply_counter_delta(db, forum_id=target.forum_id, threads=1, posts=moved_posts)
        counter_service.recompute_forum_last_thread(db, source)
        counter_service.recompute_forum_last_thread(db, target)
    db.refresh(thread)
    logger.info(
        "thread moved thread_id=%s from=%s to=%s by=%s",
        thread.thread_id, source.forum_id, target.forum_id, current_user.user_id,
    )
    return forum_service.with_author_name(thread)


def remove_thread(db: Session, thread: Thread) -> None:
    """스레드와 소속 게시글을 삭제하고 포럼 카운터/포인터를 갱신한다. 트랜잭션은 호출자가 연다."""
    forum = thread.forum
    removed_posts = int(thread.post_count or 0)
    was_last = forum.last_thread_id == thread.thread_id
    db.delete(thread)
    db.flush()
    counter_service.apply_counter_delta(db, forum_id=forum.forum_id, threads=-1, posts=-removed_posts)
    if was_last:
        counter_service.recompute_forum_last_thread(db, forum)


def delete_thread(db: Session, thread_id: int, current_user: User) -> None:
    thread = get_thread(db, thread_id)
    ensure_owner_or_permission(
        current_user, thread.user_id, Permission.DELETE_ANY_THREAD,
        "본인 스레드 또는 삭제 권한이 있는 사용자만 삭제할 수 있습니다.",
    )
    forum_id = thread.forum_id
    with transaction(db):
        remove_thread(db, thread)
    logger.info("thread deleted thread_id=%s forum_id=%s by=%s", thread_id, forum_id, current_user.user_id)


def list_recent_threads(db: Session, limit: int = 10) -> List[Thread]:
    _, limit, _ = clamp_page(1, limit)
    rows = (
        db.query(Thread)
        .order_by(Thread.last_post_date.desc(), Thread.thread_id.desc())
        .limit(limit)
        .all()
    )
    return [forum_service.with_author_name(t) for t in rows]


def search_threads(
    db: Session,
    query_text: str | None = None,
    forum_id: int | None = None,
    author_id: int | None = None,
    tag: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> dict:
    page, limit, offset = clamp_page(page, limit)
    query = db.query(Thread)
    if query_text and query_text.strip():
        keyword = like_pattern(query_text.strip())
        first_post_match = (
            db.query(Post.thread_id)
            .filter(Post.is_first_post == True, Post.content.ilike(keyword, escape="\\"))  # noqa: E712
        )
        query = query.filter(or_(Thread.title.ilike(keyword, escape="\\"), Thread.thread_id.in_(first_post_match)))
    if forum_id is not None:
        query = query.filter(Thread.forum_id == forum_id)
    if author_id is not None:
        query = query.filter(Thread.user_id == author_id)
    if tag and tag.strip():
        query = query.filter(Thread.tags.any(Tag.name == tag.strip().lower()))
    total = query.count()
    rows = (
        query.order_by(Thread.is_sticky.desc(), Thread.updated_at.desc(), Thread.thread_id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return {"threads": [forum_service.with_author_name(t) for t in rows], "pagination": pagination_meta(total, page, limit)}


def list_popular_threads(db: Session, period: str = "week", limit: int = 10) -> List[Thread]:
    """기간 안에 작성된 스레드를 조회수 + 답글 수 * 가중치 순으로 돌려준다."""
    if period not in POPULAR_PERIODS:
        raise ValidationError("period 는 day, week, month, year 중 하나여야 합니다.")
    _, limit, _ = clamp_page(1, limit)
    since = datetime.utcnow() - POPULAR_PERIODS[period]
    # post_count 는 첫 게시글을 포함하므로 답글 수는 post_count - 1
    score = Thread.views + (Thread.post_count - 1) * settings.POPULAR_REPLY_WEIGHT
    rows = (
        db.query(Thread)
        .filter(Thread.created_at >= since)
        .order_by(score.desc(), Thread.thread_id.desc())
        .limit(limit)
        .all()
    )
    return [forum_service.with_author_name(t) for t in rows]
