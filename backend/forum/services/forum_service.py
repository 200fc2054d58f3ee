"""Forum Service 도메인 서비스 레이어입니다. 포럼 트리(카테고리/포럼/하위 포럼)의 조회와 관리를 담당합니다."""

import logging
from typing import List

from sqlalchemy.orm import Session

from forum.config import settings
from forum.database import transaction
from forum.models.forum import Forum, Thread
from forum.models.user import User
from forum.schemas.forum import ForumCreate, ForumUpdate
from forum.utils.errors import NotFoundError, ValidationError
from forum.utils.helpers import clamp_page, pagination_meta, slugify
from forum.utils.permissions import Permission, require_permission

logger = logging.getLogger(__name__)


def _validate_name(name: str | None) -> str:
    text = (name or "").strip()
    if len(text) < settings.FORUM_NAME_MIN_LENGTH:
        raise ValidationError(
            "Validation failed",
            details=[{"field": "name", "message": f"이름은 {settings.FORUM_NAME_MIN_LENGTH}자 이상이어야 합니다."}],
        )
    return text


def _unique_slug(db: Session, name: str, forum_id: int | None = None) -> str:
    base = slugify(name) or "forum"
    candidate = base
    suffix = 2
    while True:
        query = db.query(Forum.forum_id).filter(Forum.slug == candidate)
        if forum_id is not None:
            query = query.filter(Forum.forum_id != forum_id)
        if not query.first():
            return candidate
        candidate = f"{base}-{suffix}"
        suffix += 1


def _ensure_valid_parent(db: Session, parent_id: int | None, forum_id: int | None = None) -> None:
    if parent_id is None:
        return
    parent = db.query(Forum).filter(Forum.forum_id == parent_id).first()
    if not parent:
        raise NotFoundError("상위 포럼을 찾을 수 없습니다.")
    if forum_id is None:
        return
    # 자기 자신이나 하위 포럼 아래로 옮기면 순환이 생긴다.
    node = parent
    while node is not None:
        if node.forum_id == forum_id:
            raise ValidationError("포럼을 자기 자신 또는 하위 포럼 아래로 이동할 수 없습니다.")
        node = node.parent


def list_forum_tree(db: Session) -> List[Forum]:
    return (
        db.query(Forum)
        .filter(Forum.parent_id.is_(None))
        .order_by(Forum.display_order.asc(), Forum.forum_id.asc())
        .all()
    )


def get_forum(db: Session, forum_id: int) -> Forum:
    forum = db.query(Forum).filter(Forum.forum_id == forum_id).first()
    if not forum:
        raise NotFoundError("포럼을 찾을 수 없습니다.")
    return forum


def get_forum_with_threads(db: Session, forum_id: int, page: int = 1, limit: int = 20) -> dict:
    forum = get_forum(db, forum_id)
    page, limit, offset = clamp_page(page, limit)
    query = db.query(Thread).filter(Thread.forum_id == forum_id)
    total = query.count()
    threads = (
        query.order_by(Thread.is_sticky.desc(), Thread.updated_at.desc(), Thread.thread_id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return {
        "forum": forum,
        "threads": [with_author_name(t) for t in threads],
        "pagination": pagination_meta(total, page, limit),
    }


def with_author_name(entity):
    setattr(entity, "author_name", entity.author.username if entity.author else None)
    return entity


def create_forum(db: Session, data: ForumCreate, current_user: User) -> Forum:
    require_permission(current_user, Permission.CREATE_CATEGORY if data.is_category else Permission.CREATE_FORUM)
    name = _validate_name(data.name)
    _ensure_valid_parent(db, data.parent_id)
    forum = Forum(
        name=name,
        slug=_unique_slug(db, name),
        description=data.description or "",
        parent_id=data.parent_id,
        display_order=data.display_order or 0,
        is_category=bool(data.is_category),
    )
    with transaction(db):
        db.add(forum)
    db.refresh(forum)
    logger.info("forum created forum_id=%s by=%s", forum.forum_id, current_user.user_id)
    return forum


def update_forum(db: Session, forum_id: int, data: ForumUpdate, current_user: User) -> Forum:
    forum = get_forum(db, forum_id)
    require_permission(current_user, Permission.UPDATE_CATEGORY if forum.is_category else Permission.UPDATE_FORUM, forum)
    payload = data.model_dump(exclude_unset=True)
    with transaction(db):
        if "name" in payload and payload["name"] is not None:
            name = _validate_name(payload["name"])
            if name != forum.name:
                forum.name = name
                forum.slug = _unique_slug(db, name, forum_id=forum.forum_id)
        if "description" in payload:
            forum.description = payload["description"]
        if "parent_id" in payload:
            _ensure_valid_parent(db, payload["parent_id"], forum_id=forum.forum_id)
            forum.parent_id = payload["parent_id"]
        if payload.get("display_order") is not None:
            forum.display_order = int(payload["display_order"])
    db.refresh(forum)
    return forum


def delete_forum(db: Session, forum_id: int, current_user: User) -> None:
    forum = get_forum(db, forum_id)
    require_permission(current_user, Permission.DELETE_CATEGORY if forum.is_category else Permission.DELETE_FORUM, forum)
    if db.query(Forum.forum_id).filter(Forum.parent_id == forum_id).first():
        raise ValidationError("하위 포럼이 있는 포럼은 삭제할 수 없습니다. 하위 포럼을 먼저 삭제하거나 이동하세요.")
    thread_count = db.query(Thread).filter(Thread.forum_id == forum_id).count()
    with transaction(db):
        # 스레드/게시글은 관계 cascade 로 함께 삭제된다.
        db.delete(forum)
    logger.info(
        "forum deleted forum_id=%s threads=%s by=%s",
        forum_id, thread_count, current_user.user_id,
    )
