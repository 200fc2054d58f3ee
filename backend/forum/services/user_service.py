"""User Service 도메인 서비스 레이어입니다. 프로필, 차단, 그룹 변경 등 사용자 관리 규칙을 담당합니다."""

import logging
from datetime import datetime, timedelta

from sqlalchemy import or_
from sqlalchemy.orm import Session

from forum.config import settings
from forum.database import transaction
from forum.models.forum import Thread, Post
from forum.models.user import User
from forum.schemas.user import BanRequest, ProfileUpdate
from forum.services import group_service
from forum.utils.errors import AuthorizationError, NotFoundError, ValidationError
from forum.utils.helpers import clamp_page, like_pattern, pagination_meta
from forum.utils.permissions import Permission, require_permission

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFoundError("사용자를 찾을 수 없습니다.")
    return user


def get_user_by_identifier(db: Session, identifier: str) -> User:
    text = str(identifier or "").strip()
    if text.isdigit():
        user = db.query(User).filter(User.user_id == int(text)).first()
    else:
        user = db.query(User).filter(User.username == text).first()
    if not user:
        raise NotFoundError("사용자를 찾을 수 없습니다.")
    return user


def get_profile(db: Session, identifier: str) -> dict:
    user = get_user_by_identifier(db, identifier)
    recent_threads = (
        db.query(Thread)
        .filter(Thread.user_id == user.user_id)
        .order_by(Thread.created_at.desc(), Thread.thread_id.desc())
        .limit(5)
        .all()
    )
    recent_posts = (
        db.query(Post)
        .filter(Post.user_id == user.user_id)
        .order_by(Post.created_at.desc(), Post.post_id.desc())
        .limit(5)
        .all()
    )
    return {"user": user, "recent_threads": recent_threads, "recent_posts": recent_posts}


def list_users(db: Session, current_user: User, search: str | None = None, page: int = 1, limit: int = 20) -> dict:
    require_permission(current_user, Permission.VIEW_USERS)
    page, limit, offset = clamp_page(page, limit)
    query = db.query(User)
    if search and search.strip():
        keyword = like_pattern(search.strip())
        query = query.filter(or_(User.username.ilike(keyword, escape="\\"), User.email.ilike(keyword, escape="\\")))
    total = query.count()
    users = query.order_by(User.created_at.desc(), User.user_id.desc()).offset(offset).limit(limit).all()
    return {"users": users, "pagination": pagination_meta(total, page, limit)}


def update_profile(db: Session, current_user: User, data: ProfileUpdate) -> User:
    require_permission(current_user, Permission.EDIT_OWN_PROFILE)
    payload = data.model_dump(exclude_unset=True)
    if "signature" in payload:
        signature = (payload["signature"] or "").strip()
        if len(signature) > settings.SIGNATURE_MAX_LENGTH:
            raise ValidationError(f"서명은 {settings.SIGNATURE_MAX_LENGTH}자를 넘을 수 없습니다.")
        payload["signature"] = signature
    with transaction(db):
        for key, value in payload.items():
            setattr(current_user, key, value)
    db.refresh(current_user)
    return current_user


def _is_admin(user: User) -> bool:
    return user.group is not None and user.group.name == settings.ADMIN_GROUP


def ban_user(db: Session, user_id: int, data: BanRequest, current_user: User) -> User:
    require_permission(current_user, Permission.BAN_USERS)
    user = get_user(db, user_id)
    if _is_admin(user):
        raise AuthorizationError("관리자 계정은 이용 정지할 수 없습니다.")
    if user.user_id == current_user.user_id:
        raise ValidationError("본인 계정은 이용 정지할 수 없습니다.")
    with transaction(db):
        user.is_banned = True
        user.ban_reason = (data.reason or "").strip() or "사유 없음"
        user.ban_expires_at = (
            datetime.utcnow() + timedelta(days=int(data.duration_days)) if data.duration_days else None
        )
    db.refresh(user)
    logger.warning(
        "user banned user_id=%s by=%s expires_at=%s",
        user.user_id, current_user.user_id, user.ban_expires_at,
    )
    return user


def unban_user(db: Session, user_id: int, current_user: User) -> User:
    require_permission(current_user, Permission.BAN_USERS)
    user = get_user(db, user_id)
    with transaction(db):
        user.is_banned = False
        user.ban_reason = None
        user.ban_expires_at = None
    db.refresh(user)
    logger.info("user unbanned user_id=%s by=%s", user.user_id, current_user.user_id)
    return user


def change_user_group(db: Session, user_id: int, group_id: int, current_user: User) -> User:
    require_permission(current_user, Permission.MANAGE_USER_GROUPS)
    user = get_user(db, user_id)
    group = group_service.get_group(db, group_id)
    if user.user_id == current_user.user_id and group.name != settings.ADMIN_GROUP:
        raise AuthorizationError("본인을 관리자 그룹에서 제외할 수 없습니다.")
    previous = user.group_name
    with transaction(db):
        user.group_id = group.group_id
    db.refresh(user)
    logger.info(
        "user group changed user_id=%s from=%s to=%s by=%s",
        user.user_id, previous, group.name, current_user.user_id,
    )
    return user
