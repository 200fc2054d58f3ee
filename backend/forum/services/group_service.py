"""Group Service 도메인 서비스 레이어입니다. 사용자 그룹과 권한 트리를 관리합니다."""

import copy
import logging
from typing import List

from sqlalchemy.orm import Session

from forum.config import settings
from forum.database import transaction
from forum.models.user import User, UserGroup
from forum.schemas.user import UserGroupCreate, UserGroupUpdate
from forum.utils.errors import ConflictError, NotFoundError, ValidationError
from forum.utils.permissions import DEFAULT_GROUPS, PermissionTree, build_permission_tree

logger = logging.getLogger(__name__)


def _validate_permission_tree(permissions: dict) -> dict:
    """말단은 bool, 중간 노드는 매핑이어야 한다."""
    def walk(node, prefix: str):
        for key, value in node.items():
            path = f"{prefix}.{key}" if prefix else str(key)
            if not str(key).strip() or "." in str(key):
                raise ValidationError(f"권한 키 '{path}' 형식이 올바르지 않습니다.")
            if isinstance(value, dict):
                walk(value, path)
            elif not isinstance(value, bool):
                raise ValidationError(f"권한 '{path}' 값은 true/false 또는 하위 권한이어야 합니다.")

    walk(permissions or {}, "")
    return copy.deepcopy(permissions or {})


def seed_default_groups(db: Session) -> List[UserGroup]:
    created = []
    with transaction(db):
        for config in DEFAULT_GROUPS:
            exists = db.query(UserGroup).filter(UserGroup.name == config["name"]).first()
            if exists:
                continue
            group = UserGroup(**copy.deepcopy(config))
            db.add(group)
            created.append(group)
    if created:
        logger.info("seeded default groups: %s", ", ".join(g.name for g in created))
    return created


def list_groups(db: Session) -> List[UserGroup]:
    return db.query(UserGroup).order_by(UserGroup.group_id).all()


def get_group(db: Session, group_id: int) -> UserGroup:
    group = db.query(UserGroup).filter(UserGroup.group_id == group_id).first()
    if not group:
        raise NotFoundError("사용자 그룹을 찾을 수 없습니다.")
    return group


def get_group_by_name(db: Session, name: str) -> UserGroup | None:
    return db.query(UserGroup).filter(UserGroup.name == name).first()


def get_default_group(db: Session) -> UserGroup:
    group = (
        db.query(UserGroup)
        .filter(UserGroup.is_default == True)  # noqa: E712
        .order_by(UserGroup.group_id)
        .first()
    )
    if group is None:
        group = get_group_by_name(db, settings.DEFAULT_USER_GROUP)
    if group is None:
        raise NotFoundError("기본 사용자 그룹이 설정되어 있지 않습니다.")
    return group


def _clear_other_defaults(db: Session, keep_group_id: int | None) -> None:
    query = db.query(UserGroup).filter(UserGroup.is_default == True)  # noqa: E712
    if keep_group_id is not None:
        query = query.filter(UserGroup.group_id != keep_group_id)
    query.update({"is_default": False}, synchronize_session="fetch")


def create_group(db: Session, data: UserGroupCreate) -> UserGroup:
    name = data.name.strip().lower()
    if get_group_by_name(db, name):
        raise ConflictError("이미 존재하는 그룹 이름입니다.")
    payload = data.model_dump()
    payload["name"] = name
    paths = payload.pop("permission_paths", None)
    if paths is not None:
        payload["permissions"] = build_permission_tree(paths)
    payload["permissions"] = _validate_permission_tree(payload.get("permissions") or {})
    group = UserGroup(**payload)
    with transaction(db):
        db.add(group)
        db.flush()
        if group.is_default:
            _clear_other_defaults(db, group.group_id)
    db.refresh(group)
    return group


def update_group(db: Session, group_id: int, data: UserGroupUpdate) -> UserGroup:
    group = get_group(db, group_id)
    payload = data.model_dump(exclude_unset=True)
    paths = payload.pop("permission_paths", None)
    if paths is not None:
        payload["permissions"] = build_permission_tree(paths)
    if "permissions" in payload:
        payload["permissions"] = _validate_permission_tree(payload["permissions"] or {})
    if payload.get("is_default") is False and group.is_default:
        raise ValidationError("기본 그룹은 다른 그룹을 기본으로 지정하여 변경해야 합니다.")
    with transaction(db):
        for key, value in payload.items():
            setattr(group, key, value)
        if payload.get("is_default"):
            _clear_other_defaults(db, group.group_id)
    db.refresh(group)
    return group


def delete_group(db: Session, group_id: int) -> None:
    group = get_group(db, group_id)
    if group.is_default:
        raise ValidationError("기본 그룹은 삭제할 수 없습니다.")
    if group.name == settings.ADMIN_GROUP:
        raise ValidationError("관리자 그룹은 삭제할 수 없습니다.")
    member_count = db.query(User).filter(User.group_id == group_id).count()
    if member_count:
        raise ValidationError(f"소속 사용자 {member_count}명이 있는 그룹은 삭제할 수 없습니다.")
    with transaction(db):
        db.delete(group)


def get_group_permissions(db: Session, group_id: int) -> dict:
    group = get_group(db, group_id)
    return {
        "group_id": group.group_id,
        "name": group.name,
        "permissions": sorted(PermissionTree(group.permissions).flatten()),
    }
