"""Groups 기능 API 라우터입니다. 사용자 그룹과 권한 트리 관리를 제공합니다."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from typing import List

from forum.database import get_db
from forum.middleware.auth_middleware import get_current_user, require_permission_dep
from forum.models.user import User
from forum.schemas.user import GroupPermissionsOut, UserGroupCreate, UserGroupOut, UserGroupUpdate
from forum.services import group_service
from forum.utils.permissions import Permission

router = APIRouter(prefix="/api/groups", tags=["groups"])

manage_groups = require_permission_dep(Permission.MANAGE_USER_GROUPS)


@router.get("", response_model=List[UserGroupOut])
def list_groups(db: Session = Depends(get_db), _current_user: User = Depends(get_current_user)):
    return group_service.list_groups(db)


@router.get("/{group_id}", response_model=UserGroupOut)
def get_group(group_id: int, db: Session = Depends(get_db), _current_user: User = Depends(get_current_user)):
    return group_service.get_group(db, group_id)


@router.get("/{group_id}/permissions", response_model=GroupPermissionsOut)
def get_group_permissions(
    group_id: int,
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    return group_service.get_group_permissions(db, group_id)


@router.post("", response_model=UserGroupOut, status_code=status.HTTP_201_CREATED)
def create_group(
    data: UserGroupCreate,
    db: Session = Depends(get_db),
    _current_user: User = Depends(manage_groups),
):
    return group_service.create_group(db, data)


@router.put("/{group_id}", response_model=UserGroupOut)
def update_group(
    group_id: int,
    data: UserGroupUpdate,
    db: Session = Depends(get_db),
    _current_user: User = Depends(manage_groups),
):
    return group_service.update_group(db, group_id, data)


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(
    group_id: int,
    db: Session = Depends(get_db),
    _current_user: User = Depends(manage_groups),
):
    group_service.delete_group(db, group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
