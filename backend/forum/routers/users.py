"""Users 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from forum.database import get_db
from forum.middleware.auth_middleware import get_current_user
from forum.models.user import User
from forum.schemas.forum import PostOut, ThreadOut
from forum.schemas.user import (
    BanRequest,
    GroupChangeRequest,
    ProfileUpdate,
    UserListOut,
    UserOut,
    UserPublicOut,
)
from forum.services import user_service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=UserListOut)
def list_users(
    q: str | None = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return user_service.list_users(db, current_user, search=q, page=page, limit=limit)


@router.put("/me/profile", response_model=UserOut)
def update_profile(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return user_service.update_profile(db, current_user, data)


@router.get("/{identifier}")
def get_profile(identifier: str, db: Session = Depends(get_db)):
    profile = user_service.get_profile(db, identifier)
    return {
        "user": UserPublicOut.model_validate(profile["user"]),
        "recent_threads": [ThreadOut.model_validate(t) for t in profile["recent_threads"]],
        "recent_posts": [PostOut.model_validate(p) for p in profile["recent_posts"]],
    }


@router.post("/{user_id}/ban", response_model=UserOut)
def ban_user(
    user_id: int,
    data: BanRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return user_service.ban_user(db, user_id, data, current_user)


@router.post("/{user_id}/unban", response_model=UserOut)
def unban_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return user_service.unban_user(db, user_id, current_user)


@router.put("/{user_id}/group", response_model=UserOut)
def change_group(
    user_id: int,
    data: GroupChangeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return user_service.change_user_group(db, user_id, data.group_id, current_user)
