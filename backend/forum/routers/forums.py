"""Forums 기능 API 라우터입니다. 포럼 트리 조회/관리와 스레드 작성을 제공합니다."""

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session
from typing import List

from forum.database import get_db
from forum.middleware.auth_middleware import get_current_user
from forum.models.user import User
from forum.schemas.forum import (
    ForumCreate,
    ForumDetailOut,
    ForumOut,
    ForumTreeOut,
    ForumUpdate,
    ThreadCreate,
    ThreadOut,
)
from forum.services import forum_service, thread_service

router = APIRouter(prefix="/api/forums", tags=["forums"])


@router.get("", response_model=List[ForumTreeOut])
def list_forums(db: Session = Depends(get_db)):
    return forum_service.list_forum_tree(db)


@router.get("/{forum_id}", response_model=ForumDetailOut)
def get_forum(
    forum_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    db: Session = Depends(get_db),
):
    return forum_service.get_forum_with_threads(db, forum_id, page=page, limit=limit)


@router.post("", response_model=ForumOut, status_code=status.HTTP_201_CREATED)
def create_forum(
    data: ForumCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return forum_service.create_forum(db, data, current_user)


@router.put("/{forum_id}", response_model=ForumOut)
def update_forum(
    forum_id: int,
    data: ForumUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return forum_service.update_forum(db, forum_id, data, current_user)


@router.delete("/{forum_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_forum(
    forum_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    forum_service.delete_forum(db, forum_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{forum_id}/threads", response_model=ThreadOut, status_code=status.HTTP_201_CREATED)
def create_thread(
    forum_id: int,
    data: ThreadCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ip_address = request.client.host if request.client else None
    return thread_service.create_thread(db, forum_id, data, current_user, ip_address=ip_address)
