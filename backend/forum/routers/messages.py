"""Messages 기능 API 라우터입니다. 쪽지 발송, 편지함 조회와 개인 보관함 관리를 제공합니다."""

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from forum.database import get_db
from forum.middleware.auth_middleware import get_current_user
from forum.models.user import User
from forum.schemas.message import (
    MessageCreate,
    MessageDeleteOut,
    MessageFolderCreate,
    MessageFolderOut,
    MessageListOut,
    MessageMoveRequest,
    MessageOut,
    MessageReadUpdate,
)
from forum.services import message_service

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.get("", response_model=MessageListOut)
def list_messages(
    folder: str = Query("inbox", min_length=1, max_length=50),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return message_service.list_messages(db, current_user, folder=folder, page=page, limit=limit)


@router.get("/unread-count")
def unread_count(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"unread_count": message_service.unread_count(db, current_user.user_id)}


@router.get("/folders", response_model=List[MessageFolderOut])
def list_folders(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return message_service.list_folders(db, current_user)


@router.post("/folders", response_model=MessageFolderOut, status_code=status.HTTP_201_CREATED)
def create_folder(
    data: MessageFolderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return message_service.create_folder(db, data.name, current_user)


@router.delete("/folders/{folder_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_folder(folder_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    message_service.delete_folder(db, folder_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def send_message(
    data: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return message_service.send_message(db, data, current_user)


@router.get("/{message_id}", response_model=MessageOut)
def get_message(message_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return message_service.get_message(db, message_id, current_user)


@router.patch("/{message_id}/read", response_model=MessageOut)
def set_read(
    message_id: int,
    data: MessageReadUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return message_service.set_read(db, message_id, data.is_read, current_user)


@router.patch("/{message_id}/folder", response_model=MessageOut)
def move_message(
    message_id: int,
    data: MessageMoveRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return message_service.move_message(db, message_id, data.folder_id, current_user)


@router.delete("/{message_id}", response_model=MessageDeleteOut)
def delete_message(message_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    hard_deleted = message_service.delete_message(db, message_id, current_user)
    return MessageDeleteOut(message_id=message_id, hard_deleted=hard_deleted, message="삭제되었습니다.")
