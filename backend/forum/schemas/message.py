"""Message(쪽지) 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime


class MessageCreate(BaseModel):
    receiver_username: str
    subject: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)


class MessageReadUpdate(BaseModel):
    is_read: bool


class MessageMoveRequest(BaseModel):
    # None 이면 받은 편지함으로 되돌린다.
    folder_id: Optional[int] = None


class MessageFolderCreate(BaseModel):
    name: str


class MessageFolderOut(BaseModel):
    folder_id: int
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class MessageOut(BaseModel):
    message_id: int
    sender_id: int
    receiver_id: int
    sender_name: Optional[str] = None
    receiver_name: Optional[str] = None
    subject: str
    content: str
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class MessageListOut(BaseModel):
    folder: str
    folders: List[MessageFolderOut]
    messages: List[MessageOut]
    unread_count: int
    pagination: Dict[str, int]


class MessageDeleteOut(BaseModel):
    message_id: int
    hard_deleted: bool
    message: str
