"""User / UserGroup 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime


class UserGroupBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    display_name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    is_default: bool = False
    permissions: Dict[str, Any] = {}


class UserGroupCreate(UserGroupBase):
    # 지정하면 permissions 대신 점 경로 목록으로 권한 트리를 만든다.
    permission_paths: Optional[List[str]] = None


class UserGroupUpdate(BaseModel):
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    is_default: Optional[bool] = None
    permissions: Optional[Dict[str, Any]] = None
    permission_paths: Optional[List[str]] = None


class UserGroupOut(UserGroupBase):
    group_id: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class GroupPermissionsOut(BaseModel):
    group_id: int
    name: str
    permissions: List[str]


class UserBase(BaseModel):
    username: str
    email: str


class UserOut(UserBase):
    user_id: int
    group_id: int
    group_name: Optional[str] = None
    signature: Optional[str] = None
    about: Optional[str] = None
    is_active: bool
    is_banned: bool
    ban_reason: Optional[str] = None
    ban_expires_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserPublicOut(BaseModel):
    user_id: int
    username: str
    group_id: int
    group_name: Optional[str] = None
    signature: Optional[str] = None
    about: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserListOut(BaseModel):
    users: List[UserOut]
    pagination: Dict[str, int]


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=30)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str
    confirm_password: str


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class ProfileUpdate(BaseModel):
    signature: Optional[str] = None
    about: Optional[str] = None


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str


class BanRequest(BaseModel):
    reason: Optional[str] = None
    duration_days: Optional[int] = Field(None, ge=1)


class GroupChangeRequest(BaseModel):
    group_id: int
