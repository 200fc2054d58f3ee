"""Auth Service 도메인 서비스 레이어입니다. 비밀번호 검증, 회원가입, 토큰 발급을 담당합니다."""

import logging
from datetime import datetime, timedelta

import bcrypt
from jose import jwt
from sqlalchemy.orm import Session

from forum.config import settings
from forum.database import transaction
from forum.models.user import User
from forum.schemas.user import RegisterRequest
from forum.services import group_service
from forum.utils.errors import AuthenticationError, ConflictError, ValidationError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user_id: int) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def validate_new_password(password: str, confirm_password: str) -> None:
    if len(password or "") < settings.PASSWORD_MIN_LENGTH:
        raise ValidationError(f"비밀번호는 {settings.PASSWORD_MIN_LENGTH}자 이상이어야 합니다.")
    if password != confirm_password:
        raise ValidationError("비밀번호 확인이 일치하지 않습니다.")


def register(db: Session, data: RegisterRequest) -> User:
    validate_new_password(data.password, data.confirm_password)
    username = data.username.strip()
    email = data.email.strip().lower()
    if db.query(User.user_id).filter(User.username == username).first():
        raise ConflictError("이미 사용 중인 사용자명입니다.")
    if db.query(User.user_id).filter(User.email == email).first():
        raise ConflictError("이미 등록된 이메일입니다.")

    group = group_service.get_default_group(db)
    user = User(
        username=username,
        email=email,
        password_hash=hash_password(data.password),
        group_id=group.group_id,
        is_active=True,
        signature="",
    )
    with transaction(db):
        db.add(user)
    db.refresh(user)
    logger.info("user registered user_id=%s group=%s", user.user_id, group.name)
    return user


def is_ban_active(user: User) -> bool:
    if not user.is_banned:
        return False
    return user.ban_expires_at is None or user.ban_expires_at > datetime.utcnow()


def _lift_expired_ban(user: User) -> bool:
    if user.is_banned and not is_ban_active(user):
        user.is_banned = False
        user.ban_reason = None
        user.ban_expires_at = None
        return True
    return False


def ensure_can_sign_in(user: User) -> None:
    if not user.is_active:
        raise AuthenticationError("비활성화된 계정입니다.")
    if is_ban_active(user):
        reason = user.ban_reason or "사유 없음"
        raise AuthenticationError(f"이용이 정지된 계정입니다. 사유: {reason}")


def login(db: Session, username: str, password: str) -> User:
    user = db.query(User).filter(User.username == username).first()
    if not user or not verify_password(password, user.password_hash):
        raise AuthenticationError("사용자명 또는 비밀번호가 올바르지 않습니다.")
    with transaction(db):
        _lift_expired_ban(user)
        ensure_can_sign_in(user)
        user.last_login_at = datetime.utcnow()
    db.refresh(user)
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str, confirm_password: str) -> None:
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("현재 비밀번호가 올바르지 않습니다.")
    validate_new_password(new_password, confirm_password)
    with transaction(db):
        user.password_hash = hash_password(new_password)
