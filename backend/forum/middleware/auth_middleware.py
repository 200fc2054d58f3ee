"""인증/권한 의존성. Bearer 토큰으로 현재 사용자를 찾고 그룹 권한 게이트를 제공합니다."""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from forum.database import get_db
from forum.models.user import User
from forum.config import settings
from forum.services.auth_service import ALGORITHM, ensure_can_sign_in
from forum.utils.errors import AuthenticationError
from forum.utils.permissions import require_permission

security = HTTPBearer()


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise AuthenticationError("Invalid or expired token")


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    payload = decode_token(credentials.credentials)
    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise AuthenticationError("Invalid token payload")
    user = db.query(User).filter(User.user_id == int(subject)).first()
    if not user:
        raise AuthenticationError("User not found")
    # 비활성/이용 정지 계정은 이미 발급된 토큰으로도 접근할 수 없다.
    ensure_can_sign_in(user)
    return user


def require_permission_dep(permission: str):
    """권한 경로를 요구하는 라우터 의존성을 만든다."""
    def checker(current_user: User = Depends(get_current_user)) -> User:
        require_permission(current_user, permission)
        return current_user
    return checker
