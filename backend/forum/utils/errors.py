"""서비스 레이어에서 사용하는 도메인 예외 정의입니다.

모두 FastAPI ``HTTPException`` 하위 클래스이므로 라우터에서 별도 변환 없이
``{"detail": ...}`` 응답으로 렌더링됩니다.
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class ForumError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: Any, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)


class ValidationError(ForumError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, details: Optional[List[Dict[str, Any]]] = None):
        self.details = details or []
        if self.details:
            super().__init__({"message": detail, "details": self.details})
        else:
            super().__init__(detail)


class AuthenticationError(ForumError):
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(ForumError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ForumError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ForumError):
    status_code = status.HTTP_409_CONFLICT
