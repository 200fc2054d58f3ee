"""그룹 권한 트리 평가와 권한 검사 공용 헬퍼입니다.

그룹 권한은 ``{"forum": {"createThread": True}, ...}`` 형태의 중첩 매핑으로 저장되고,
애플리케이션은 ``"forum.createThread"`` 같은 점(.) 구분 경로로 권한을 조회합니다.
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Set

from forum.utils.errors import AuthorizationError

logger = logging.getLogger(__name__)

SEPARATOR = "."


class Permission:
    """애플리케이션이 실제로 검사하는 권한 경로 목록."""

    VIEW_FORUMS = "forum.viewForums"
    VIEW_THREADS = "forum.viewThreads"
    CREATE_THREAD = "forum.createThread"
    CREATE_POST = "forum.createPost"
    EDIT_ANY_THREAD = "forum.editAnyThread"
    EDIT_ANY_POST = "forum.editAnyPost"
    DELETE_ANY_POST = "forum.deleteAnyPost"
    DELETE_ANY_THREAD = "forum.deleteAnyThread"
    MODERATE_THREADS = "forum.moderateThreads"
    PIN_THREADS = "forum.pinThreads"
    MOVE_THREADS = "forum.moveThreads"
    CREATE_FORUM = "forum.createForum"
    UPDATE_FORUM = "forum.updateForum"
    DELETE_FORUM = "forum.deleteForum"
    CREATE_CATEGORY = "forum.createCategory"
    UPDATE_CATEGORY = "forum.updateCategory"
    DELETE_CATEGORY = "forum.deleteCategory"
    POST_IN_LOCKED_THREADS = "forum.postInLockedThreads"

    EDIT_OWN_PROFILE = "user.editOwnProfile"
    EDIT_ANY_PROFILE = "user.editAnyProfile"
    REPORT_CONTENT = "user.reportContent"
    VIEW_USERS = "user.viewUsers"
    WARN_USERS = "user.warnUsers"
    BAN_USERS = "user.banUsers"
    MANAGE_USER_GROUPS = "user.manageUserGroups"

    ACCESS_ADMIN_PANEL = "admin.accessAdminPanel"
    MANAGE_SETTINGS = "admin.manageSettings"
    VIEW_LOGS = "admin.viewLogs"


class PermissionTree:
    """중첩 권한 매핑을 감싸는 읽기 전용 래퍼.

    말단 값은 정확히 ``True`` 일 때만 허용으로 본다. 누락된 키, ``False``, 숫자/문자열 같은
    비정상 값은 모두 거부로 평가하며 예외를 던지지 않는다.
    """

    def __init__(self, permissions: Optional[Mapping[str, Any]] = None):
        self._root: Mapping[str, Any] = permissions if isinstance(permissions, Mapping) else {}

    def has(self, path: str) -> bool:
        if not isinstance(path, str) or not path:
            return False
        segments = path.split(SEPARATOR)
        node: Any = self._root
        for segment in segments[:-1]:
            if not isinstance(node, Mapping):
                return False
            node = node.get(segment)
        if not isinstance(node, Mapping):
            return False
        return node.get(segments[-1]) is True

    def flatten(self) -> Set[str]:
        result: Set[str] = set()
        stack = [("", self._root)]
        while stack:
            prefix, node = stack.pop()
            for key, value in node.items():
                path = f"{prefix}{SEPARATOR}{key}" if prefix else str(key)
                if isinstance(value, Mapping):
                    stack.append((path, value))
                elif value is True:
                    result.add(path)
        return result

    def __contains__(self, path: str) -> bool:
        return self.has(path)


def has_permission(permissions: Optional[Mapping[str, Any]], path: str) -> bool:
    return PermissionTree(permissions).has(path)


def flatten_permissions(permissions: Optional[Mapping[str, Any]]) -> Set[str]:
    return PermissionTree(permissions).flatten()


def build_permission_tree(paths: Iterable[str]) -> dict:
    """점 경로 목록을 중첩 매핑으로 되돌린다. 그룹 권한 저장 시 사용한다."""
    tree: dict = {}
    for path in paths:
        segments = [s for s in str(path).strip().split(SEPARATOR) if s]
        if not segments:
            continue
        node = tree
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
        node[segments[-1]] = True
    return tree


def require_permission(user, permission: str, resource: Any = None) -> None:
    # 권한은 그룹 단위로만 판정하고 resource 는 로그에만 남긴다.
    if user is None or not user.can(permission):
        logger.info(
            "permission denied user_id=%s permission=%s resource=%r",
            getattr(user, "user_id", None), permission, resource,
        )
        raise AuthorizationError(f"'{permission}' 권한이 없습니다.")


def ensure_owner_or_permission(user, owner_id: Optional[int], permission: str, detail: str) -> None:
    if owner_id is not None and int(owner_id) == int(user.user_id):
        return
    if user.can(permission):
        return
    raise AuthorizationError(detail)


MEMBER_FORUM_PERMISSIONS = {
    "viewForums": True,
    "viewThreads": True,
    "createThread": True,
    "createPost": True,
}

DEFAULT_GROUPS = (
    {
        "name": "guest",
        "display_name": "Guest",
        "description": "Unregistered users",
        "is_default": False,
        "permissions": {
            "forum": {"viewForums": True, "viewThreads": True},
        },
    },
    {
        "name": "member",
        "display_name": "Member",
        "description": "Regular registered users",
        "color": "#3498db",
        "is_default": True,
        "permissions": {
            "forum": dict(MEMBER_FORUM_PERMISSIONS),
            "user": {"editOwnProfile": True, "reportContent": True},
        },
    },
    {
        "name": "moderator",
        "display_name": "Moderator",
        "description": "Users who can moderate forums",
        "color": "#2ecc71",
        "is_default": False,
        "permissions": {
            "forum": {
                **MEMBER_FORUM_PERMISSIONS,
                "editAnyThread": True,
                "editAnyPost": True,
                "deleteAnyPost": True,
                "moderateThreads": True,
                "pinThreads": True,
                "moveThreads": True,
            },
            "user": {
                "editOwnProfile": True,
                "reportContent": True,
                "viewUsers": True,
                "warnUsers": True,
            },
        },
    },
    {
        "name": "administrator",
        "display_name": "Administrator",
        "description": "Users with full administrative privileges",
        "color": "#e74c3c",
        "is_default": False,
        "permissions": {
            "forum": {
                **MEMBER_FORUM_PERMISSIONS,
                "editAnyThread": True,
                "editAnyPost": True,
                "deleteAnyPost": True,
                "deleteAnyThread": True,
                "moderateThreads": True,
                "pinThreads": True,
                "moveThreads": True,
                "createForum": True,
                "updateForum": True,
                "deleteForum": True,
                "createCategory": True,
                "updateCategory": True,
                "deleteCategory": True,
                "postInLockedThreads": True,
            },
            "user": {
                "editOwnProfile": True,
                "editAnyProfile": True,
                "reportContent": True,
                "viewUsers": True,
                "warnUsers": True,
                "banUsers": True,
                "manageUserGroups": True,
            },
            "admin": {
                "accessAdminPanel": True,
                "manageSettings": True,
                "viewLogs": True,
                "managePlugins": True,
                "manageThemes": True,
            },
        },
    },
)
