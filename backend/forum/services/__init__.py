"""서비스 레이어 패키지 초기화 모듈입니다."""

from forum.services import (
    auth_service,
    counter_service,
    group_service,
    forum_service,
    thread_service,
    post_service,
    message_service,
    user_service,
)
