"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./forum.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # User groups
    DEFAULT_USER_GROUP: str = "member"
    ADMIN_GROUP: str = "administrator"
    SEED_DEFAULT_GROUPS: bool = True

    # Content rules
    FORUM_NAME_MIN_LENGTH: int = 3
    THREAD_TITLE_MAX_LENGTH: int = 200
    POST_MIN_LENGTH: int = 10
    POST_EDIT_WINDOW_MINUTES: int = 30
    SIGNATURE_MAX_LENGTH: int = 500
    PASSWORD_MIN_LENGTH: int = 8
    TAG_MAX_LENGTH: int = 50
    MAX_TAGS_PER_THREAD: int = 10
    REPORT_REASON_MAX_LENGTH: int = 1000

    # Popular threads: views + replies * weight
    POPULAR_REPLY_WEIGHT: int = 5

    # Private messaging
    MAX_PMS_PER_USER: int = 100
    MESSAGE_FOLDER_NAME_MAX_LENGTH: int = 50

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    class Config:
        # 실행 cwd와 무관하게 backend/.env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
