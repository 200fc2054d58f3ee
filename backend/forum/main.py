"""FastAPI 애플리케이션 진입점. 미들웨어, API 라우터, 스키마 생성과 기본 그룹 시드를 등록합니다."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from forum.config import settings
from forum.database import Base, SessionLocal, engine
import forum.models  # noqa: F401 - 모델 import로 metadata 등록
from forum.routers import auth, forums, groups, messages, posts, threads, users
from forum.services import group_service

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Forum API",
    description="카테고리/포럼/스레드/게시글, 쪽지, 사용자 그룹 권한을 제공하는 포럼 REST API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register all routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(groups.router)
app.include_router(forums.router)
app.include_router(threads.router)
app.include_router(posts.router)
app.include_router(messages.router)


@app.on_event("startup")
def ensure_schema():
    # 누락된 테이블을 자동 생성하고 기본 그룹을 채웁니다.
    Base.metadata.create_all(bind=engine)
    if not settings.SEED_DEFAULT_GROUPS:
        return
    db = SessionLocal()
    try:
        group_service.seed_default_groups(db)
    finally:
        db.close()
    logger.info("schema ready database=%s", engine.url.render_as_string(hide_password=True))


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "Forum API"}
