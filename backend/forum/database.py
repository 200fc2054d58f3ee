"""SQLAlchemy 엔진/세션 구성과 트랜잭션 헬퍼입니다."""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from forum.config import settings

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """하나의 논리 작업을 단일 트랜잭션으로 묶는다.

    블록이 정상 종료되면 commit, 예외가 발생하면 rollback 후 원래 예외를 그대로 다시 던진다.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
