"""Message(쪽지) 도메인의 SQLAlchemy 모델 정의입니다."""

from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from forum.database import Base


class Message(Base):
    __tablename__ = "messages"

    message_id = Column(Integer, primary_key=True, autoincrement=True)
    sender_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    receiver_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    # 받는 사람 쪽 개인 보관함. NULL 이면 받은 편지함
    folder_id = Column(Integer, ForeignKey("message_folders.folder_id"), nullable=True)
    subject = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime, nullable=True)
    is_deleted_by_sender = Column(Boolean, nullable=False, default=False)
    is_deleted_by_receiver = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    sender = relationship("User", foreign_keys=[sender_id])
    receiver = relationship("User", foreign_keys=[receiver_id])
    folder = relationship("MessageFolder", back_populates="messages")

    __table_args__ = (
        Index("idx_message_receiver", "receiver_id", "is_deleted_by_receiver", "created_at"),
        Index("idx_message_sender", "sender_id", "is_deleted_by_sender", "created_at"),
    )


class MessageFolder(Base):
    __tablename__ = "message_folders"

    folder_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    name = Column(String(50), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    messages = relationship("Message", back_populates="folder")

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_message_folder_user_name"),
    )
