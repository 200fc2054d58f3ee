"""Message Service 도메인 서비스 레이어입니다. 쪽지 발송, 받은/보낸 편지함과 개인 보관함, 읽음·삭제 상태를 관리합니다."""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from forum.config import settings
from forum.database import transaction
from forum.models.message import Message, MessageFolder
from forum.models.user import User
from forum.schemas.message import MessageCreate
from forum.utils.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from forum.utils.helpers import clamp_page, pagination_meta

logger = logging.getLogger(__name__)

FOLDERS = ("inbox", "sent")


def _serialize(message: Message) -> Message:
    setattr(message, "sender_name", message.sender.username if message.sender else None)
    setattr(message, "receiver_name", message.receiver.username if message.receiver else None)
    return message


def _inbox_query(db: Session, user_id: int):
    return db.query(Message).filter(
        Message.receiver_id == user_id,
        Message.is_deleted_by_receiver == False,  # noqa: E712
    )


def _sent_query(db: Session, user_id: int):
    return db.query(Message).filter(
        Message.sender_id == user_id,
        Message.is_deleted_by_sender == False,  # noqa: E712
    )


def unread_count(db: Session, user_id: int) -> int:
    return _inbox_query(db, user_id).filter(Message.is_read == False).count()  # noqa: E712


def send_message(db: Session, data: MessageCreate, current_user: User) -> Message:
    receiver = db.query(User).filter(User.username == data.receiver_username.strip()).first()
    if not receiver or not receiver.is_active:
        raise NotFoundError("받는 사용자를 찾을 수 없습니다.")
    if receiver.user_id == current_user.user_id:
        raise ValidationError("자기 자신에게는 쪽지를 보낼 수 없습니다.")
    subject = data.subject.strip()
    content = data.content.strip()
    if not subject or not content:
        raise ValidationError("제목과 내용을 모두 입력하세요.")
    if _inbox_query(db, receiver.user_id).count() >= settings.MAX_PMS_PER_USER:
        raise ValidationError("받는 사용자의 쪽지함이 가득 찼습니다.")

    message = Message(
        sender_id=current_user.user_id,
        receiver_id=receiver.user_id,
        subject=subject,
        content=content,
    )
    with transaction(db):
        db.add(message)
    db.refresh(message)
    logger.info("message sent message_id=%s from=%s to=%s", message.message_id, current_user.user_id, receiver.user_id)
    return _serialize(message)


def list_messages(db: Session, current_user: User, folder: str = "inbox", page: int = 1, limit: int = 20) -> dict:
    """편지함 목록. folder 는 inbox, sent 또는 사용자가 만든 보관함 이름이다."""
    page, limit, offset = clamp_page(page, limit)
    if folder == "inbox":
        # 보관함으로 옮긴 쪽지는 받은 편지함에서 빠진다.
        query = _inbox_query(db, current_user.user_id).filter(Message.folder_id.is_(None))
    elif folder == "sent":
        query = _sent_query(db, current_user.user_id)
    else:
        custom = (
            db.query(MessageFolder)
            .filter(MessageFolder.user_id == current_user.user_id, MessageFolder.name == folder)
            .first()
        )
        if not custom:
            raise NotFoundError("보관함을 찾을 수 없습니다.")
        query = _inbox_query(db, current_user.user_id).filter(Message.folder_id == custom.folder_id)
    total = query.count()
    rows = query.order_by(Message.created_at.desc(), Message.message_id.desc()).offset(offset).limit(limit).all()
    return {
        "folder": folder,
        "folders": list_folders(db, current_user),
        "messages": [_serialize(m) for m in rows],
        "unread_count": unread_count(db, current_user.user_id),
        "pagination": pagination_meta(total, page, limit),
    }


def _get_visible(db: Session, message_id: int, current_user: User) -> Message:
    message = db.query(Message).filter(Message.message_id == message_id).first()
    if not message:
        raise NotFoundError("쪽지를 찾을 수 없습니다.")
    is_sender = message.sender_id == current_user.user_id
    is_receiver = message.receiver_id == current_user.user_id
    if not is_sender and not is_receiver:
        raise AuthorizationError("쪽지를 볼 권한이 없습니다.")
    if (is_sender and message.is_deleted_by_sender) or (is_receiver and message.is_deleted_by_receiver):
        raise NotFoundError("쪽지를 찾을 수 없습니다.")
    return message


def get_message(db: Session, message_id: int, current_user: User) -> Message:
    message = _get_visible(db, message_id, current_user)
    if message.receiver_id == current_user.user_id and not message.is_read:
        with transaction(db):
            message.is_read = True
            message.read_at = datetime.utcnow()
        db.refresh(message)
    return _serialize(message)


def set_read(db: Session, message_id: int, is_read: bool, current_user: User) -> Message:
    message = _get_visible(db, message_id, current_user)
    if message.receiver_id != current_user.user_id:
        raise AuthorizationError("받은 쪽지만 읽음 상태를 변경할 수 있습니다.")
    with transaction(db):
        message.is_read = bool(is_read)
        message.read_at = datetime.utcnow() if is_read else None
    db.refresh(message)
    return _serialize(message)


def delete_message(db: Session, message_id: int, current_user: User) -> bool:
    """호출자 쪽 삭제 플래그를 세운다. 양쪽 모두 삭제하면 행을 지우고 True 를 돌려준다."""
    message = _get_visible(db, message_id, current_user)
    with transaction(db):
        if message.sender_id == current_user.user_id:
            message.is_deleted_by_sender = True
        if message.receiver_id == current_user.user_id:
            message.is_deleted_by_receiver = True
        hard_delete = bool(message.is_deleted_by_sender and message.is_deleted_by_receiver)
        if hard_delete:
            db.delete(message)
    logger.info("message deleted message_id=%s by=%s hard=%s", message_id, current_user.user_id, hard_delete)
    return hard_delete


def list_folders(db: Session, current_user: User) -> list[MessageFolder]:
    return (
        db.query(MessageFolder)
        .filter(MessageFolder.user_id == current_user.user_id)
        .order_by(MessageFolder.name.asc())
        .all()
    )


def _get_own_folder(db: Session, folder_id: int, current_user: User) -> MessageFolder:
    folder = db.query(MessageFolder).filter(MessageFolder.folder_id == folder_id).first()
    if not folder:
        raise NotFoundError("보관함을 찾을 수 없습니다.")
    if folder.user_id != current_user.user_id:
        raise AuthorizationError("본인 보관함만 사용할 수 있습니다.")
    return folder


def create_folder(db: Session, name: str, current_user: User) -> MessageFolder:
    text = (name or "").strip()
    if not text:
        raise ValidationError("보관함 이름을 입력하세요.")
    if len(text) > settings.MESSAGE_FOLDER_NAME_MAX_LENGTH:
        raise ValidationError(f"보관함 이름은 {settings.MESSAGE_FOLDER_NAME_MAX_LENGTH}자를 넘을 수 없습니다.")
    if text.lower() in FOLDERS:
        raise ValidationError("inbox, sent 는 보관함 이름으로 쓸 수 없습니다.")
    duplicate = (
        db.query(MessageFolder)
        .filter(MessageFolder.user_id == current_user.user_id, MessageFolder.name == text)
        .first()
    )
    if duplicate:
        raise ConflictError("같은 이름의 보관함이 이미 있습니다.")
    folder = MessageFolder(user_id=current_user.user_id, name=text)
    with transaction(db):
        db.add(folder)
    db.refresh(folder)
    return folder


def delete_folder(db: Session, folder_id: int, current_user: User) -> None:
    """보관함을 지우고 안에 있던 쪽지는 받은 편지함으로 되돌린다."""
    folder = _get_own_folder(db, folder_id, current_user)
    with transaction(db):
        db.query(Message).filter(Message.folder_id == folder.folder_id).update(
            {"folder_id": None}, synchronize_session="fetch",
        )
        db.delete(folder)
    logger.info("message folder deleted folder_id=%s by=%s", folder_id, current_user.user_id)


def move_message(db: Session, message_id: int, folder_id: int | None, current_user: User) -> Message:
    message = _get_visible(db, message_id, current_user)
    if message.receiver_id != current_user.user_id:
        raise AuthorizationError("받은 쪽지만 보관함으로 옮길 수 있습니다.")
    target = _get_own_folder(db, folder_id, current_user) if folder_id is not None else None
    with transaction(db):
        message.folder_id = target.folder_id if target else None
    db.refresh(message)
    return _serialize(message)
