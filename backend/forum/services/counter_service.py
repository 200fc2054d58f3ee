"""Counter Service 도메인 서비스 레이어입니다. 포럼/스레드 비정규화 카운터와 last_* 포인터를 유지합니다.

모든 함수는 호출자의 트랜잭션 안에서 실행되며 commit 하지 않습니다. 증감은 SQL 레벨
``column + delta`` 로 반영하고 세션에 올라온 객체에도 동기화합니다.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from forum.models.forum import Forum, Thread, Post

logger = logging.getLogger(__name__)


def apply_counter_delta(
    db: Session,
    forum_id: Optional[int] = None,
    thread_id: Optional[int] = None,
    threads: int = 0,
    posts: int = 0,
) -> None:
    """포럼/스레드 카운터 증감의 단일 진입점.

    ``threads`` 는 포럼의 thread_count 에만, ``posts`` 는 포럼과 스레드의 post_count 에 함께 반영한다.
    """
    if forum_id is not None:
        apply_forum_delta(db, forum_id, threads=threads, posts=posts)
    if thread_id is not None:
        apply_thread_delta(db, thread_id, posts=posts)
    logger.debug(
        "counter delta applied forum_id=%s thread_id=%s threads=%s posts=%s",
        forum_id, thread_id, threads, posts,
    )


def apply_forum_delta(db: Session, forum_id: int, threads: int = 0, posts: int = 0) -> None:
    values = {}
    if threads:
        values["thread_count"] = Forum.thread_count + int(threads)
    if posts:
        values["post_count"] = Forum.post_count + int(posts)
    if not values:
        return
    db.query(Forum).filter(Forum.forum_id == forum_id).update(values, synchronize_session="fetch")


def apply_thread_delta(db: Session, thread_id: int, posts: int = 0) -> None:
    if not posts:
        return
    db.query(Thread).filter(Thread.thread_id == thread_id).update(
        {"post_count": Thread.post_count + int(posts)},
        synchronize_session="fetch",
    )


def touch_thread(thread: Thread, post: Post) -> None:
    thread.last_post_id = post.post_id
    thread.last_post_date = post.created_at
    thread.last_post_user_id = post.user_id


def touch_forum(forum: Forum, thread: Thread, post: Optional[Post] = None) -> None:
    forum.last_thread_id = thread.thread_id
    forum.last_thread_title = thread.title
    if post is not None:
        forum.last_post_id = post.post_id
        forum.last_post_date = post.created_at
        forum.last_post_user_id = post.user_id
    else:
        forum.last_post_id = thread.last_post_id
        forum.last_post_date = thread.last_post_date or thread.updated_at
        forum.last_post_user_id = thread.last_post_user_id


def clear_forum_pointers(forum: Forum) -> None:
    forum.last_thread_id = None
    forum.last_thread_title = None
    forum.last_post_id = None
    forum.last_post_date = None
    forum.last_post_user_id = None


def clear_thread_pointers(thread: Thread) -> None:
    thread.last_post_id = None
    thread.last_post_date = None
    thread.last_post_user_id = None


def latest_thread(db: Session, forum_id: int, exclude_thread_id: Optional[int] = None) -> Optional[Thread]:
    query = db.query(Thread).filter(Thread.forum_id == forum_id)
    if exclude_thread_id is not None:
        query = query.filter(Thread.thread_id != exclude_thread_id)
    return query.order_by(Thread.updated_at.desc(), Thread.thread_id.desc()).first()


def latest_post(db: Session, thread_id: int, exclude_post_id: Optional[int] = None) -> Optional[Post]:
    query = db.query(Post).filter(Post.thread_id == thread_id)
    if exclude_post_id is not None:
        query = query.filter(Post.post_id != exclude_post_id)
    return query.order_by(Post.created_at.desc(), Post.post_id.desc()).first()


def recompute_forum_last_thread(db: Session, forum: Forum, exclude_thread_id: Optional[int] = None) -> Optional[Thread]:
    db.flush()
    thread = latest_thread(db, forum.forum_id, exclude_thread_id=exclude_thread_id)
    if thread is None:
        clear_forum_pointers(forum)
    else:
        touch_forum(forum, thread)
    logger.info(
        "forum last thread recomputed forum_id=%s last_thread_id=%s",
        forum.forum_id, forum.last_thread_id,
    )
    return thread


def recompute_thread_last_post(db: Session, thread: Thread, exclude_post_id: Optional[int] = None) -> Optional[Post]:
    db.flush()
    post = latest_post(db, thread.thread_id, exclude_post_id=exclude_post_id)
    if post is None:
        clear_thread_pointers(thread)
    else:
        touch_thread(thread, post)
    logger.info(
        "thread last post recomputed thread_id=%s last_post_id=%s",
        thread.thread_id, thread.last_post_id,
    )
    return post

