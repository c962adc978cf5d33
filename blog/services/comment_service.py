# blog/services/comment_service.py

"""
Сервисный слой для комментариев.

Комментарии только добавляются: ни редактирования, ни удаления.
Вложенность ровно одна - ответы на комментарии верхнего уровня.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from blog.schemas import Comment, UserResponse
from blog.services.guard import ensure_can_comment
from blog.services.post_services import load_records, utcnow
from blog.storage import COMMENTS_KEY, StorageAdapter

logger = logging.getLogger(__name__)


def group_by_post(comments: List[Comment]) -> Dict[str, List[Comment]]:
    """
    Индекс post_id -> комментарии, порядок внутри группы сохраняется
    """
    index: Dict[str, List[Comment]] = {}
    for comment in comments:
        index.setdefault(comment.post_id, []).append(comment)
    return index


class CommentRepository:

    def __init__(self, storage: StorageAdapter, clock: Callable[[], datetime] = utcnow):
        self.storage = storage
        self._clock = clock

    def _load(self) -> List[Comment]:
        return load_records(self.storage, COMMENTS_KEY, Comment)

    def _save(self, comments: List[Comment]) -> None:
        self.storage.write(COMMENTS_KEY, [c.to_record() for c in comments])

    def _new_comment(self, post_id: str, viewer: UserResponse, text: str) -> Comment:
        return Comment(
            id=uuid4().hex,
            post_id=post_id,
            author=viewer.username,
            text=text.strip(),
            created_at=self._clock(),
        )

    def list_by_post(self, post_id: str) -> List[Comment]:
        """
        Комментарии поста в порядке добавления, каждый со своими ответами.
        """
        return group_by_post(self._load()).get(post_id, [])

    def add(self, post_id: str, viewer: Optional[UserResponse], text: str) -> Comment:
        """
        Добавить комментарий верхнего уровня от имени viewer.

        Существование поста здесь не проверяется - это делает маршрут.
        """
        ensure_can_comment(viewer)

        comment = self._new_comment(post_id, viewer, text)
        comments = self._load()
        comments.append(comment)
        self._save(comments)

        logger.info("Comment %s added to post %s by %s", comment.id, post_id, viewer.username)
        return comment

    def add_reply(
        self,
        post_id: str,
        parent_id: str,
        viewer: Optional[UserResponse],
        text: str,
    ) -> Optional[Comment]:
        """
        Ответить на комментарий верхнего уровня.

        None -> у поста нет такого комментария (в том числе если
        parent_id указывает на ответ: ответы на ответы не поддерживаются).
        """
        ensure_can_comment(viewer)

        comments = self._load()
        parent = next(
            (c for c in comments if c.id == parent_id and c.post_id == post_id),
            None,
        )
        if parent is None:
            return None

        reply = self._new_comment(post_id, viewer, text)
        parent.replies.append(reply)
        self._save(comments)

        logger.info("Reply %s added to comment %s by %s", reply.id, parent_id, viewer.username)
        return reply
