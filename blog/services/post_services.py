# blog/services/post_services.py

"""
Сервисный слой для постов.

Знает про storage adapter и проверку прав, но не про HTTP-статусы.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Type, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ValidationError

from blog.schemas import AuthorRef, Post, PostCreate, PostUpdate, UserResponse
from blog.services.guard import Action, ensure_can_mutate
from blog.storage import POSTS_KEY, StorageAdapter
from blog.utils.exceptions import ConflictError, StorageError

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 150
EXCERPT_SUFFIX = "..."
# Поиск по слишком коротким строкам не выполняем
MIN_QUERY_LENGTH = 3


def derive_excerpt(content: str) -> str:
    """
    Первые 150 символов контента плюс многоточие.
    Многоточие добавляется всегда, даже к короткому контенту.
    """
    return content[:EXCERPT_LENGTH] + EXCERPT_SUFFIX


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


ModelT = TypeVar("ModelT", bound=BaseModel)


def load_records(storage: StorageAdapter, key: str, model: Type[ModelT]) -> List[ModelT]:
    """
    Прочитать коллекцию и провалидировать записи.
    Битые данные в хранилище - это StorageError (503), а не 500.
    """
    records = storage.read(key)
    if records is None:
        return []
    if not isinstance(records, list):
        logger.error("Collection %s is not a list", key)
        raise StorageError()
    try:
        return [model.model_validate(record) for record in records]
    except ValidationError as exc:
        logger.error("Collection %s holds invalid records: %s", key, exc)
        raise StorageError() from exc


class PostRepository:
    """
    CRUD над коллекцией постов.

    Новые посты добавляются в начало коллекции, поэтому list_all()
    отдает их от новых к старым. Проверка прав выполняется здесь же,
    даже если маршрут уже проверил ее сам.
    """

    def __init__(self, storage: StorageAdapter, clock: Callable[[], datetime] = utcnow):
        self.storage = storage
        self._clock = clock

    def _load(self) -> List[Post]:
        return load_records(self.storage, POSTS_KEY, Post)

    def _save(self, posts: List[Post]) -> None:
        self.storage.write(POSTS_KEY, [post.to_record() for post in posts])

    def list_all(self) -> List[Post]:
        return self._load()

    def get_by_id(self, post_id: str) -> Optional[Post]:
        for post in self._load():
            if post.id == post_id:
                return post
        return None

    def search(self, q: Optional[str] = None, tag: Optional[str] = None) -> List[Post]:
        """
        Фильтр по подстроке в заголовке/контенте (без учета регистра)
        и по точному совпадению тега. Порядок - как в list_all().
        """
        posts = self._load()

        if q:
            if len(q) < MIN_QUERY_LENGTH:
                return []
            needle = q.lower()
            posts = [
                p for p in posts
                if needle in p.title.lower() or needle in p.content.lower()
            ]

        if tag:
            posts = [p for p in posts if tag in p.tags]

        return posts

    def create(self, post_in: PostCreate, viewer: Optional[UserResponse]) -> Post:
        """
        Создать пост от имени viewer и положить его в начало коллекции.
        """
        ensure_can_mutate(viewer, None, Action.CREATE)

        now = self._clock()
        excerpt = (post_in.excerpt or "").strip() or derive_excerpt(post_in.content)
        post = Post(
            id=uuid4().hex,
            title=post_in.title,
            content=post_in.content,
            excerpt=excerpt,
            author=AuthorRef(id=viewer.id, username=viewer.username),
            tags=list(post_in.tags),
            created_at=now,
            updated_at=now,
        )

        posts = self._load()
        self._save([post] + posts)

        logger.info("Post %s created by %s", post.id, viewer.username)
        return post

    def update(
        self,
        post_id: str,
        post_update: PostUpdate,
        viewer: Optional[UserResponse],
        expected_updated_at: Optional[datetime] = None,
    ) -> Optional[Post]:
        """
        Обновить пост:
        - None  -> пост не найден;
        - Post  -> успешное обновление.

        Чужой пост -> PermissionDeniedError, устаревший
        expected_updated_at -> ConflictError.
        """
        posts = self._load()
        index = next((i for i, p in enumerate(posts) if p.id == post_id), None)
        if index is None:
            return None

        current = posts[index]
        ensure_can_mutate(viewer, current, Action.EDIT)

        if expected_updated_at is None:
            expected_updated_at = post_update.expected_updated_at
        if expected_updated_at is not None and expected_updated_at != current.updated_at:
            logger.warning("Stale update of post %s rejected", post_id)
            raise ConflictError()

        update_data = post_update.model_dump(
            exclude_unset=True,
            exclude_none=True,
            exclude={"expected_updated_at"},
        )

        # Пустой excerpt явно просит пересчитать его из контента
        if "excerpt" in update_data:
            excerpt = update_data["excerpt"].strip()
            content = update_data.get("content", current.content)
            update_data["excerpt"] = excerpt or derive_excerpt(content)

        # updated_at не должен уходить назад, даже если часы сбились
        update_data["updated_at"] = max(self._clock(), current.updated_at)

        updated = current.model_copy(update=update_data)
        posts[index] = updated
        self._save(posts)

        logger.info("Post %s updated by %s", post_id, viewer.username)
        return updated

    def delete(self, post_id: str, viewer: Optional[UserResponse]) -> bool:
        """
        Удалить пост:
        - False -> пост не найден;
        - True  -> успешно удалён.
        """
        posts = self._load()
        post = next((p for p in posts if p.id == post_id), None)
        if post is None:
            return False

        ensure_can_mutate(viewer, post, Action.DELETE)

        self._save([p for p in posts if p.id != post_id])

        logger.info("Post %s deleted by %s", post_id, viewer.username)
        return True
