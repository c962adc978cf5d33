# blog/storage/base.py

"""
Контракт storage adapter.

Коллекция (все посты или все комментарии) читается и пишется целиком.
Запись атомарна: при ошибке остается предыдущее состояние коллекции.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

POSTS_KEY = "blog_posts"
COMMENTS_KEY = "blog_comments"


class StorageAdapter(ABC):
    name = "abstract"

    @abstractmethod
    def read(self, key: str) -> Optional[List[dict]]:
        """
        Вернуть записи коллекции или None, если коллекция ни разу не записывалась
        """

    @abstractmethod
    def write(self, key: str, records: List[dict]) -> None:
        """
        Заменить коллекцию целиком
        """

    def close(self) -> None:
        pass
