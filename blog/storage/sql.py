# blog/storage/sql.py

import json
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from blog.models import StoredCollection
from blog.storage.base import StorageAdapter
from blog.utils.exceptions import StorageError

logger = logging.getLogger(__name__)


class SqlStorage(StorageAdapter):
    """
    Локальное персистентное key-value хранилище поверх SQLAlchemy.

    Каждая коллекция - одна строка таблицы collections с JSON внутри.
    """

    name = "sql"

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def read(self, key: str) -> Optional[List[dict]]:
        try:
            with self._session_factory() as db:
                row = db.get(StoredCollection, key)
                if row is None:
                    return None
                return json.loads(row.data)
        except SQLAlchemyError as exc:
            logger.exception("Failed to read collection %s", key)
            raise StorageError() from exc

    def write(self, key: str, records: List[dict]) -> None:
        data = json.dumps(list(records), ensure_ascii=False)
        try:
            # одна транзакция: либо вся коллекция, либо ничего
            with self._session_factory() as db, db.begin():
                row = db.get(StoredCollection, key)
                if row is None:
                    db.add(StoredCollection(key=key, data=data))
                else:
                    row.data = data
        except SQLAlchemyError as exc:
            logger.exception("Failed to write collection %s", key)
            raise StorageError() from exc
