# blog/storage/memory.py

from copy import deepcopy
from threading import RLock
from typing import Dict, List, Optional

from blog.storage.base import StorageAdapter


class MemoryStorage(StorageAdapter):
    """
    Хранилище в памяти процесса (демо-режим и тесты).

    Отдает и принимает копии, чтобы вызывающий код не мог
    изменить коллекцию в обход write().
    """

    name = "memory"

    def __init__(self):
        self._collections: Dict[str, List[dict]] = {}
        self._lock = RLock()

    def read(self, key: str) -> Optional[List[dict]]:
        with self._lock:
            records = self._collections.get(key)
            return deepcopy(records) if records is not None else None

    def write(self, key: str, records: List[dict]) -> None:
        snapshot = deepcopy(list(records))
        with self._lock:
            self._collections[key] = snapshot
