# blog/storage/__init__.py

from blog.storage.base import COMMENTS_KEY, POSTS_KEY, StorageAdapter
from blog.storage.memory import MemoryStorage
from blog.storage.remote import RemoteStorage
from blog.storage.sql import SqlStorage


def build_storage(settings, session_factory=None) -> StorageAdapter:
    """
    Выбрать реализацию хранилища по настройке STORAGE_BACKEND
    """
    backend = settings.STORAGE_BACKEND

    if backend == "memory":
        return MemoryStorage()

    if backend == "remote":
        if not settings.REMOTE_STORAGE_URL:
            raise ValueError("REMOTE_STORAGE_URL is required for the remote storage backend")
        return RemoteStorage(
            settings.REMOTE_STORAGE_URL,
            token=settings.REMOTE_STORAGE_TOKEN,
            timeout=settings.REMOTE_STORAGE_TIMEOUT,
        )

    if session_factory is None:
        from blog.utils.database import SessionLocal
        session_factory = SessionLocal
    return SqlStorage(session_factory)


__all__ = [
    "COMMENTS_KEY",
    "POSTS_KEY",
    "StorageAdapter",
    "MemoryStorage",
    "RemoteStorage",
    "SqlStorage",
    "build_storage",
]
