# blog/models.py

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow():
    return datetime.now(timezone.utc)


def _new_id():
    return uuid4().hex


class User(Base):
    """
    Модель пользователя
    """
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=_new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class StoredCollection(Base):
    """
    Коллекция записей (посты или комментарии), хранимая целиком
    как JSON под одним ключом
    """

    __tablename__ = "collections"

    key = Column(String(100), primary_key=True)
    data = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
