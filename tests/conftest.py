"""
Фикстуры для тестов: in-memory SQLite, хранилище в памяти, fakeredis.
"""
import os

# Настройки должны быть выставлены до первого импорта blog.*
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["REGISTER_RATE_LIMIT"] = "1000/minute"
os.environ["LOGIN_RATE_LIMIT"] = "1000/minute"

import fakeredis
import pytest
from fastapi.testclient import TestClient

from blog.models import Base
from blog.schemas import Role, UserCreate, UserResponse
from blog.services.auth_service import create_user
from blog.services.cache import cache
from blog.storage import MemoryStorage
from blog.utils.database import SessionLocal, engine
from blog.utils.security import create_access_token

PASSWORD = "secret123"


@pytest.fixture
def db_tables():
    """Чистые таблицы на каждый тест."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def client(db_tables, monkeypatch):
    """TestClient с поднятым lifespan и fakeredis вместо Redis."""
    from blog.main import app

    monkeypatch.setattr(cache, "_client", fakeredis.FakeAsyncRedis(decode_responses=True))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db_tables):
    """Создать пользователя с нужной ролью; вернуть (viewer, заголовки)."""
    def _make(username: str, role: Role = Role.USER):
        with SessionLocal() as db:
            db_user = create_user(
                db,
                UserCreate(
                    email=f"{username.lower()}@blog.com",
                    username=username,
                    password=PASSWORD,
                ),
                role=role,
            )
            viewer = UserResponse.model_validate(db_user)
        token = create_access_token(data={"sub": viewer.id})
        return viewer, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def admin(make_user):
    return make_user("admin", Role.ADMIN)


@pytest.fixture
def author(make_user):
    return make_user("author", Role.AUTHOR)


@pytest.fixture
def reader(make_user):
    return make_user("reader", Role.USER)
