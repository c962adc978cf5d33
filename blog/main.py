"""
Главный файл приложения
Здесь инициализируется FastAPI и подключаются маршруты
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from slowapi.middleware import SlowAPIMiddleware
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog.config import settings
from blog.models import Base
from blog.routes import posts, comments, auth, users
from blog.schemas import HealthResponse
from blog.services.cache import cache
from blog.services.seed import seed_demo_data
from blog.storage import build_storage
from blog.utils.database import SessionLocal, engine
from blog.utils.exceptions import (
    app_error_handler,
    http_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
    AppError,
    rate_limit_exceeded_handler,
)
from blog.utils.limiter import limiter

# Setup logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Таблицы пользователей и коллекций
    Base.metadata.create_all(bind=engine)

    # Redis для refresh-токенов
    await cache.connect()

    # Хранилище постов и комментариев
    app.state.storage = build_storage(settings, SessionLocal)
    logger.info("Storage backend: %s", app.state.storage.name)

    if settings.SEED_DEMO_DATA:
        with SessionLocal() as db:
            seed_demo_data(db, app.state.storage)

    yield

    app.state.storage.close()
    await cache.close()


# Создаем приложение
app = FastAPI(
    title="Blog API",
    description="Markdown blog with posts and threaded comments",
    version="1.0.0",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    lifespan=lifespan,
)


# Глобальные обработчики ошибок

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# =============================
# Ограничитель частоты запросов
# =============================

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# CORS (чтобы фронтенд мог обращаться к API)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.DEBUG else ["http://localhost:3000"], # В продакшене указать конкретный домен
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    )


# ==============
# HEALTH-CHECKING
# ==============

@app.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Проверка, что приложение живо; redis=False - refresh-токены недоступны"""
    return {
        "status": "ok",
        "storage": request.app.state.storage.name,
        "redis": await cache.ping(),
    }


# =====================
# Подключаем все ROUTES
# =====================

app.include_router(auth.router) # Регистрация и авторизация
app.include_router(users.router) # Текущий пользователь
app.include_router(posts.router) # Посты
app.include_router(comments.router) # Комментарии


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
