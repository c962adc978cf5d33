# blog/dependencies.py

"""
Зависимости для использования в endpoints
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from blog.schemas import UserResponse
from blog.services.auth_service import get_user_by_token
from blog.services.comment_service import CommentRepository
from blog.services.post_services import PostRepository
from blog.storage import StorageAdapter
from blog.utils.database import get_db
from blog.utils.exceptions import AuthenticationError

security = HTTPBearer(auto_error=False)


async def get_current_user_optional(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
        db: Session = Depends(get_db),
) -> Optional[UserResponse]:
    """
    Необязательный текущий пользователь.

    Если токена нет или он невалиден - возвращаем None,
    иначе - viewer (UserResponse).
    """
    if credentials is None:
        return None

    user = get_user_by_token(db, credentials.credentials)
    if user is None:
        return None
    return UserResponse.model_validate(user)


async def get_current_user(
        viewer: Optional[UserResponse] = Depends(get_current_user_optional),
) -> UserResponse:
    """
    Получаем текущего авторизованного пользователя

    Извлекаем Bearer токен из заголовка Authorization, декодируем токен,
    из токена берем user_id и ищем пользователя в БД.
    Нет токена или он невалиден - 401.
    """
    if viewer is None:
        raise AuthenticationError()
    return viewer


def get_storage(request: Request) -> StorageAdapter:
    """Хранилище, созданное при старте приложения"""
    return request.app.state.storage


def get_post_repository(storage: StorageAdapter = Depends(get_storage)) -> PostRepository:
    return PostRepository(storage)


def get_comment_repository(storage: StorageAdapter = Depends(get_storage)) -> CommentRepository:
    return CommentRepository(storage)
