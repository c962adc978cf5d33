# blog/routes/auth.py

"""
API endpoints для регистрации и авторизации.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from blog.config import settings
from blog.dependencies import get_current_user
from blog.schemas import (
    UserCreate,
    UserLogin,
    UserResponse,
    TokenResponse,
    TokenRefreshRequest,
    TokenLogoutRequest,
)
from blog.services.auth_service import (
    authenticate_user,
    logout_user,
    refresh_access_token,
    register_user_in_db,
)
from blog.utils.database import get_db
from blog.utils.exceptions import AuthenticationError
from blog.utils.limiter import limiter

# Router для всех auth-эндпоинтов
router = APIRouter(
    prefix=f"{settings.API_PREFIX}/v1/auth",
    tags=["auth"],
    responses={400: {"description": "Bad Request"}},
)


# ===============================
# РЕГИСТРАЦИЯ НОВОГО ПОЛЬЗОВАТЕЛЯ
# ===============================

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.REGISTER_RATE_LIMIT)
async def register_user(
        user: UserCreate,
        request: Request,
        db: Session = Depends(get_db)
):
    """Регистрация: новый пользователь получает роль user и сразу токены"""
    return await register_user_in_db(db, user)


# ==============================
# Авторизация созданного профиля
# ==============================

@router.post("/login", response_model=TokenResponse, status_code=status.HTTP_200_OK)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login_user(
        user: UserLogin,
        request: Request,
        db: Session = Depends(get_db)
):
    """Логин пользователя"""

    tokens = await authenticate_user(db, user)

    # Если пользователь не найден или неверный пароль
    if tokens is None:
        raise AuthenticationError("Incorrect username or password")

    return tokens


# ==================
# ПРОВЕРКА ТОКЕНА
# ==================

@router.get("/verify", response_model=UserResponse)
async def verify_token(current_user: UserResponse = Depends(get_current_user)):
    """Пользователь, которому принадлежит access-токен"""
    return current_user


# ================
# REFRESH ENDPOINT
# ================

@router.post("/refresh", response_model=TokenResponse,
             status_code=status.HTTP_200_OK)
async def refresh_token_endpoint(
        body: TokenRefreshRequest,
        db: Session = Depends(get_db)
):
    tokens = await refresh_access_token(db, body.refresh_token)
    if tokens is None:
        raise AuthenticationError("Invalid or expired refresh token")
    return tokens


# ===============
# LOGOUT ENDPOINT
# ===============

@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(body: TokenLogoutRequest):
    if not await logout_user(body.refresh_token):
        raise AuthenticationError("Invalid or expired refresh token")
    return None
