# blog/services/auth_service.py

"""
Сервисный слой для регистрации, логина и проверки токенов.

Знает про модели, БД, хэширование и JWT, но не про HTTP-исключения.
"""

import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from blog.models import User
from blog.schemas import Role, UserCreate, UserLogin, UserResponse
from blog.utils.exceptions import AppError
from blog.utils.security import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from blog.services.auth_tokens import (
    store_refresh_token,
    get_refresh_token_owner,
    revoke_refresh_token,
)

logger = logging.getLogger(__name__)


class UserAlreadyExistsError(AppError):
    status_code = 400
    code = "user_exists"
    detail = "User already registered"


class WeakPasswordError(AppError):
    status_code = 400
    code = "weak_password"
    detail = "Password is too weak"


def validate_password_strength(password: str) -> None:
    """
    Проверяет базовую сложность пароля.

    Условия:
    - длина не меньше 8 символов;
    - минимум одна буква;
    - минимум одна цифра;
    """

    if len(password) < 8:
        raise WeakPasswordError("Password must be at least 8 characters")

    if not any(ch.isalpha() for ch in password):
        raise WeakPasswordError("Password must contain at least one letter")

    if not any(ch.isdigit() for ch in password):
        raise WeakPasswordError("Password must contain at least one digit")


async def issue_tokens(db_user: User) -> dict:
    """
    Выдать пару access/refresh и запомнить jti refresh-токена в Redis.
    """
    access_token = create_access_token(data={"sub": db_user.id})
    refresh_token = create_refresh_token(data={"sub": db_user.id})

    payload = decode_token(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
    await store_refresh_token(payload["jti"], db_user.id)

    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "user": UserResponse.model_validate(db_user),
    }


def create_user(
    db: Session,
    user_in: UserCreate,
    role: Role = Role.USER,
) -> User:
    """
    Создать пользователя в БД.

    Email и username должны быть свободны, иначе UserAlreadyExistsError.
    """
    if db.query(User).filter(User.email == user_in.email).first():
        raise UserAlreadyExistsError("Email already registered")

    if db.query(User).filter(User.username == user_in.username).first():
        raise UserAlreadyExistsError("Username already registered")

    db_user = User(
        email=user_in.email,
        username=user_in.username,
        hashed_password=hash_password(user_in.password),
        role=Role(role).value,
    )

    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


async def register_user_in_db(
    db: Session,
    user_in: UserCreate,
) -> dict:
    """
    Зарегистрировать нового пользователя с ролью user и сразу выдать токены.
    """
    validate_password_strength(user_in.password)
    db_user = create_user(db, user_in)
    logger.info("User %s registered", db_user.username)
    return await issue_tokens(db_user)


async def authenticate_user(
    db: Session,
    creds: UserLogin,
) -> Optional[dict]:
    """
    Аутентифицировать пользователя по email (или username) и паролю.

    Возвращает словарь с токенами или None, если данные неверны.
    """
    if not creds.email and not creds.username:
        return None

    conditions = []
    if creds.email:
        conditions.append(User.email == creds.email)
    if creds.username:
        conditions.append(User.username == creds.username)

    db_user = db.query(User).filter(or_(*conditions)).first()
    if not db_user or not verify_password(creds.password, db_user.hashed_password):
        logger.warning("Failed login for %s", creds.email or creds.username)
        return None

    logger.info("User %s logged in", db_user.username)
    return await issue_tokens(db_user)


def get_user_by_token(db: Session, token: str) -> Optional[User]:
    """
    verify(token): пользователь по access-токену или None.
    """
    payload = decode_token(token, expected_type=ACCESS_TOKEN_TYPE)
    if payload is None:
        return None

    user_id = payload.get("sub")
    if user_id is None:
        return None

    return db.get(User, user_id)


async def refresh_access_token(db: Session, refresh_token: str) -> Optional[dict]:
    """
    Обменять активный refresh-токен на новый access-токен.
    None -> токен невалиден, отозван или пользователя уже нет.
    """
    payload = decode_token(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
    if payload is None:
        return None

    jti = payload.get("jti")
    user_id = payload.get("sub")
    if not jti or not user_id:
        return None

    # Проверяем, не отозван ли токен
    if await get_refresh_token_owner(jti) != user_id:
        return None

    db_user = db.get(User, user_id)
    if db_user is None:
        return None

    return {
        "access_token": create_access_token(data={"sub": db_user.id}),
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "user": UserResponse.model_validate(db_user),
    }


async def logout_user(refresh_token: str) -> bool:
    payload = decode_token(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
    if payload is None or not payload.get("jti"):
        return False

    # Отзываем refresh-токен: удаляем запись из Redis
    await revoke_refresh_token(payload["jti"])
    return True
