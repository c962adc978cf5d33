# blog/schemas/__init__.py

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional, Union

from pydantic import AwareDatetime, BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

# Непустая строка без пробелов по краям
NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CamelModel(BaseModel):
    """
    Базовая модель для постов и комментариев: в JSON и в хранилище
    поля называются в camelCase (createdAt, postId), в Python - snake_case
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict:
        """Словарь для записи в storage adapter"""
        return self.model_dump(mode="json", by_alias=True)


# =======================
# СХЕМЫ ДЛЯ ПОЛЬЗОВАТЕЛЕЙ
# =======================

class Role(str, Enum):
    ADMIN = "admin"
    AUTHOR = "author"
    USER = "user"


class UserBase(BaseModel):
    """
    Базовая схема пользователя
    """
    email: EmailStr
    username: NonBlankStr


class UserCreate(UserBase):
    """
    Схема для создания пользователя (регистрация)
    """
    password: str


class UserLogin(BaseModel):
    """
    Схема для логина. Авторизация либо по e-mail, либо по username
    """
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    password: str


class UserResponse(UserBase):
    """
    Схема ответа с инфо о пользователе.

    Этот же объект передается в репозитории как viewer.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    role: Role = Role.USER


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    user: Optional[UserResponse] = None


class TokenRefreshRequest(BaseModel):
    refresh_token: str


class TokenLogoutRequest(BaseModel):
    refresh_token: str


# ====================
# СХЕМЫ ДЛЯ ПУБЛИКАЦИИ
# ====================

def split_tags(value):
    """
    Теги приходят списком или строкой через запятую.
    Пробелы по краям убираем, пустые отбрасываем, дубликаты оставляем.
    """
    if value is None:
        return value
    if isinstance(value, str):
        value = value.split(",")
    return [tag.strip() for tag in value if isinstance(tag, str) and tag.strip()]


class AuthorRef(CamelModel):
    """Снимок автора на момент создания поста"""
    id: str
    username: str


class Post(CamelModel):
    """Пост в том виде, в котором он хранится и отдается клиенту"""
    id: str
    title: str
    content: str
    excerpt: str
    author: AuthorRef
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class PostCreate(CamelModel):
    """Создание поста"""
    title: NonBlankStr
    content: NonBlankStr
    excerpt: Optional[str] = None
    tags: Union[List[str], str] = Field(default_factory=list)

    normalize_tags = field_validator("tags", mode="after")(split_tags)


class PostUpdate(CamelModel):
    """
    Обновление поста.

    expected_updated_at - необязательная проверка на потерянное обновление:
    если пост успел измениться, обновление отклоняется. Время только
    с часовым поясом, иначе сравнение с сохраненным UTC бессмысленно.
    """
    title: Optional[NonBlankStr] = None
    content: Optional[NonBlankStr] = None
    excerpt: Optional[str] = None
    tags: Optional[Union[List[str], str]] = None
    expected_updated_at: Optional[AwareDatetime] = None

    normalize_tags = field_validator("tags", mode="after")(split_tags)


# ======================
# СХЕМЫ ДЛЯ КОММЕНТАРИЕВ
# ======================

class Comment(CamelModel):
    """Комментарий; у ответов список replies всегда пуст"""
    id: str
    post_id: str
    author: str
    text: str
    created_at: datetime
    replies: List["Comment"] = Field(default_factory=list)


class CommentCreate(BaseModel):
    """Создание комментария или ответа"""
    text: NonBlankStr


class HealthResponse(BaseModel):
    status: str
    storage: str
    redis: bool
