"""
API endpoints для публикаций
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from blog.config import settings
from blog.dependencies import get_current_user, get_post_repository
from blog.schemas import Post, PostCreate, PostUpdate, UserResponse
from blog.services.post_services import PostRepository
from blog.utils.exceptions import NotFound

router = APIRouter(prefix=f"{settings.API_PREFIX}/v1/posts", tags=["posts"])

# Хендлеры синхронные: storage adapter блокирующий, FastAPI гоняет их в пуле потоков


# ==========================
# ПОЛУЧИТЬ СПИСОК ВСЕХ ПУБЛИКАЦИЙ
# ==========================

@router.get("", response_model=List[Post])
def list_posts(
    q: Optional[str] = None,
    tag: Optional[str] = None,
    repo: PostRepository = Depends(get_post_repository),
):
    """
    Получаем список всех постов, от новых к старым.

    Не требует авторизации. q - поиск по заголовку/контенту,
    tag - только посты с этим тегом.
    """
    if q or tag:
        return repo.search(q=q, tag=tag)
    return repo.list_all()


# ==========================
# ПОЛУЧИТЬ ОДНУ ПУБЛИКАЦИЮ
# ==========================

@router.get("/{post_id}", response_model=Post)
def get_post(
    post_id: str,
    repo: PostRepository = Depends(get_post_repository),
):
    """
    Получаем пост по id. Комментарии отдаются отдельным запросом.
    """
    post = repo.get_by_id(post_id)
    if post is None:
        raise NotFound("Post not found")
    return post


# =========================
# СОЗДАНИЕ НОВОЙ ПУБЛИКАЦИИ
# =========================

@router.post("", response_model=Post, status_code=status.HTTP_201_CREATED)
def create_post(
    post: PostCreate,
    current_user: UserResponse = Depends(get_current_user),
    repo: PostRepository = Depends(get_post_repository),
):
    """
    Создание публикации от имени текущего пользователя (admin или author).
    """
    return repo.create(post, current_user)


# =====================================
# ОБНОВЛЕНИЕ(РЕДАКТИРОВАНИЕ) ПУБЛИКАЦИИ
# =====================================

@router.put("/{post_id}", response_model=Post)
def update_post(
    post_id: str,
    post_update: PostUpdate,
    current_user: UserResponse = Depends(get_current_user),
    repo: PostRepository = Depends(get_post_repository),
):
    """
    Обновление (редактирование) поста. Только владелец или admin.
    """
    post = repo.update(post_id, post_update, current_user)
    if post is None:
        raise NotFound("Post not found")
    return post


# ==================
# УДАЛИТЬ ПУБЛИКАЦИЮ
# ==================

@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: str,
    current_user: UserResponse = Depends(get_current_user),
    repo: PostRepository = Depends(get_post_repository),
):
    """
    Удаление поста. Только владелец или admin.
    """
    if not repo.delete(post_id, current_user):
        raise NotFound("Post not found")
    return None
