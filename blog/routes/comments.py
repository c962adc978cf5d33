# blog/routes/comments.py

"""
API endpoints для комментариев.

Чтение доступно всем, добавление - любому авторизованному пользователю.
Комментарии не редактируются и не удаляются.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from blog.config import settings
from blog.dependencies import (
    get_comment_repository,
    get_current_user,
    get_post_repository,
)
from blog.schemas import Comment, CommentCreate, UserResponse
from blog.services.comment_service import CommentRepository
from blog.services.post_services import PostRepository
from blog.utils.exceptions import NotFound


router = APIRouter(prefix=f"{settings.API_PREFIX}/v1/comments", tags=["comments"])

# Хендлеры синхронные, как и в posts.py


@router.get("/{post_id}", response_model=List[Comment])
def list_comments(
    post_id: str,
    repo: CommentRepository = Depends(get_comment_repository),
):
    """
    Получить все комментарии к посту в порядке добавления.

    Не требует авторизации.
    """
    return repo.list_by_post(post_id)


@router.post(
    "/{post_id}",
    response_model=Comment,
    status_code=status.HTTP_201_CREATED
)
def create_comment(
    post_id: str,
    comment: CommentCreate,
    current_user: UserResponse = Depends(get_current_user),
    repo: CommentRepository = Depends(get_comment_repository),
    posts: PostRepository = Depends(get_post_repository),
):
    """
    Создаём комментарий к посту.

    Только для авторизованных пользователей; пост должен существовать.
    """
    if posts.get_by_id(post_id) is None:
        raise NotFound("Post not found")

    return repo.add(post_id, current_user, comment.text)


@router.post(
    "/{post_id}/{comment_id}/replies",
    response_model=Comment,
    status_code=status.HTTP_201_CREATED
)
def create_reply(
    post_id: str,
    comment_id: str,
    comment: CommentCreate,
    current_user: UserResponse = Depends(get_current_user),
    repo: CommentRepository = Depends(get_comment_repository),
):
    """
    Ответ на комментарий верхнего уровня.
    """
    reply = repo.add_reply(post_id, comment_id, current_user, comment.text)
    if reply is None:
        raise NotFound("Comment not found")
    return reply
