# blog/services/guard.py

"""
Проверка прав на изменение постов и комментариев.

Чистые функции: никаких обращений к БД или хранилищу.
Вызываются репозиториями, а не только маршрутами.
"""

import logging
from enum import Enum
from typing import Optional

from blog.schemas import Post, Role, UserResponse
from blog.utils.exceptions import PermissionDeniedError

logger = logging.getLogger(__name__)


class Action(str, Enum):
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"


# Кто вообще может писать посты
POST_CREATOR_ROLES = {Role.ADMIN, Role.AUTHOR}


def can_mutate(
    viewer: Optional[UserResponse],
    post: Optional[Post],
    action: Action | str,
) -> bool:
    """
    - create        -> admin или author;
    - edit / delete -> владелец поста или admin;
    - без viewer    -> всегда False.
    """
    if viewer is None:
        return False

    action = Action(action)

    if action is Action.CREATE:
        return viewer.role in POST_CREATOR_ROLES

    if post is None:
        return False

    return viewer.role == Role.ADMIN or viewer.id == post.author.id


def can_comment(viewer: Optional[UserResponse]) -> bool:
    return viewer is not None


def ensure_can_mutate(
    viewer: Optional[UserResponse],
    post: Optional[Post],
    action: Action | str,
) -> None:
    if can_mutate(viewer, post, action):
        return

    logger.warning(
        "Denied %s on post %s for user %s",
        Action(action).value,
        post.id if post else "-",
        viewer.id if viewer else "anonymous",
    )
    raise PermissionDeniedError()


def ensure_can_comment(viewer: Optional[UserResponse]) -> None:
    if can_comment(viewer):
        return

    logger.warning("Denied comment for anonymous user")
    raise PermissionDeniedError()
