# blog/services/auth_tokens.py

"""
Учет выданных refresh-токенов в Redis.

Активен только тот refresh-токен, чей jti лежит в Redis;
logout удаляет запись, и токен больше нельзя обменять.
"""

from blog.services.cache import cache
from blog.config import settings

REFRESH_PREFIX = "refresh"


def _refresh_key(jti: str) -> str:
    return f"{REFRESH_PREFIX}:{jti}"


async def store_refresh_token(jti: str, user_id: str) -> None:
    ttl_seconds = settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60
    await cache.set(_refresh_key(jti), {"user_id": user_id}, ttl=ttl_seconds)


async def get_refresh_token_owner(jti: str) -> str | None:
    data = await cache.get(_refresh_key(jti))
    if data is None:
        return None
    return data.get("user_id")


async def revoke_refresh_token(jti: str) -> None:
    await cache.delete(_refresh_key(jti))
