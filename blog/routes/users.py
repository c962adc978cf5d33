# blog/routes/users.py

"""
API enpoints для работы с текущим пользователем.
"""

from fastapi import APIRouter, Depends, status

from blog.config import settings
from blog.dependencies import get_current_user
from blog.schemas import UserResponse

router = APIRouter(
    prefix=f"{settings.API_PREFIX}/v1/users",
    tags=["users"],
)

@router.get("/me", response_model=UserResponse, status_code=status.HTTP_200_OK)
async def get_me(current_user: UserResponse = Depends(get_current_user)):
    """
    Возвращает данные текущего пользователя:
    id, username, email, role
    """
    return current_user
