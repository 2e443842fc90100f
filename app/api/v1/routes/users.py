# app/api/v1/routes/users.py
from fastapi import APIRouter, Depends

from app.models.user import User
from app.schemas.user import UserRead
from app.api.deps import get_current_user

router = APIRouter(prefix="/users", tags=["User Management"])

@router.get("/me", response_model=UserRead)
async def read_own_profile(
    user: User = Depends(get_current_user),
):
    """Get current user's profile"""
    return user
