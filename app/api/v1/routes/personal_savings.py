# app/api/v1/routes/personal_savings.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.personal_savings import PersonalSavingsCreated, PersonalSavingsRead, PersonalSavingsSummary
from app.schemas.savings_goal import SavingsGoalRead
from app.crud.personal_savings import get_or_create_personal_savings, get_personal_savings
from app.crud.savings_goal import get_goals_for_user
from app.core.database import get_async_session
from app.models.user import User
from app.api.deps import get_current_user

router = APIRouter(prefix="/personal-savings", tags=["Personal Savings"])

@router.get("", response_model=PersonalSavingsSummary)
async def read_personal_savings(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Personal savings balance (null until created) together with the user's savings goals"""
    personal_savings = await get_personal_savings(user.id, db)
    goals = await get_goals_for_user(user.id, db)
    return PersonalSavingsSummary(
        personal_savings=PersonalSavingsRead.model_validate(personal_savings) if personal_savings else None,
        savings_goals=[SavingsGoalRead.model_validate(goal) for goal in goals],
    )

@router.post("", response_model=PersonalSavingsCreated)
async def create_personal_savings(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Create the personal savings record. Returns the existing one if already present."""
    personal_savings = await get_or_create_personal_savings(user.id, db)
    return PersonalSavingsCreated(
        success=True,
        personal_savings=PersonalSavingsRead.model_validate(personal_savings),
    )
