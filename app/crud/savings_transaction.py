# app/crud/savings_transaction.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc
from app.core.errors import NotFound
from app.models.savings_goal import SavingsGoal
from app.models.savings_transaction import SavingsTransaction
from typing import List
import uuid

async def list_transactions(goal_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> List[SavingsTransaction]:
    """Every transaction of the user's goal, newest first. Read-only."""
    owned = await db.execute(
        select(SavingsGoal.id).where(SavingsGoal.id == goal_id, SavingsGoal.user_id == user_id)
    )
    if owned.scalar_one_or_none() is None:
        raise NotFound("Savings goal")

    result = await db.execute(
        select(SavingsTransaction)
        .where(SavingsTransaction.savings_goal_id == goal_id)
        .order_by(desc(SavingsTransaction.created_at))
    )
    return result.scalars().all()
