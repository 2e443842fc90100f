# app/api/v1/routes/savings_goals.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid

from app.schemas.savings_goal import (
    AddFundsRequest,
    SavingsGoalCreate,
    SavingsGoalRead,
    SavingsGoalWithTransactions,
    WithdrawFundsRequest,
)
from app.schemas.savings_transaction import SavingsTransactionCreate, SavingsTransactionRead
from app.crud.savings_goal import (
    add_funds_and_mirror,
    apply_transaction,
    create_goal_for_user,
    get_goal_by_id,
    get_goals_for_user,
    withdraw_and_mirror,
)
from app.crud.savings_transaction import list_transactions
from app.core.database import get_async_session
from app.core.errors import NotFound
from app.models.user import User
from app.api.deps import get_current_user

router = APIRouter(prefix="/savings-goals", tags=["Savings Goals"])

@router.get("", response_model=List[SavingsGoalRead])
async def read_savings_goals(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await get_goals_for_user(user.id, db)

@router.post("", response_model=SavingsGoalRead, status_code=status.HTTP_201_CREATED)
async def create_savings_goal(
    goal_in: SavingsGoalCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await create_goal_for_user(user.id, goal_in, db)

@router.get("/{goal_id}", response_model=SavingsGoalWithTransactions)
async def read_savings_goal(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_goal_by_id(goal_id, user.id, db)
    if not goal:
        raise NotFound("Savings goal")
    return goal

@router.get("/{goal_id}/transactions", response_model=List[SavingsTransactionRead])
async def read_savings_transactions(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Transaction history of a goal, most recent first."""
    return await list_transactions(goal_id, user.id, db)

@router.post("/{goal_id}/transactions", response_model=SavingsGoalWithTransactions)
async def create_savings_transaction(
    goal_id: uuid.UUID,
    tx_in: SavingsTransactionCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Deposit into or withdraw from a savings goal.

    - **amount**: positive amount
    - **type**: DEPOSIT or WITHDRAWAL

    Returns the updated goal with its full transaction history. A withdrawal
    larger than the current amount is rejected with 400 and changes nothing.
    """
    return await apply_transaction(goal_id, user.id, tx_in.amount, tx_in.type, db)

@router.post("/{goal_id}/add-funds", response_model=SavingsGoalRead)
async def add_funds_to_savings_goal(
    goal_id: uuid.UUID,
    funds_in: AddFundsRequest,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Add funds to a goal and mirror them into the user's personal savings balance.
    No transaction record is written for this path.
    """
    return await add_funds_and_mirror(goal_id, user.id, funds_in.amount, db)

@router.post("/{goal_id}/withdraw", response_model=SavingsGoalWithTransactions)
async def withdraw_from_savings_goal(
    goal_id: uuid.UUID,
    funds_in: WithdrawFundsRequest,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Withdraw funds from a goal. The withdrawal is recorded in the goal's
    history and taken off the user's personal savings balance as well.
    """
    return await withdraw_and_mirror(goal_id, user.id, funds_in.amount, db)
