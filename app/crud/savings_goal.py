# app/crud/savings_goal.py
"""
Savings ledger: every change to a goal's balance goes through this module.

Invariants:
    - current_amount never goes below zero; a withdrawal larger than the
      balance is rejected before anything is written
    - apply_transaction writes exactly one SavingsTransaction per balance
      change, in the same database transaction as the balance update
    - add_funds_and_mirror moves the goal and the owner's personal savings
      balance together and records no SavingsTransaction
    - withdraw_and_mirror takes money out of a goal, records the WITHDRAWAL
      and lowers the owner's personal savings balance in one transaction
    - no resulting balance exceeds what a Numeric(12, 2) column can hold
"""
import logging
import uuid
from decimal import Decimal
from typing import List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import raiseload

from app.core.database import unit_of_work
from app.core.errors import InsufficientFunds, NotFound, StoreError
from app.crud.personal_savings import get_or_create_personal_savings, get_personal_savings
from app.models.savings_goal import SavingsGoal
from app.models.savings_transaction import SavingsTransaction, SavingsTransactionType
from app.schemas.savings_goal import SavingsGoalCreate
from app.utils.savings import (
    describe_transaction,
    evaluate_completion,
    normalize_amount,
    normalize_type,
    ensure_within_limit,
    signed_amount,
)

logger = logging.getLogger(__name__)


async def get_goals_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[SavingsGoal]:
    result = await db.execute(
        select(SavingsGoal)
        .where(SavingsGoal.user_id == user_id)
        .options(raiseload(SavingsGoal.transactions))
        .order_by(SavingsGoal.created_at)
    )
    return result.scalars().all()


async def get_goal_by_id(goal_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[SavingsGoal]:
    """Goal with its transactions (newest first), or None if absent or owned by someone else"""
    result = await db.execute(
        select(SavingsGoal)
        .where(SavingsGoal.id == goal_id, SavingsGoal.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _lock_goal(goal_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[SavingsGoal]:
    # FOR UPDATE makes concurrent mutations of the same goal queue behind each other,
    # so the sufficient-funds check and the deduction see the same balance.
    result = await db.execute(
        select(SavingsGoal)
        .where(SavingsGoal.id == goal_id, SavingsGoal.user_id == user_id)
        .options(raiseload(SavingsGoal.transactions))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_goal_for_user(user_id: uuid.UUID, goal_in: SavingsGoalCreate, db: AsyncSession) -> SavingsGoal:
    new_goal = SavingsGoal(
        user_id=user_id,
        name=goal_in.name,
        target_amount=goal_in.target_amount,
        current_amount=goal_in.current_amount,
        deadline=goal_in.deadline,
        is_completed=False,
    )
    async with unit_of_work(db, "create_goal", {"user_id": str(user_id)}):
        db.add(new_goal)
    logger.info(f"Created savings goal {new_goal.id} for user {user_id}")
    return await get_goal_by_id(new_goal.id, user_id, db)


async def apply_transaction(
    goal_id: uuid.UUID,
    user_id: uuid.UUID,
    amount: Union[Decimal, int, float, str],
    tx_type: Union[SavingsTransactionType, str],
    db: AsyncSession,
) -> SavingsGoal:
    """
    Deposit into or withdraw from a goal and record the transaction.

    Raises ValidationError for a non-positive amount or unknown type,
    NotFound when the goal does not exist for this user, InsufficientFunds
    when a withdrawal exceeds the balance, and StoreError when the database
    fails; in every failure case neither the transaction row nor the balance
    change is persisted.
    """
    amount = normalize_amount(amount)
    tx_type = normalize_type(tx_type)
    context = {"goal_id": str(goal_id), "user_id": str(user_id)}

    async with unit_of_work(db, "apply_transaction", context):
        goal = await _lock_goal(goal_id, user_id, db)
        if goal is None:
            raise NotFound("Savings goal")

        previous_amount = goal.current_amount
        if tx_type == SavingsTransactionType.WITHDRAWAL and previous_amount < amount:
            raise InsufficientFunds(previous_amount, amount)
        new_amount = ensure_within_limit(previous_amount + signed_amount(tx_type, amount))

        db.add(SavingsTransaction(
            savings_goal_id=goal.id,
            amount=amount,
            type=tx_type,
            description=describe_transaction(tx_type, amount),
        ))
        await db.flush()

        goal.is_completed = evaluate_completion(
            previous_amount, amount, goal.target_amount, tx_type, goal.is_completed
        )
        goal.current_amount = new_amount
        await db.flush()

    logger.info(
        f"Applied {tx_type.value} of {amount} to goal {goal_id}: "
        f"{previous_amount} -> {goal.current_amount} (completed={goal.is_completed})"
    )
    return await get_goal_by_id(goal_id, user_id, db)


async def add_funds_and_mirror(
    goal_id: uuid.UUID,
    user_id: uuid.UUID,
    amount: Union[Decimal, int, float, str],
    db: AsyncSession,
) -> SavingsGoal:
    """
    Add funds to a goal and to the owner's personal savings balance together.

    Unlike apply_transaction this writes no SavingsTransaction and leaves the
    completion flag alone. The personal savings row is created on demand.
    """
    amount = normalize_amount(amount)
    context = {"goal_id": str(goal_id), "user_id": str(user_id)}

    if await get_goal_by_id(goal_id, user_id, db) is None:
        raise NotFound("Savings goal")
    await get_or_create_personal_savings(user_id, db)

    async with unit_of_work(db, "add_funds_and_mirror", context):
        goal = await _lock_goal(goal_id, user_id, db)
        if goal is None:
            raise NotFound("Savings goal")
        savings = await get_personal_savings(user_id, db, for_update=True)
        if savings is None:
            raise StoreError("add_funds_and_mirror", "Personal savings row disappeared")

        goal.current_amount = ensure_within_limit(goal.current_amount + amount)
        savings.balance = ensure_within_limit(savings.balance + amount)
        await db.flush()

    logger.info(f"Added {amount} to goal {goal_id} and personal savings of user {user_id}")
    return await get_goal_by_id(goal_id, user_id, db)


async def withdraw_and_mirror(
    goal_id: uuid.UUID,
    user_id: uuid.UUID,
    amount: Union[Decimal, int, float, str],
    db: AsyncSession,
) -> SavingsGoal:
    """
    Take funds out of a goal back into the user's own money.

    Records a WITHDRAWAL transaction, lowers the goal balance and, when the
    user has a personal savings row, lowers that balance by the same amount.
    The completion flag is left as it was.
    """
    amount = normalize_amount(amount)
    context = {"goal_id": str(goal_id), "user_id": str(user_id)}

    async with unit_of_work(db, "withdraw_and_mirror", context):
        goal = await _lock_goal(goal_id, user_id, db)
        if goal is None:
            raise NotFound("Savings goal")

        previous_amount = goal.current_amount
        if previous_amount < amount:
            raise InsufficientFunds(previous_amount, amount)

        db.add(SavingsTransaction(
            savings_goal_id=goal.id,
            amount=amount,
            type=SavingsTransactionType.WITHDRAWAL,
            description="Withdrawal from savings goal",
        ))
        goal.current_amount = previous_amount - amount

        savings = await get_personal_savings(user_id, db, for_update=True)
        if savings is not None:
            savings.balance = savings.balance - amount
        await db.flush()

    logger.info(
        f"Withdrew {amount} from goal {goal_id} for user {user_id}: "
        f"{previous_amount} -> {goal.current_amount}"
        f"{'' if savings is not None else ' (no personal savings row to mirror)'}"
    )
    return await get_goal_by_id(goal_id, user_id, db)
