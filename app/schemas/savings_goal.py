# app/schemas/savings_goal.py
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
import uuid
from pydantic import Field
from app.schemas.common import CamelModel
from app.schemas.savings_transaction import SavingsTransactionRead

class SavingsGoalCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=150)
    target_amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    current_amount: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    deadline: Optional[datetime] = None

class AddFundsRequest(CamelModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)

class WithdrawFundsRequest(CamelModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)

class SavingsGoalRead(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    target_amount: float
    current_amount: float
    is_completed: bool
    deadline: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

class SavingsGoalWithTransactions(SavingsGoalRead):
    transactions: List[SavingsTransactionRead] = []
