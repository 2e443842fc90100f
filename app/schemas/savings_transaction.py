# app/schemas/savings_transaction.py
from datetime import datetime
from decimal import Decimal
import uuid
from pydantic import Field
from app.models.savings_transaction import SavingsTransactionType
from app.schemas.common import CamelModel

class SavingsTransactionCreate(CamelModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Positive amount, e.g. 30.00")
    type: SavingsTransactionType

class SavingsTransactionRead(CamelModel):
    id: uuid.UUID
    savings_goal_id: uuid.UUID
    amount: float
    signed_amount: float
    type: SavingsTransactionType
    description: str
    created_at: datetime
