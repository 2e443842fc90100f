# app/schemas/personal_savings.py
from typing import List, Optional
from datetime import datetime
import uuid
from app.schemas.common import CamelModel
from app.schemas.savings_goal import SavingsGoalRead

class PersonalSavingsRead(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    balance: float
    created_at: datetime
    updated_at: datetime

class PersonalSavingsSummary(CamelModel):
    personal_savings: Optional[PersonalSavingsRead] = None
    savings_goals: List[SavingsGoalRead]

class PersonalSavingsCreated(CamelModel):
    success: bool = True
    personal_savings: PersonalSavingsRead
