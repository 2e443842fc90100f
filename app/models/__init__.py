# app/models/__init__.py
# Import every model so string-based relationships resolve wherever one is used.
from app.models.user import User
from app.models.savings_goal import SavingsGoal
from app.models.savings_transaction import SavingsTransaction, SavingsTransactionType
from app.models.personal_savings import PersonalSavings

__all__ = [
    "User",
    "SavingsGoal",
    "SavingsTransaction",
    "SavingsTransactionType",
    "PersonalSavings",
]
