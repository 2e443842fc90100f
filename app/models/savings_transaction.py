# app/models/savings_transaction.py
import enum
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Enum, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.user import utc_now

class SavingsTransactionType(str, enum.Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"

class SavingsTransaction(Base):
    """Append-only record of one ledger mutation. Rows are never updated or deleted."""

    __tablename__ = "savings_transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_savings_transactions_amount_positive"),
    )

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    savings_goal_id = Column(PG_UUID(as_uuid=True), ForeignKey("savings_goals.id"), nullable=False, index=True)
    # Magnitude only; the sign comes from `type`
    amount = Column(Numeric(12, 2), nullable=False)
    type = Column(Enum(SavingsTransactionType, name="savings_transaction_type"), nullable=False)
    description = Column(String(length=255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False, index=True)

    savings_goal = relationship("SavingsGoal", back_populates="transactions")

    @property
    def signed_amount(self):
        return self.amount if self.type == SavingsTransactionType.DEPOSIT else -self.amount

    def __repr__(self):
        return f"<SavingsTransaction {self.type} amount={self.amount} goal_id={self.savings_goal_id}>"
