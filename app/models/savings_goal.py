# app/models/savings_goal.py
import uuid
from decimal import Decimal
from sqlalchemy import Column, String, DateTime, ForeignKey, Boolean, Numeric, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.user import utc_now

class SavingsGoal(Base):
    __tablename__ = "savings_goals"
    __table_args__ = (
        CheckConstraint("target_amount > 0", name="ck_savings_goals_target_positive"),
        CheckConstraint("current_amount >= 0", name="ck_savings_goals_current_non_negative"),
    )

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(length=150), nullable=False)
    target_amount = Column(Numeric(12, 2), nullable=False)
    # Mutated only through the savings ledger (app/crud/savings_goal.py)
    current_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    is_completed = Column(Boolean, nullable=False, default=False)
    deadline = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    user = relationship("User", back_populates="savings_goals")
    transactions = relationship(
        "SavingsTransaction",
        back_populates="savings_goal",
        order_by="SavingsTransaction.created_at.desc()",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<SavingsGoal name={self.name} current={self.current_amount} target={self.target_amount}>"
