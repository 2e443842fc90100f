# app/models/personal_savings.py
import uuid
from decimal import Decimal
from sqlalchemy import Column, DateTime, ForeignKey, Numeric
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.user import utc_now

class PersonalSavings(Base):
    """Per-user running total, kept in lockstep with funds added to that user's goals."""

    __tablename__ = "personal_savings"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, unique=True)
    balance = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    user = relationship("User", back_populates="personal_savings")

    def __repr__(self):
        return f"<PersonalSavings balance={self.balance} user_id={self.user_id}>"
