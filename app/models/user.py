# app/models/user.py
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from app.core.database import Base


def utc_now():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Opaque reference issued by the identity provider
    external_id = Column(String(length=255), unique=True, index=True, nullable=False)
    name = Column(String(length=255), nullable=False)
    email = Column(String(length=320), nullable=False)
    phone = Column(String(length=50), nullable=True)
    avatar_url = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    savings_goals = relationship("SavingsGoal", back_populates="user")
    personal_savings = relationship("PersonalSavings", back_populates="user", uselist=False)

    def __repr__(self):
        return f"<User external_id={self.external_id} name={self.name}>"
