# app/crud/personal_savings.py
import logging
import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.errors import StoreError
from app.models.personal_savings import PersonalSavings

logger = logging.getLogger(__name__)


async def get_personal_savings(
    user_id: uuid.UUID, db: AsyncSession, for_update: bool = False
) -> Optional[PersonalSavings]:
    query = select(PersonalSavings).where(PersonalSavings.user_id == user_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_or_create_personal_savings(user_id: uuid.UUID, db: AsyncSession) -> PersonalSavings:
    """Return the user's aggregate row, inserting a zero balance if there is none yet."""
    savings = await get_personal_savings(user_id, db)
    if savings is not None:
        return savings

    savings = PersonalSavings(user_id=user_id, balance=Decimal("0.00"))
    db.add(savings)
    try:
        await db.commit()
    except IntegrityError:
        # Another request created it between our read and insert
        await db.rollback()
        existing = await get_personal_savings(user_id, db)
        if existing is None:
            raise StoreError("create_personal_savings", "Personal savings insert conflicted but no row was found")
        return existing
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to create personal savings for user {user_id}: {e}")
        raise StoreError("create_personal_savings") from e

    logger.info(f"Created personal savings for user {user_id}")
    return savings
