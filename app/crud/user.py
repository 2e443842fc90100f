# app/crud/user.py
import logging
import time
from typing import Awaitable, Callable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.errors import StoreError
from app.core.identity import ExternalIdentity
from app.models.user import User

logger = logging.getLogger(__name__)

ProfileLoader = Callable[[ExternalIdentity], Awaitable[ExternalIdentity]]


async def get_user_by_external_id(external_id: str, db: AsyncSession) -> Optional[User]:
    result = await db.execute(select(User).where(User.external_id == external_id))
    return result.scalar_one_or_none()


def build_user_fields(identity: ExternalIdentity) -> dict:
    """Profile values for a first-seen identity, with deterministic placeholders for gaps."""
    if identity.first_name and identity.last_name:
        name = f"{identity.first_name} {identity.last_name}"
    elif identity.username:
        name = identity.username
    else:
        name = f"User{int(time.time() * 1000)}"

    return {
        "external_id": identity.external_id,
        "name": name,
        "email": identity.primary_email or f"{identity.external_id}@example.com",
        "phone": identity.phone,
        "avatar_url": identity.avatar_url,
    }


async def resolve_user(
    identity: ExternalIdentity,
    db: AsyncSession,
    profile_loader: Optional[ProfileLoader] = None,
) -> User:
    """
    Map an external identity to its internal user, creating the row on first sight.

    The unique constraint on external_id arbitrates concurrent first requests:
    the loser of the insert race re-reads the winner's row instead of failing.
    """
    user = await get_user_by_external_id(identity.external_id, db)
    if user is not None:
        return user

    if profile_loader is not None:
        identity = await profile_loader(identity)

    new_user = User(**build_user_fields(identity))
    db.add(new_user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info(f"User for {identity.external_id} was created concurrently, re-reading")
        user = await get_user_by_external_id(identity.external_id, db)
        if user is None:
            raise StoreError("resolve_user", "User insert conflicted but no row was found")
        return user
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to create user for {identity.external_id}: {e}")
        raise StoreError("resolve_user") from e

    logger.info(f"Created user {new_user.id} for external identity {identity.external_id}")
    return new_user
