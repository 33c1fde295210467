import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quizbank.core.errors import Conflict, NotFound, StorageFailure
from quizbank.models.orm import User, new_id

logger = logging.getLogger(__name__)

async def create_user(session: AsyncSession, firebase_id: str, email: str) -> User:
    user = User(id=new_id(), firebase_id=firebase_id, email=email)
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise Conflict("Email is already in use") from e
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Creating user %s failed", email)
        raise StorageFailure() from e
    return user

async def get_user_by_firebase_id(session: AsyncSession, firebase_id: str) -> User:
    try:
        user = await session.scalar(select(User).where(User.firebase_id == firebase_id))
    except SQLAlchemyError as e:
        logger.exception("Looking up user %s failed", firebase_id)
        raise StorageFailure() from e
    if user is None:
        raise NotFound("User not found")
    return user
