from typing import List
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quizbank.core.errors import InvalidArgument, StorageFailure
from quizbank.models.orm import ExamAttempt, new_id

logger = logging.getLogger(__name__)

async def record_attempt(session: AsyncSession, user_id: str, score: int) -> ExamAttempt:
    """Insert one scored attempt; the store stamps its date."""
    if not user_id or not isinstance(user_id, str):
        raise InvalidArgument("userId is required")
    if isinstance(score, bool) or not isinstance(score, int):
        raise InvalidArgument("score must be an integer")

    attempt = ExamAttempt(id=new_id(), score=score, user_id=user_id)
    session.add(attempt)
    try:
        await session.commit()
        await session.refresh(attempt)
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Saving attempt for user %s failed", user_id)
        raise StorageFailure("Failed to save results") from e
    return attempt

async def list_attempts(session: AsyncSession, user_id: str) -> List[ExamAttempt]:
    stmt = select(ExamAttempt).where(ExamAttempt.user_id == user_id).order_by(ExamAttempt.date.desc())
    try:
        return list((await session.scalars(stmt)).all())
    except SQLAlchemyError as e:
        logger.exception("Listing attempts for user %s failed", user_id)
        raise StorageFailure("Failed to fetch attempts") from e
