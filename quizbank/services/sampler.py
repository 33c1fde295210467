"""
Random question sets for an exam attempt.

The draw is a uniform sample without replacement over the ids of every
question in the topic, done in-process so it behaves the same on every
store and can be seeded in tests. Choices for the whole draw are fetched in
one query and attached without their correctness flag.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging
import random

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quizbank.core.errors import InvalidArgument, NotFound, StorageFailure
from quizbank.models.orm import Choice, Question, Topic

logger = logging.getLogger(__name__)

_system_rng = random.SystemRandom()

@dataclass
class SampledChoice:
    id: str
    text: str

@dataclass
class SampledQuestion:
    id: str
    text: str
    topic_id: str
    choices: List[SampledChoice] = field(default_factory=list)

def draw(ids: List[str], count: int, rng: random.Random) -> List[str]:
    """Uniform sample of min(count, len(ids)) distinct ids, in draw order."""
    return rng.sample(ids, k=min(count, len(ids)))

async def sample_questions(
    session: AsyncSession,
    topic_name: str,
    count: int,
    rng: Optional[random.Random] = None,
) -> List[SampledQuestion]:
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise InvalidArgument("count must be a positive integer")
    if not topic_name:
        raise InvalidArgument("topicName is required")
    rng = rng or _system_rng

    try:
        topic = await session.scalar(select(Topic).where(Topic.name == topic_name))
        if topic is None:
            raise NotFound("Topic not found")

        ids = list((await session.scalars(select(Question.id).where(Question.topic_id == topic.id))).all())
        picked = draw(ids, count, rng)
        if not picked:
            return []

        rows = (await session.execute(select(Question.id, Question.text).where(Question.id.in_(picked)))).all()
        texts: Dict[str, str] = {r.id: r.text for r in rows}

        choices: Dict[str, List[SampledChoice]] = {qid: [] for qid in picked}
        stmt = (
            select(Choice.id, Choice.text, Choice.question_id)
            .where(Choice.question_id.in_(picked))
            .order_by(Choice.question_id, Choice.position)
        )
        for c in (await session.execute(stmt)).all():
            choices[c.question_id].append(SampledChoice(id=c.id, text=c.text))
    except SQLAlchemyError as e:
        logger.exception("Sampling topic %r failed", topic_name)
        raise StorageFailure("Failed to fetch quiz") from e

    logger.debug("Sampled %d of %d questions from %r", len(picked), len(ids), topic_name)
    return [SampledQuestion(id=qid, text=texts[qid], topic_id=topic.id, choices=choices[qid]) for qid in picked]
