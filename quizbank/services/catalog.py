"""
Catalog management: subjects, topics and question batches.

Subjects and topics are resolved with a store-level upsert so concurrent
requests for the same new name end up on a single row. Questions are
written one transaction per question, each together with its choices.
"""
from dataclasses import dataclass, field
from typing import List, Sequence
import logging

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quizbank.core.errors import InvalidArgument, StorageFailure
from quizbank.models.orm import Choice, Question, Subject, Topic, new_id

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}

@dataclass
class ChoiceDraft:
    text: str
    is_correct: bool = False

@dataclass
class QuestionDraft:
    text: str
    choices: List[ChoiceDraft] = field(default_factory=list)

def _dialect_insert(session: AsyncSession, model):
    name = session.get_bind().dialect.name
    try:
        return _UPSERT_DIALECTS[name](model)
    except KeyError:
        raise StorageFailure(f"Upsert is not supported on {name}") from None

async def _upsert_by_name(session: AsyncSession, model, **values):
    stmt = _dialect_insert(session, model).values(id=new_id(), **values)
    # a no-op update so the existing row comes back through RETURNING
    stmt = stmt.on_conflict_do_update(index_elements=[model.name], set_={"name": stmt.excluded.name})
    try:
        row = (await session.scalars(stmt.returning(model), execution_options={"populate_existing": True})).one()
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Upsert of %s %r failed", model.__name__, values.get("name"))
        raise StorageFailure(f"Could not upsert {model.__name__}") from e
    return row

async def upsert_subject(session: AsyncSession, name: str) -> Subject:
    """Return the subject called `name`, creating it if needed."""
    return await _upsert_by_name(session, Subject, name=name)

async def upsert_topic(session: AsyncSession, name: str, subject_id: str) -> Topic:
    """Return the topic called `name`, creating it under `subject_id` if needed.

    An existing topic keeps the subject it was first created under.
    """
    return await _upsert_by_name(session, Topic, name=name, subject_id=subject_id)

def _validate(subject_name: str, topic_name: str, questions: Sequence[QuestionDraft]) -> None:
    if not subject_name or not subject_name.strip():
        raise InvalidArgument("subjectName is required")
    if not topic_name or not topic_name.strip():
        raise InvalidArgument("topicName is required")
    for i, q in enumerate(questions):
        if not q.text or not q.text.strip():
            raise InvalidArgument(f"questions[{i}].text is required")
        if not q.choices:
            raise InvalidArgument(f"questions[{i}] needs at least one choice")
        for j, c in enumerate(q.choices):
            if not c.text or not c.text.strip():
                raise InvalidArgument(f"questions[{i}].choices[{j}].text is required")

async def create_quiz(
    session: AsyncSession,
    subject_name: str,
    topic_name: str,
    questions: Sequence[QuestionDraft],
) -> List[Question]:
    """Create a batch of questions under subject/topic, upserting both names.

    Not atomic across questions: on failure, questions already committed are
    kept and a StorageFailure is raised.
    """
    _validate(subject_name, topic_name, questions)

    subject = await upsert_subject(session, subject_name)
    topic = await upsert_topic(session, topic_name, subject.id)

    created: List[Question] = []
    for draft in questions:
        question = Question(
            id=new_id(),
            text=draft.text,
            topic_id=topic.id,
            choices=[
                Choice(id=new_id(), text=c.text, is_correct=c.is_correct, position=pos)
                for pos, c in enumerate(draft.choices)
            ],
        )
        session.add(question)
        try:
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.exception("Creating question in topic %r failed after %d of %d", topic_name, len(created), len(questions))
            raise StorageFailure("Failed to create quiz") from e
        created.append(question)

    logger.info("Created %d questions in %s / %s", len(created), subject.name, topic.name)
    return created
