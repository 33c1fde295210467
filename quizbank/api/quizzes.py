from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from quizbank.core.auth import get_current_user
from quizbank.core.database import get_db
from quizbank.core.errors import InvalidArgument, StorageFailure
from quizbank.services.attempts import list_attempts, record_attempt
from quizbank.services.catalog import ChoiceDraft, QuestionDraft, create_quiz
from quizbank.services.sampler import sample_questions
from quizbank.services.users import get_user_by_firebase_id

router = APIRouter()

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class ChoiceIn(CamelModel):
    text: str
    is_correct: bool = False

class QuestionIn(CamelModel):
    text: str
    choices: List[ChoiceIn]

class QuizCreate(CamelModel):
    subject_name: str
    topic_name: str
    questions: List[QuestionIn]

class ChoiceOut(CamelModel):
    id: str
    text: str
    is_correct: bool

class QuestionOut(CamelModel):
    id: str
    text: str
    topic_id: str
    choices: List[ChoiceOut]

class QuizCreated(CamelModel):
    message: str
    questions: List[QuestionOut]

class ExamChoice(CamelModel):
    id: str
    text: str

class ExamQuestion(CamelModel):
    id: str
    text: str
    topic_id: str
    choices: List[ExamChoice]

class RandomQuiz(CamelModel):
    questions: List[ExamQuestion]

class AttemptSubmit(CamelModel):
    user_id: str
    score: int

class Message(CamelModel):
    message: str

class AttemptOut(CamelModel):
    id: str
    score: int
    date: datetime
    user_id: str

class AttemptList(CamelModel):
    attempts: List[AttemptOut]

@router.post("/create", response_model=QuizCreated, status_code=201)
async def create(payload: QuizCreate, _: str = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    drafts = [
        QuestionDraft(text=q.text, choices=[ChoiceDraft(text=c.text, is_correct=c.is_correct) for c in q.choices])
        for q in payload.questions
    ]
    try:
        questions = await create_quiz(db, payload.subject_name, payload.topic_name, drafts)
    except StorageFailure:
        raise StorageFailure("Failed to create quiz")
    return QuizCreated(message="Quiz created successfully", questions=[QuestionOut.model_validate(q) for q in questions])

@router.get("/random", response_model=RandomQuiz)
async def random_quiz(
    topic_name: Optional[str] = Query(None, alias="topicName"),
    count: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    if not topic_name or count is None:
        raise InvalidArgument("Topic name and count are required")
    try:
        questions = await sample_questions(db, topic_name, count)
    except StorageFailure:
        raise StorageFailure("Failed to fetch quiz")
    return RandomQuiz(questions=[ExamQuestion.model_validate(q) for q in questions])

@router.post("/submit", response_model=Message)
async def submit(payload: AttemptSubmit, _: str = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    try:
        await record_attempt(db, payload.user_id, payload.score)
    except StorageFailure:
        raise StorageFailure("Failed to save results")
    return Message(message="Exam results saved successfully")

@router.get("/attempts", response_model=AttemptList)
async def my_attempts(principal: str = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    user = await get_user_by_firebase_id(db, principal)
    attempts = await list_attempts(db, user.id)
    return AttemptList(attempts=[AttemptOut.model_validate(a) for a in attempts])
