from datetime import datetime
from typing import List
import uuid

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

def new_id() -> str:
    return str(uuid.uuid4())

class Base(DeclarativeBase): pass

class User(Base):
    __tablename__ = "users"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    firebase_id: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)

    attempts: Mapped[List["ExamAttempt"]] = relationship(back_populates="user")

class Subject(Base):
    __tablename__ = "subjects"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    topics: Mapped[List["Topic"]] = relationship(back_populates="subject")

class Topic(Base):
    __tablename__ = "topics"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    # unique across all subjects, not per subject
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    subject_id: Mapped[str] = mapped_column(String(36), ForeignKey("subjects.id", ondelete="RESTRICT"), nullable=False, index=True)

    subject: Mapped["Subject"] = relationship(back_populates="topics")
    questions: Mapped[List["Question"]] = relationship(back_populates="topic")

class Question(Base):
    __tablename__ = "questions"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    topic_id: Mapped[str] = mapped_column(String(36), ForeignKey("topics.id", ondelete="RESTRICT"), nullable=False, index=True)

    topic: Mapped["Topic"] = relationship(back_populates="questions")
    choices: Mapped[List["Choice"]] = relationship(back_populates="question", order_by="Choice.position")

class Choice(Base):
    __tablename__ = "choices"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    question_id: Mapped[str] = mapped_column(String(36), ForeignKey("questions.id", ondelete="RESTRICT"), nullable=False, index=True)

    question: Mapped["Question"] = relationship(back_populates="choices")

class ExamAttempt(Base):
    __tablename__ = "exam_attempts"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    user: Mapped["User"] = relationship(back_populates="attempts")
