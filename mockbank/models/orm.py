from datetime import datetime, timezone
from typing import List, Optional
import enum
import uuid

from sqlalchemy import (
    Boolean, DateTime, Enum as SQLEnum, Float, ForeignKey, Index, Integer,
    String, Text, UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuestionType(str, enum.Enum):
    MCQ = "MCQ"
    MSQ = "MSQ"
    NAT = "NAT"


class Difficulty(str, enum.Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class AttemptMode(str, enum.Enum):
    PRACTICE = "practice"
    MOCK = "mock"


# ========== Content Models ==========

class Exam(Base):
    __tablename__ = "exams"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    subjects: Mapped[List["Subject"]] = relationship(back_populates="exam")


class Subject(Base):
    __tablename__ = "subjects"
    __table_args__ = (
        UniqueConstraint("exam_id", "name", name="uq_subject_exam_name"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    exam_id: Mapped[str] = mapped_column(String(36), ForeignKey("exams.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    exam: Mapped["Exam"] = relationship(back_populates="subjects")
    topics: Mapped[List["Topic"]] = relationship(back_populates="subject")


class Topic(Base):
    __tablename__ = "topics"
    __table_args__ = (
        UniqueConstraint("subject_id", "name", name="uq_topic_subject_name"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    subject_id: Mapped[str] = mapped_column(String(36), ForeignKey("subjects.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    subject: Mapped["Subject"] = relationship(back_populates="topics")


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)


class Question(Base):
    __tablename__ = "questions"
    __table_args__ = (
        Index("idx_questions_exam_year", "exam_id", "year"),
        Index("idx_questions_exam_subject", "exam_id", "subject_id"),
        Index("idx_questions_exam_difficulty", "exam_id", "difficulty"),
        Index("idx_questions_exam_type", "exam_id", "type"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    exam_id: Mapped[str] = mapped_column(String(36), ForeignKey("exams.id"), nullable=False)
    subject_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("subjects.id", ondelete="SET NULL"))
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    shift: Mapped[Optional[str]] = mapped_column(String(50))
    body: Mapped[str] = mapped_column(Text, nullable=False)
    marks: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[QuestionType] = mapped_column(SQLEnum(QuestionType), nullable=False)
    difficulty: Mapped[Difficulty] = mapped_column(SQLEnum(Difficulty), nullable=False)
    has_solution: Mapped[bool] = mapped_column(Boolean, default=False)
    is_formula_based: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    # Relationships
    exam: Mapped["Exam"] = relationship()
    subject: Mapped[Optional["Subject"]] = relationship()
    topic_links: Mapped[List["QuestionTopic"]] = relationship(
        back_populates="question", cascade="all, delete-orphan"
    )
    tag_links: Mapped[List["QuestionTag"]] = relationship(
        back_populates="question", cascade="all, delete-orphan"
    )
    options: Mapped[List["Option"]] = relationship(
        back_populates="question", cascade="all, delete-orphan", order_by="Option.label"
    )
    solution: Mapped[Optional["Solution"]] = relationship(
        back_populates="question", cascade="all, delete-orphan", uselist=False
    )
    attempts: Mapped[List["QuestionAttempt"]] = relationship(back_populates="question")
    bookmarks: Mapped[List["Bookmark"]] = relationship(back_populates="question", cascade="all, delete-orphan")

    @property
    def topics(self) -> List["Topic"]:
        return [link.topic for link in self.topic_links]


class QuestionTopic(Base):
    __tablename__ = "question_topics"
    __table_args__ = (
        UniqueConstraint("question_id", "topic_id", name="uq_question_topic"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    question_id: Mapped[str] = mapped_column(String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    topic_id: Mapped[str] = mapped_column(String(36), ForeignKey("topics.id"), nullable=False, index=True)

    question: Mapped["Question"] = relationship(back_populates="topic_links")
    topic: Mapped["Topic"] = relationship()


class QuestionTag(Base):
    __tablename__ = "question_tags"
    __table_args__ = (
        UniqueConstraint("question_id", "tag_id", name="uq_question_tag"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    question_id: Mapped[str] = mapped_column(String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    tag_id: Mapped[str] = mapped_column(String(36), ForeignKey("tags.id"), nullable=False, index=True)

    question: Mapped["Question"] = relationship(back_populates="tag_links")
    tag: Mapped["Tag"] = relationship()


class Option(Base):
    __tablename__ = "options"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    question_id: Mapped[str] = mapped_column(String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    label: Mapped[str] = mapped_column(String(8), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    question: Mapped["Question"] = relationship(back_populates="options")


class Solution(Base):
    __tablename__ = "solutions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    question_id: Mapped[str] = mapped_column(String(36), ForeignKey("questions.id", ondelete="CASCADE"), unique=True, nullable=False)
    answer_text: Mapped[str] = mapped_column(Text, nullable=False)
    explanation: Mapped[str] = mapped_column(Text, nullable=False, default="")

    question: Mapped["Question"] = relationship(back_populates="solution")


# ========== Delivery Models ==========

class Mock(Base):
    __tablename__ = "mocks"
    __table_args__ = (
        Index("idx_mocks_user", "user_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    time_limit: Mapped[Optional[int]] = mapped_column(Integer)  # minutes, NULL = untimed
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    questions: Mapped[List["MockQuestion"]] = relationship(
        back_populates="mock", cascade="all, delete-orphan", order_by="MockQuestion.order"
    )
    submissions: Mapped[List["MockSubmission"]] = relationship(back_populates="mock")


class MockQuestion(Base):
    __tablename__ = "mock_questions"
    __table_args__ = (
        UniqueConstraint("mock_id", "question_id", name="uq_mock_question"),
        UniqueConstraint("mock_id", "order", name="uq_mock_question_order"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    mock_id: Mapped[str] = mapped_column(String(36), ForeignKey("mocks.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id: Mapped[str] = mapped_column(String(36), ForeignKey("questions.id"), nullable=False)
    order: Mapped[int] = mapped_column("order", Integer, nullable=False)

    mock: Mapped["Mock"] = relationship(back_populates="questions")
    question: Mapped["Question"] = relationship()


class MockSubmission(Base):
    __tablename__ = "mock_submissions"
    __table_args__ = (
        Index("idx_ms_mock_user_created", "mock_id", "user_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    mock_id: Mapped[str] = mapped_column(String(36), ForeignKey("mocks.id"), nullable=False)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    total_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    mock: Mapped["Mock"] = relationship(back_populates="submissions")
    responses: Mapped[List["MockQuestionResponse"]] = relationship(
        back_populates="submission", cascade="all, delete-orphan"
    )


class MockQuestionResponse(Base):
    __tablename__ = "mock_question_responses"
    __table_args__ = (
        UniqueConstraint("submission_id", "question_id", name="uq_submission_question"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    submission_id: Mapped[str] = mapped_column(String(36), ForeignKey("mock_submissions.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id: Mapped[str] = mapped_column(String(36), ForeignKey("questions.id"), nullable=False)
    selected_option_id: Mapped[Optional[str]] = mapped_column(String(36))
    numeric_answer: Mapped[Optional[float]] = mapped_column(Float)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    time_taken_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    submission: Mapped["MockSubmission"] = relationship(back_populates="responses")


# ========== Analytics Models ==========

class QuestionAttempt(Base):
    __tablename__ = "question_attempts"
    __table_args__ = (
        Index("idx_qa_user_question", "user_id", "question_id"),
        Index("idx_qa_created", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    question_id: Mapped[str] = mapped_column(String(36), ForeignKey("questions.id"), nullable=False)
    selected_option_id: Mapped[Optional[str]] = mapped_column(String(36))
    numeric_answer: Mapped[Optional[float]] = mapped_column(Float)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    time_taken_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    mode: Mapped[AttemptMode] = mapped_column(
        SQLEnum(AttemptMode, values_callable=lambda modes: [m.value for m in modes]), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    question: Mapped["Question"] = relationship(back_populates="attempts")


class Bookmark(Base):
    __tablename__ = "bookmarks"
    __table_args__ = (
        UniqueConstraint("user_id", "question_id", name="uq_bookmark_user_question"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    question_id: Mapped[str] = mapped_column(String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    question: Mapped["Question"] = relationship(back_populates="bookmarks")
