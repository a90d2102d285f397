import os

# Settings and the engine are read at import time.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["ENVIRONMENT"] = "testing"
os.environ["SECRET_KEY"] = "test-secret-key-for-mockbank-suite-0123456789"

from typing import Iterable, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mockbank.core.auth import create_token
from mockbank.core.database import get_db
from mockbank.main import app
from mockbank.models.orm import (
    Base, Difficulty, Exam, Option, Question, QuestionTag, QuestionTopic,
    QuestionType, Solution, Subject, Tag, Topic,
)

engine = create_engine(
    "sqlite+pysqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


def auth_headers(user_id: str = "student-1", roles: Iterable[str] = ("student",)) -> dict:
    return {"Authorization": f"Bearer {create_token(user_id, list(roles))}"}


class Seeder:
    """Builds committed content rows for a test."""

    def __init__(self, db):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        return obj

    def exam(self, code: str = "JEE-MAIN", name: str = "JEE Main") -> Exam:
        return self._save(Exam(code=code, name=name))

    def subject(self, exam: Exam, name: str = "Physics") -> Subject:
        return self._save(Subject(exam_id=exam.id, name=name))

    def topic(self, subject: Subject, name: str = "Kinematics") -> Topic:
        return self._save(Topic(subject_id=subject.id, name=name))

    def tag(self, slug: str, name: Optional[str] = None) -> Tag:
        return self._save(Tag(slug=slug, name=name or slug.title()))

    def question(
        self,
        exam: Exam,
        subject: Optional[Subject] = None,
        topics: Iterable[Topic] = (),
        tags: Iterable[Tag] = (),
        type: str = "MCQ",
        marks: int = 1,
        difficulty: str = "EASY",
        year: int = 2023,
        correct: Iterable[str] = ("A",),
        answer: Optional[str] = None,
        formula_based: bool = False,
        body: str = "Question body",
    ) -> Question:
        q = Question(
            exam_id=exam.id,
            subject_id=subject.id if subject else None,
            year=year,
            body=body,
            marks=marks,
            type=QuestionType(type),
            difficulty=Difficulty(difficulty),
            has_solution=answer is not None,
            is_formula_based=formula_based,
        )
        if q.type != QuestionType.NAT:
            q.options = [
                Option(label=label, text=f"Option {label}", is_correct=label in correct)
                for label in ("A", "B", "C", "D")
            ]
        if answer is not None:
            q.solution = Solution(answer_text=answer, explanation="Worked solution")
        q.topic_links = [QuestionTopic(topic_id=t.id) for t in topics]
        q.tag_links = [QuestionTag(tag_id=t.id) for t in tags]
        return self._save(q)


def option_id(question: Question, label: str) -> str:
    return next(o.id for o in question.options if o.label == label)


@pytest.fixture
def seed(db):
    return Seeder(db)
