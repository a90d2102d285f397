"""
Datastore queries used by the mock engine.

All reads of questions, bookmarks, mocks and submissions go through here so that the
services above only deal with loaded entities.
"""
import enum
from typing import Iterable, List, Optional, Type

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from mockbank.models.orm import (
    Bookmark, Difficulty, Exam, Mock, MockQuestion, MockSubmission, Question, QuestionAttempt,
    QuestionTag, QuestionTopic, QuestionType, Tag,
)
from mockbank.models.schemas import QuestionFilters


def enum_values(raw: Optional[Iterable[str]], enum_cls: Type[enum.Enum]) -> List[enum.Enum]:
    """Case-insensitive enum parsing; unknown entries are dropped."""
    allowed = {m.value: m for m in enum_cls}
    out = []
    for value in raw or []:
        member = allowed.get(str(value).strip().upper())
        if member is not None and member not in out:
            out.append(member)
    return out


def get_exam_by_code(db: Session, code: str) -> Optional[Exam]:
    return db.scalar(select(Exam).where(Exam.code == code))


def question_conditions(filters: QuestionFilters, exam_id: str, user_id: Optional[str] = None) -> list:
    """Build conjunctive WHERE clauses; an empty dimension adds nothing."""
    where = [Question.exam_id == exam_id]

    if filters.subject_ids:
        where.append(Question.subject_id.in_(filters.subject_ids))

    if filters.year_from is not None:
        where.append(Question.year >= filters.year_from)
    if filters.year_to is not None:
        where.append(Question.year <= filters.year_to)

    difficulties = enum_values(filters.difficulties, Difficulty)
    if difficulties:
        where.append(Question.difficulty.in_(difficulties))

    types = enum_values(filters.types, QuestionType)
    if types:
        where.append(Question.type.in_(types))

    if filters.marks:
        where.append(Question.marks.in_(filters.marks))

    if filters.formula_based is not None:
        where.append(Question.is_formula_based == filters.formula_based)

    if filters.has_solution is not None:
        where.append(Question.has_solution == filters.has_solution)

    if filters.topic_ids:
        where.append(Question.topic_links.any(QuestionTopic.topic_id.in_(filters.topic_ids)))

    # Tags match by id OR slug, but the tag dimension as a whole is still ANDed.
    tag_match = []
    if filters.tag_ids:
        tag_match.append(QuestionTag.tag_id.in_(filters.tag_ids))
    if filters.tag_slugs:
        tag_match.append(QuestionTag.tag.has(Tag.slug.in_(filters.tag_slugs)))
    if tag_match:
        where.append(Question.tag_links.any(or_(*tag_match)))

    if filters.only_unattempted and user_id:
        where.append(~Question.attempts.any(QuestionAttempt.user_id == user_id))

    if filters.only_bookmarked and user_id:
        where.append(Question.bookmarks.any(Bookmark.user_id == user_id))

    return where


def find_candidates(db: Session, exam_id: str, filters: QuestionFilters, user_id: Optional[str], limit: int) -> List[Question]:
    """Matching questions, newest first, at most ``limit`` of them."""
    stmt = (
        select(Question)
        .where(*question_conditions(filters, exam_id, user_id))
        .order_by(Question.year.desc(), Question.created_at.desc(), Question.id)
        .limit(limit)
    )
    return list(db.scalars(stmt).all())


def get_question(db: Session, question_id: str) -> Optional[Question]:
    stmt = (
        select(Question)
        .where(Question.id == question_id)
        .options(selectinload(Question.options), selectinload(Question.solution))
    )
    return db.scalar(stmt)


def load_mock(db: Session, mock_id: str) -> Optional[Mock]:
    """Mock with every question's options, solution, subject and topics."""
    stmt = (
        select(Mock)
        .where(Mock.id == mock_id)
        .options(
            selectinload(Mock.questions).selectinload(MockQuestion.question).options(
                selectinload(Question.options),
                selectinload(Question.solution),
                selectinload(Question.subject),
                selectinload(Question.topic_links).selectinload(QuestionTopic.topic),
            )
        )
    )
    return db.scalar(stmt)


def find_submission(db: Session, mock_id: str, user_id: str, submission_id: Optional[str] = None) -> Optional[MockSubmission]:
    """A specific submission, or the caller's most recent one for the mock."""
    stmt = (
        select(MockSubmission)
        .where(MockSubmission.mock_id == mock_id, MockSubmission.user_id == user_id)
        .options(selectinload(MockSubmission.responses))
    )
    if submission_id:
        stmt = stmt.where(MockSubmission.id == submission_id)
    else:
        stmt = stmt.order_by(MockSubmission.created_at.desc()).limit(1)
    return db.scalar(stmt)


def find_bookmark(db: Session, question_id: str, user_id: str) -> Optional[Bookmark]:
    return db.scalar(select(Bookmark).where(Bookmark.question_id == question_id, Bookmark.user_id == user_id))
