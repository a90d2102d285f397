"""
Mock read model: the ordered question paper a user takes.
"""
from typing import Optional

from sqlalchemy.orm import Session

from mockbank.core.auth import ensure_owner
from mockbank.core.errors import NotFound
from mockbank.models.orm import Mock, MockSubmission, Question
from mockbank.models.schemas import (
    MockOut, MockQuestionOut, MockQuestionPayload, MockSummary, OptionOut,
    SubjectRef, SubmissionSummary, TopicRef,
)
from mockbank.services import question_repository as repo


def question_payload(q: Question) -> MockQuestionPayload:
    # Correctness flags and solutions stay server-side until review.
    return MockQuestionPayload(
        id=q.id,
        year=q.year,
        shift=q.shift,
        marks=q.marks,
        type=q.type.value,
        difficulty=q.difficulty.value,
        is_formula_based=q.is_formula_based,
        body=q.body,
        subject=SubjectRef(id=q.subject.id, name=q.subject.name) if q.subject else None,
        topics=[TopicRef(id=t.id, name=t.name) for t in q.topics],
        options=[OptionOut(id=o.id, label=o.label, text=o.text) for o in q.options],
    )


def mock_summary(mock: Mock) -> MockSummary:
    return MockSummary(id=mock.id, name=mock.name, time_limit=mock.time_limit, created_at=mock.created_at)


def submission_summary(submission: MockSubmission) -> SubmissionSummary:
    return SubmissionSummary(id=submission.id, total_score=submission.total_score, created_at=submission.created_at)


def mock_payload(mock: Mock, latest: Optional[MockSubmission] = None) -> MockOut:
    return MockOut(
        **mock_summary(mock).model_dump(),
        questions=[
            MockQuestionOut(id=mq.id, order=mq.order, question_id=mq.question_id, question=question_payload(mq.question))
            for mq in sorted(mock.questions, key=lambda mq: mq.order)
        ],
        latest_submission=submission_summary(latest) if latest else None,
    )


def get_mock(db: Session, mock_id: str, user_id: str) -> MockOut:
    """Owner-only view of a mock plus their most recent submission."""
    mock = repo.load_mock(db, mock_id)
    if mock is None:
        raise NotFound("Mock not found")
    ensure_owner(mock.user_id, user_id, "mock")
    return mock_payload(mock, repo.find_submission(db, mock.id, user_id))
