"""
Mock assembly: sample a filtered question pool into an ordered, persisted mock.
"""
import logging
import random
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from mockbank.core.config import settings
from mockbank.core.database import transaction
from mockbank.core.errors import NoCandidates, NotFound, ValidationError
from mockbank.models.orm import Mock, MockQuestion, Question
from mockbank.models.schemas import MockCreate, MockOut
from mockbank.services import question_repository as repo
from mockbank.services.mocks import mock_payload

logger = logging.getLogger(__name__)

# Candidate pool: this many candidates per requested question, never more than the ceiling.
POOL_FACTOR = 5
POOL_CEILING = 500


def pool_limit(num_questions: int) -> int:
    return min(POOL_CEILING, num_questions * POOL_FACTOR)


def sample_questions(candidates: Sequence[Question], k: int, rng: Optional[random.Random] = None) -> List[Question]:
    """Uniformly shuffle the pool and keep the first ``k`` (or all, if fewer)."""
    pool = list(candidates)
    (rng or random).shuffle(pool)
    return pool[:k]


def validate_request(payload: MockCreate) -> None:
    if not payload.name or not payload.name.strip():
        raise ValidationError("Mock name is required")
    if not payload.exam_code or not payload.exam_code.strip():
        raise ValidationError("exam_code is required")
    if payload.num_questions <= 0:
        raise ValidationError("num_questions must be a positive number")
    if payload.num_questions > settings.MOCK_MAX_QUESTIONS:
        raise ValidationError(f"num_questions cannot exceed {settings.MOCK_MAX_QUESTIONS} for a single mock")
    if payload.time_limit_minutes is not None and payload.time_limit_minutes <= 0:
        raise ValidationError("time_limit_minutes must be a positive number or null")
    if payload.year_from is not None and payload.year_to is not None and payload.year_from > payload.year_to:
        raise ValidationError("year_from cannot be later than year_to")


def assemble_mock(db: Session, payload: MockCreate, user_id: str, rng: Optional[random.Random] = None) -> MockOut:
    """Create a mock owned by ``user_id`` from the questions matching ``payload``.

    Raises ``ValidationError`` for bad input, ``NotFound`` for an unknown exam
    and ``NoCandidates`` when the filters match nothing. An under-supplied pool
    produces a smaller mock rather than an error.
    """
    validate_request(payload)

    exam = repo.get_exam_by_code(db, payload.exam_code.strip())
    if exam is None:
        raise NotFound("Exam not found")

    candidates = repo.find_candidates(db, exam.id, payload, user_id, pool_limit(payload.num_questions))
    if not candidates:
        raise NoCandidates("No questions found matching the criteria")

    if len(candidates) < payload.num_questions:
        logger.warning(
            "Requested %d questions, but only %d found for exam %s. Creating smaller mock.",
            payload.num_questions, len(candidates), exam.code,
        )

    selected = sample_questions(candidates, payload.num_questions, rng)

    with transaction(db):
        mock = Mock(user_id=user_id, name=payload.name.strip(), time_limit=payload.time_limit_minutes)
        mock.questions = [MockQuestion(question_id=q.id, order=i) for i, q in enumerate(selected, start=1)]
        db.add(mock)

    logger.info("Created mock %s with %d questions for user %s", mock.id, len(selected), user_id)
    return mock_payload(repo.load_mock(db, mock.id))
