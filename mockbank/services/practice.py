"""
Single-question practice attempts.
"""
import logging

from sqlalchemy.orm import Session

from mockbank.core.database import transaction
from mockbank.core.errors import NotFound, ValidationError
from mockbank.models.orm import AttemptMode, QuestionAttempt, QuestionType
from mockbank.models.schemas import AttemptCreate, AttemptResult
from mockbank.services import question_repository as repo
from mockbank.services.grading import grade

logger = logging.getLogger(__name__)


def record_attempt(db: Session, question_id: str, user_id: str, payload: AttemptCreate) -> AttemptResult:
    question = repo.get_question(db, question_id)
    if question is None:
        raise NotFound("Question not found")

    if question.type == QuestionType.NAT:
        if payload.numeric_answer is None:
            raise ValidationError("numeric_answer is required for NAT questions")
    elif not payload.selected_option_id:
        raise ValidationError("selected_option_id is required for option questions")

    result = grade(question, payload.selected_option_id, payload.numeric_answer)

    with transaction(db):
        attempt = QuestionAttempt(
            user_id=user_id,
            question_id=question.id,
            selected_option_id=payload.selected_option_id,
            numeric_answer=payload.numeric_answer,
            is_correct=result.is_correct,
            time_taken_seconds=payload.time_taken_seconds,
            mode=AttemptMode(payload.mode),
        )
        db.add(attempt)
        db.flush()
        attempt_id = attempt.id

    logger.info("User %s attempted question %s (correct=%s)", user_id, question_id, result.is_correct)
    return AttemptResult(
        attempt_id=attempt_id,
        is_correct=result.is_correct,
        correct_option_ids=result.correct_option_ids,
        correct_numeric_answer=result.correct_numeric_answer,
    )
