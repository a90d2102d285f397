"""
Submission scoring: grade a batch of responses against a mock and persist it.
"""
import logging
from typing import List, Sequence, Tuple

from sqlalchemy.orm import Session

from mockbank.core.auth import ensure_owner
from mockbank.core.database import transaction
from mockbank.core.errors import ConfigurationError, NotFound, ValidationError
from mockbank.models.orm import AttemptMode, MockQuestionResponse, MockSubmission, QuestionAttempt
from mockbank.models.schemas import GradedResponse, ResponseIn, SubmissionResult
from mockbank.services import question_repository as repo
from mockbank.services.grading import GradeResult, grade

logger = logging.getLogger(__name__)


def _check_unique(responses: Sequence[ResponseIn]) -> None:
    seen = set()
    for entry in responses:
        if entry.question_id in seen:
            raise ValidationError(f"Question {entry.question_id} answered more than once")
        seen.add(entry.question_id)


def submit_mock(db: Session, mock_id: str, user_id: str, responses: Sequence[ResponseIn]) -> SubmissionResult:
    """Grade ``responses`` against the mock and store them as one submission.

    Responses for questions outside the mock are ignored. A question whose
    answer key is missing is skipped and logged; it never counts as a wrong
    answer and never blocks the rest of the batch. Every call creates a new
    submission (retakes are legitimate).
    """
    mock = repo.load_mock(db, mock_id)
    if mock is None:
        raise NotFound("Mock not found")
    ensure_owner(mock.user_id, user_id, "mock")

    if not responses:
        raise ValidationError("Responses array cannot be empty")

    questions = {mq.question_id: mq.question for mq in mock.questions}
    max_score = sum(q.marks for q in questions.values())

    in_mock = []
    for entry in responses:
        if entry.question_id in questions:
            in_mock.append(entry)
        else:
            logger.debug("Ignoring response for question %s outside mock %s", entry.question_id, mock.id)
    _check_unique(in_mock)

    graded: List[Tuple[ResponseIn, GradeResult]] = []
    total_score = 0
    for entry in in_mock:
        question = questions[entry.question_id]
        try:
            result = grade(question, entry.selected_option_id, entry.numeric_answer)
        except ConfigurationError as e:
            logger.warning("Skipping question %s in mock %s: %s", question.id, mock.id, e.message)
            continue
        if result.is_correct:
            total_score += question.marks
        graded.append((entry, result))

    with transaction(db):
        submission = MockSubmission(mock_id=mock.id, user_id=user_id, total_score=total_score)
        submission.responses = [
            MockQuestionResponse(
                question_id=entry.question_id,
                selected_option_id=entry.selected_option_id,
                numeric_answer=entry.numeric_answer,
                is_correct=result.is_correct,
                time_taken_seconds=entry.time_taken_seconds,
            )
            for entry, result in graded
        ]
        db.add(submission)
        db.add_all([
            QuestionAttempt(
                user_id=user_id,
                question_id=entry.question_id,
                selected_option_id=entry.selected_option_id,
                numeric_answer=entry.numeric_answer,
                is_correct=result.is_correct,
                time_taken_seconds=entry.time_taken_seconds,
                mode=AttemptMode.MOCK,
            )
            for entry, result in graded
        ])
        db.flush()
        submission_id, created_at = submission.id, submission.created_at

    logger.info(
        "Mock %s submission %s: score %d/%d over %d graded responses",
        mock.id, submission_id, total_score, max_score, len(graded),
    )
    return SubmissionResult(
        submission_id=submission_id,
        total_score=total_score,
        max_score=max_score,
        created_at=created_at,
        responses=[
            GradedResponse(
                question_id=entry.question_id,
                selected_option_id=entry.selected_option_id,
                numeric_answer=entry.numeric_answer,
                is_correct=result.is_correct,
                correct_option_ids=result.correct_option_ids,
                correct_numeric_answer=result.correct_numeric_answer,
                time_taken_seconds=entry.time_taken_seconds,
            )
            for entry, result in graded
        ],
    )
