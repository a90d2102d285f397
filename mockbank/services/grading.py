"""
Answer grading rules, one per question type.

Nothing in this module touches the database: each function takes a question
(anything exposing ``id``, ``type``, ``options`` and ``solution``) and the
submitted answer, and returns the verdict together with the answer key so the
caller can render review state.
"""
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional

from mockbank.core.errors import ConfigurationError, ValidationError
from mockbank.models.orm import QuestionType

# Absolute tolerance for numeric answers, inclusive.
NAT_TOLERANCE = 0.0001


@dataclass(frozen=True)
class GradeResult:
    is_correct: bool
    correct_option_ids: List[str] = field(default_factory=list)
    correct_numeric_answer: Optional[float] = None


def parse_number(value: Any, what: str) -> float:
    """Parse ``value`` as a finite float or raise ``ValidationError``."""
    if isinstance(value, bool):
        raise ValidationError(f"{what} is not a number: {value!r}")
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{what} is not a number: {value!r}") from None
    if not math.isfinite(number):
        raise ValidationError(f"{what} must be finite, got {value!r}")
    return number


def grade_option(question: Any, selected_option_id: Optional[str]) -> GradeResult:
    """Grade an MCQ/MSQ answer.

    A single selected option id is checked for membership in the set of
    correct options. MSQ questions follow the same single-select rule: there
    is no multi-select or partial-credit scoring.
    """
    correct_ids = [o.id for o in question.options if o.is_correct]
    if not correct_ids:
        raise ConfigurationError(f"Question {question.id} has no correct option configured")
    is_correct = selected_option_id is not None and selected_option_id in correct_ids
    return GradeResult(is_correct=is_correct, correct_option_ids=correct_ids)


def grade_numeric(question: Any, numeric_answer: Any) -> GradeResult:
    """Grade a NAT answer against the solution value within ``NAT_TOLERANCE``."""
    solution = question.solution
    if solution is None:
        raise ConfigurationError(f"Solution missing for NAT question {question.id}")
    correct_value = parse_number(solution.answer_text, f"Solution answer for question {question.id}")
    if numeric_answer is None:
        return GradeResult(is_correct=False, correct_numeric_answer=correct_value)
    given = parse_number(numeric_answer, "numeric_answer")
    return GradeResult(
        is_correct=abs(correct_value - given) <= NAT_TOLERANCE,
        correct_numeric_answer=correct_value,
    )


def grade(question: Any, selected_option_id: Optional[str] = None, numeric_answer: Any = None) -> GradeResult:
    """Pick the rule for the question's type and grade the answer."""
    if question.type == QuestionType.NAT:
        return grade_numeric(question, numeric_answer)
    return grade_option(question, selected_option_id)
