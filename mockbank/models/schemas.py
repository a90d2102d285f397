"""
Request and response models for the mock engine.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def _as_list(value: Any) -> Any:
    if value is None or isinstance(value, list):
        return value
    return [value]


# ========== Requests ==========

class QuestionFilters(BaseModel):
    exam_code: str
    subject_ids: Optional[List[str]] = None
    topic_ids: Optional[List[str]] = None
    difficulties: Optional[List[str]] = None
    types: Optional[List[str]] = None
    marks: Optional[List[int]] = None
    formula_based: Optional[bool] = None
    has_solution: Optional[bool] = None
    year_from: Optional[int] = None
    year_to: Optional[int] = None
    tag_ids: Optional[List[str]] = None
    tag_slugs: Optional[List[str]] = None
    only_unattempted: bool = False
    only_bookmarked: bool = False

    @field_validator(
        "subject_ids", "topic_ids", "difficulties", "types", "marks", "tag_ids", "tag_slugs",
        mode="before",
    )
    @classmethod
    def wrap_scalar(cls, v):
        return _as_list(v)


class MockCreate(QuestionFilters):
    name: str
    num_questions: int
    time_limit_minutes: Optional[int] = None


class AnswerIn(BaseModel):
    """One answer: an option pick or a numeric value, never both."""

    selected_option_id: Optional[str] = None
    numeric_answer: Optional[float] = None
    time_taken_seconds: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def one_answer_kind(self):
        if self.selected_option_id is not None and self.numeric_answer is not None:
            raise ValueError("selected_option_id and numeric_answer are mutually exclusive")
        return self


class ResponseIn(AnswerIn):
    question_id: str


class SubmissionCreate(BaseModel):
    responses: List[ResponseIn]


class AttemptCreate(AnswerIn):
    mode: Literal["practice"] = "practice"


# ========== Mock payloads ==========

class SubjectRef(BaseModel):
    id: str
    name: str


class TopicRef(BaseModel):
    id: str
    name: str


class OptionOut(BaseModel):
    id: str
    label: str
    text: str


class MockQuestionPayload(BaseModel):
    id: str
    year: int
    shift: Optional[str] = None
    marks: int
    type: str
    difficulty: str
    is_formula_based: bool
    body: str
    subject: Optional[SubjectRef] = None
    topics: List[TopicRef]
    options: List[OptionOut]


class MockQuestionOut(BaseModel):
    id: str
    order: int
    question_id: str
    question: MockQuestionPayload


class SubmissionSummary(BaseModel):
    id: str
    total_score: int
    created_at: datetime


class MockSummary(BaseModel):
    id: str
    name: str
    time_limit: Optional[int] = None
    created_at: datetime


class MockOut(MockSummary):
    questions: List[MockQuestionOut]
    latest_submission: Optional[SubmissionSummary] = None


# ========== Grading payloads ==========

class GradedResponse(BaseModel):
    question_id: str
    selected_option_id: Optional[str] = None
    numeric_answer: Optional[float] = None
    is_correct: bool
    correct_option_ids: List[str]
    correct_numeric_answer: Optional[float] = None
    time_taken_seconds: int


class SubmissionResult(BaseModel):
    submission_id: str
    total_score: int
    max_score: int
    created_at: datetime
    responses: List[GradedResponse]


class AttemptResult(BaseModel):
    attempt_id: str
    is_correct: bool
    correct_option_ids: List[str]
    correct_numeric_answer: Optional[float] = None


class BookmarkUpdate(BaseModel):
    action: Literal["add", "remove", "toggle"] = "toggle"


class BookmarkState(BaseModel):
    question_id: str
    is_bookmarked: bool


# ========== Analysis payloads ==========

class OverallStats(BaseModel):
    total_questions: int
    attempted: int
    correct: int
    total_score: int
    max_score: int
    accuracy: float
    avg_time_per_question: float
    total_time_taken: int


class BucketStats(BaseModel):
    id: str
    name: str
    total_questions: int
    attempted: int
    correct: int
    score: int
    accuracy: float


class DifficultyStats(BaseModel):
    total_questions: int
    attempted: int
    correct: int
    accuracy: float


class WeakTopic(BaseModel):
    topic_id: str
    topic_name: str
    attempted: int
    correct: int
    accuracy: float


class AnalysisReport(BaseModel):
    mock: MockSummary
    submission: SubmissionSummary
    overall: OverallStats
    by_subject: List[BucketStats]
    by_topic: List[BucketStats]
    by_difficulty: Dict[str, DifficultyStats]
    weak_topics: List[WeakTopic]
