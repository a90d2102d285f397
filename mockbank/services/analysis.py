"""
Performance analysis of one mock submission.

The report walks every question of the mock (not just the answered ones) so
unattempted questions still count towards totals, then folds each question
into overall, subject, topic and difficulty buckets.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from mockbank.core.auth import ensure_owner
from mockbank.core.errors import NotFound
from mockbank.models.orm import Difficulty, Mock, MockSubmission
from mockbank.models.schemas import (
    AnalysisReport, BucketStats, DifficultyStats, OverallStats, WeakTopic,
)
from mockbank.services import question_repository as repo
from mockbank.services.mocks import mock_summary, submission_summary

logger = logging.getLogger(__name__)

# Weak-topic policy: enough attempts to judge, and accuracy strictly below the bar.
WEAK_TOPIC_MIN_ATTEMPTED = 3
WEAK_TOPIC_MAX_ACCURACY = 0.6


def accuracy(correct: int, attempted: int) -> float:
    return correct / attempted if attempted else 0.0


@dataclass
class Bucket:
    id: str
    name: str
    total_questions: int = 0
    attempted: int = 0
    correct: int = 0
    score: int = 0

    def add(self, attempted: bool, correct: bool, marks: int) -> None:
        self.total_questions += 1
        if attempted:
            self.attempted += 1
        if correct:
            self.correct += 1
            self.score += marks

    @property
    def accuracy(self) -> float:
        return accuracy(self.correct, self.attempted)

    def stats(self) -> BucketStats:
        return BucketStats(
            id=self.id,
            name=self.name,
            total_questions=self.total_questions,
            attempted=self.attempted,
            correct=self.correct,
            score=self.score,
            accuracy=self.accuracy,
        )


def select_weak_topics(topics: List[BucketStats]) -> List[WeakTopic]:
    """Topics with enough attempts and low accuracy, weakest first."""
    weak = [
        t for t in topics
        if t.attempted >= WEAK_TOPIC_MIN_ATTEMPTED and t.accuracy < WEAK_TOPIC_MAX_ACCURACY
    ]
    weak.sort(key=lambda t: t.accuracy)
    return [
        WeakTopic(topic_id=t.id, topic_name=t.name, attempted=t.attempted, correct=t.correct, accuracy=t.accuracy)
        for t in weak
    ]


def build_report(mock: Mock, submission: MockSubmission) -> AnalysisReport:
    """Pure aggregation over an already loaded mock and submission."""
    responses = {r.question_id: r for r in submission.responses}

    overall = Bucket(id=mock.id, name=mock.name)
    max_score = 0
    total_time = 0
    subjects: Dict[str, Bucket] = {}
    topics: Dict[str, Bucket] = {}
    difficulty = {d.value: Bucket(id=d.value, name=d.value) for d in Difficulty}

    for mq in sorted(mock.questions, key=lambda mq: mq.order):
        q = mq.question
        response = responses.get(q.id)
        attempted = response is not None
        correct = attempted and response.is_correct
        max_score += q.marks
        if attempted:
            total_time += response.time_taken_seconds or 0

        overall.add(attempted, correct, q.marks)
        if q.subject is not None:
            subjects.setdefault(q.subject.id, Bucket(id=q.subject.id, name=q.subject.name)).add(attempted, correct, q.marks)
        for topic in q.topics:
            topics.setdefault(topic.id, Bucket(id=topic.id, name=topic.name)).add(attempted, correct, q.marks)
        difficulty[q.difficulty.value].add(attempted, correct, q.marks)

    by_topic = [b.stats() for b in topics.values()]
    return AnalysisReport(
        mock=mock_summary(mock),
        submission=submission_summary(submission),
        overall=OverallStats(
            total_questions=overall.total_questions,
            attempted=overall.attempted,
            correct=overall.correct,
            total_score=overall.score,
            max_score=max_score,
            accuracy=overall.accuracy,
            avg_time_per_question=total_time / overall.attempted if overall.attempted else 0.0,
            total_time_taken=total_time,
        ),
        by_subject=[b.stats() for b in subjects.values()],
        by_topic=by_topic,
        by_difficulty={
            key: DifficultyStats(
                total_questions=b.total_questions,
                attempted=b.attempted,
                correct=b.correct,
                accuracy=b.accuracy,
            )
            for key, b in difficulty.items()
        },
        weak_topics=select_weak_topics(by_topic),
    )


def analyze_submission(db: Session, mock_id: str, user_id: str, submission_id: Optional[str] = None) -> AnalysisReport:
    """Report for ``submission_id``, or for the caller's latest submission of the mock."""
    mock = repo.load_mock(db, mock_id)
    if mock is None:
        raise NotFound("Mock not found")
    ensure_owner(mock.user_id, user_id, "mock")

    submission = repo.find_submission(db, mock.id, user_id, submission_id)
    if submission is None:
        raise NotFound("Submission not found")

    logger.debug("Analyzing submission %s of mock %s", submission.id, mock.id)
    return build_report(mock, submission)
