"""
Exam Engine: adaptive question selection, timed answering, scoring and history write-back.
Sessions move NotStarted -> InProgress -> Submitted; Submitted is terminal.
"""
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from engine import MASTERY_WINDOW_DAYS, TIME_LIMIT_SECONDS
from quizcore.errors import LoadError, SessionStateError, StorageError
from quizcore.history import HistoryStore
from quizcore.models import AnswerRecord, Question
from quizcore.selection import ExamSetBuilder, clamp_count, utc_now
from quizcore.weighting import days_since

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"


@dataclass(frozen=True)
class QuestionResult:
    question: Question
    chosen_index: Optional[int]
    is_correct: bool

    @property
    def answered(self) -> bool:
        return self.chosen_index is not None

    @property
    def correct_index(self) -> int:
        return self.question.correct_index

    @property
    def explanation(self) -> str:
        return self.question.explanation


@dataclass
class ExamResult:
    items: List[QuestionResult]
    correct_count: int
    total: int
    timed_out: bool = False
    started_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    subject_breakdown: Dict[str, Dict[str, int]] = field(default_factory=dict)

    @property
    def wrong_count(self) -> int:
        return self.total - self.correct_count

    @property
    def percentage(self) -> int:
        return round(self.correct_count / self.total * 100) if self.total > 0 else 0

    @property
    def duration_seconds(self) -> float:
        if self.started_at is None or self.submitted_at is None:
            return 0.0
        return (self.submitted_at - self.started_at).total_seconds()


def score_answers(questions: List[Question], answers: List[Optional[int]]) -> List[QuestionResult]:
    """Compare each recorded answer to the correct option; unanswered (None) is wrong."""
    if len(questions) != len(answers):
        raise ValueError(f"{len(questions)} questions but {len(answers)} answers")
    return [
        QuestionResult(question=q, chosen_index=a, is_correct=a is not None and a == q.correct_index)
        for q, a in zip(questions, answers)
    ]


def subject_breakdown(items: List[QuestionResult]) -> Dict[str, Dict[str, int]]:
    stats: Dict[str, Dict[str, int]] = {}
    for item in items:
        s = stats.setdefault(item.question.subject, {"total": 0, "correct": 0})
        s["total"] += 1
        if item.is_correct:
            s["correct"] += 1
    return stats


class ExamSession:
    """A single timed exam: question set generation, answer tracking and scoring."""

    def __init__(
        self,
        pool: List[Question],
        history: HistoryStore,
        builder: Optional[ExamSetBuilder] = None,
        time_limit_seconds: int = TIME_LIMIT_SECONDS,
        clock: Callable[[], datetime] = utc_now,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            pool: Loaded question pool (must not be empty)
            history: Answer history store, read at start and written on submit
            builder: Exam set builder (defaults to one sharing clock and rng)
            time_limit_seconds: Exam duration before automatic submission
            clock: Returns the current aware UTC datetime
            rng: Random source for selection and shuffling
        """
        if not pool:
            raise LoadError("Cannot start an exam with an empty question pool")
        self.session_id = uuid4()
        self.pool = list(pool)
        self.history = history
        self.clock = clock
        self.builder = builder or ExamSetBuilder(rng=rng, clock=clock)
        self.time_limit_seconds = time_limit_seconds

        self.status = SessionStatus.NOT_STARTED
        self.questions: List[Question] = []
        self.answers: List[Optional[int]] = []
        self.started_at: Optional[datetime] = None
        self.result: Optional[ExamResult] = None

    # ============= Transitions =============

    def start(self, requested_count: int) -> "ExamSession":
        """Generate the exam set and begin timing. NotStarted -> InProgress."""
        if self.status is not SessionStatus.NOT_STARTED:
            raise SessionStateError(f"Session {self.session_id} already {self.status.value}")

        count = clamp_count(requested_count, len(self.pool))
        if count != requested_count:
            logger.warning(f"Requested {requested_count} questions, using {count} (pool size {len(self.pool)})")
        snapshot = self.history.read()
        self.questions = self.builder.build(self.pool, snapshot, count)
        self.answers = [None] * len(self.questions)
        self.started_at = self.clock()
        self.status = SessionStatus.IN_PROGRESS

        logger.info(f"Exam session {self.session_id}: generated {len(self.questions)} questions (requested {requested_count})")
        return self

    def record_answer(self, index: int, option_index: Optional[int]) -> "ExamSession":
        """Set or overwrite the answer at index; None clears it."""
        if self.status is not SessionStatus.IN_PROGRESS:
            raise SessionStateError(f"Cannot answer: session is {self.status.value}")
        if not 0 <= index < len(self.questions):
            raise SessionStateError(f"Question index {index} out of range (0-{len(self.questions) - 1})")
        if option_index is not None and not 0 <= option_index < len(self.questions[index].options):
            raise SessionStateError(f"Option {option_index} out of range for question {index}")
        self.answers[index] = option_index
        logger.debug(f"Answer recorded: #{index}, Q={self.questions[index].id}, Choice={option_index}")
        return self

    def submit(self, timed_out: bool = False) -> ExamResult:
        """
        Score the exam and write one history update per question.

        Calling again after submission returns the existing result and writes
        nothing. If history writes fail the session still ends Submitted with
        its result kept on self.result, and StorageError is raised afterwards.

        Returns:
            ExamResult with per-question correctness and aggregate score
        """
        if self.status is SessionStatus.SUBMITTED:
            logger.debug(f"Session {self.session_id} already submitted; ignoring")
            return self.result
        if self.status is SessionStatus.NOT_STARTED:
            raise SessionStateError("Cannot submit an exam that has not started")

        items = score_answers(self.questions, self.answers)
        correct = sum(1 for item in items if item.is_correct)
        self.result = ExamResult(
            items=items,
            correct_count=correct,
            total=len(items),
            timed_out=timed_out,
            started_at=self.started_at,
            submitted_at=self.clock(),
            subject_breakdown=subject_breakdown(items),
        )
        self.status = SessionStatus.SUBMITTED

        failed = 0
        for item in items:
            try:
                self.history.write(item.question.id, item.is_correct)
            except StorageError as e:
                failed += 1
                logger.error(f"History write failed for {item.question.id}: {e}")

        logger.info(
            f"Session {self.session_id} submitted{' (time limit)' if timed_out else ''}: "
            f"Score={correct}/{len(items)} ({self.result.percentage}%)"
        )
        if failed:
            raise StorageError(f"{failed} of {len(items)} history updates failed; results were still scored")
        return self.result

    # ============= Timing =============

    def time_elapsed(self) -> float:
        if self.started_at is None:
            return 0.0
        return (self.clock() - self.started_at).total_seconds()

    def time_remaining(self) -> int:
        """Whole seconds left before automatic submission."""
        if self.status is SessionStatus.NOT_STARTED:
            return self.time_limit_seconds
        return max(0, int(self.time_limit_seconds - self.time_elapsed()))

    def is_expired(self) -> bool:
        return self.status is SessionStatus.IN_PROGRESS and self.time_elapsed() >= self.time_limit_seconds

    def submit_if_expired(self) -> Optional[ExamResult]:
        """Submit on behalf of the timer once the limit has passed."""
        if self.is_expired():
            return self.submit(timed_out=True)
        return None

    # ============= Progress =============

    def answered_count(self) -> int:
        return sum(1 for a in self.answers if a is not None)

    def get_session_summary(self) -> Dict:
        """Real-time progress for display during the exam."""
        return {
            "session_id": str(self.session_id),
            "status": self.status.value,
            "total_questions": len(self.questions),
            "questions_answered": self.answered_count(),
            "questions_unanswered": len(self.questions) - self.answered_count(),
            "time_elapsed_sec": self.time_elapsed(),
            "time_remaining_sec": self.time_remaining(),
        }


def calculate_learning_stats(history: Dict[str, AnswerRecord], now: Optional[datetime] = None) -> Dict:
    """
    Summarise answer history for the welcome screen.

    Args:
        history: question id -> AnswerRecord snapshot
        now: Reference time for the mastery window

    Returns:
        {total_answered, correct_count, accuracy_percent, mastered_count}
    """
    now = now or utc_now()
    total = len(history)
    correct = sum(1 for r in history.values() if r.is_correct)
    mastered = sum(
        1
        for r in history.values()
        if r.is_correct and r.last_correct_at is not None and days_since(r.last_correct_at, now) < MASTERY_WINDOW_DAYS
    )
    return {
        "total_answered": total,
        "correct_count": correct,
        "accuracy_percent": round(correct / total * 100) if total > 0 else 0,
        "mastered_count": mastered,
    }
