"""
Forgetting-curve weight for a question, from its answer history.

Never answered, or last answered wrong: 1.0.
Last answered correctly: step function of days since that correct answer,
each threshold exclusive (exactly 10.0 days already falls in the 0.3 bracket).
"""
from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple

from engine import SECONDS_PER_DAY, STALE_WEIGHT, WEIGHT_BRACKETS
from quizcore.models import AnswerRecord


def days_since(ts: datetime, now: datetime) -> float:
    return (now - ts).total_seconds() / SECONDS_PER_DAY


def question_weight(
    record: Optional[AnswerRecord],
    now: Optional[datetime] = None,
    brackets: Sequence[Tuple[float, float]] = WEIGHT_BRACKETS,
) -> float:
    """
    Sampling weight in [0, 1] for one question.

    Args:
        record: AnswerRecord for the question, or None if never answered
        now: Reference time (defaults to current UTC time)
        brackets: (days_threshold, weight) pairs in ascending threshold order

    Returns:
        0.0 for recently mastered questions up to 1.0 for stale or weak ones
    """
    if record is None or not record.is_correct:
        return STALE_WEIGHT
    if record.last_correct_at is None:
        # Marked correct without a timestamp: nothing to measure recency against
        return STALE_WEIGHT

    now = now or datetime.now(timezone.utc)
    days_passed = days_since(record.last_correct_at, now)
    for threshold, weight in brackets:
        if days_passed < threshold:
            return weight
    return STALE_WEIGHT
