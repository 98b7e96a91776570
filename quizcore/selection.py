"""
Exam set builder: turns the question pool plus answer history into a shuffled
exam list, favouring weak and stale questions over recently mastered ones.
"""
import logging
import random
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from quizcore.models import AnswerRecord, Question, WeightedCandidate
from quizcore.sampler import shuffle, uniform_sample, weighted_sample
from quizcore.weighting import question_weight

logger = logging.getLogger(__name__)


def clamp_count(requested: int, upper: int, lower: int = 1) -> int:
    """Clamp a requested question count into [lower, upper]."""
    if upper < lower:
        return upper
    return max(lower, min(int(requested), upper))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ExamSetBuilder:
    """Builds exam question lists with spaced-repetition weighting."""

    def __init__(self, rng: Optional[random.Random] = None, clock: Callable[[], datetime] = utc_now):
        self.rng = rng or random.Random()
        self.clock = clock

    def candidates(self, pool: List[Question], history: Dict[str, AnswerRecord]) -> List[WeightedCandidate]:
        """Weight every pool question against the given history snapshot."""
        now = self.clock()
        return [WeightedCandidate(q, question_weight(history.get(q.id), now)) for q in pool]

    def build(self, pool: List[Question], history: Dict[str, AnswerRecord], count: int) -> List[Question]:
        """
        Select and shuffle count questions from the pool.

        Args:
            pool: All available questions
            history: question id -> AnswerRecord, read fresh by the caller
            count: Requested exam size (clamped to [1, len(pool)])

        Returns:
            Distinct questions in random presentation order
        """
        if not pool:
            return []
        clamped = clamp_count(count, len(pool))
        if clamped != count:
            logger.warning(f"Requested {count} questions, clamped to {clamped} (pool size {len(pool)})")
        count = clamped

        if count >= len(pool):
            logger.debug("Full pool requested; skipping weighting")
            return shuffle(pool, self.rng)[:count]

        available = [c for c in self.candidates(pool, history) if c.weight > 0]
        logger.debug(f"{len(available)}/{len(pool)} questions eligible after mastery filter")

        if not available:
            logger.warning("Every question recently mastered; falling back to uniform selection")
            selected = uniform_sample(pool, count, self.rng)
        else:
            selected = weighted_sample(available, count, self.rng)

        return shuffle(selected, self.rng)
