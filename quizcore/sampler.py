"""
Random selection primitives: weighted sampling without replacement, uniform
shuffle and uniform sample. Every function takes an explicit random.Random so
callers and tests control the seed.
"""
import logging
import random
from typing import List, Optional, Sequence, TypeVar

from quizcore.models import Question, WeightedCandidate

logger = logging.getLogger(__name__)

T = TypeVar("T")


def shuffle(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Return a uniformly permuted copy (Fisher-Yates, last index down to first)."""
    rng = rng or random.Random()
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = rng.randint(0, i)
        out[i], out[j] = out[j], out[i]
    return out


def uniform_sample(items: Sequence[T], count: int, rng: Optional[random.Random] = None) -> List[T]:
    """Pick up to count distinct items uniformly at random."""
    return shuffle(items, rng)[:max(0, min(count, len(items)))]


def weighted_sample(
    candidates: Sequence[WeightedCandidate],
    count: int,
    rng: Optional[random.Random] = None,
) -> List[Question]:
    """
    Weighted random sampling without replacement.

    Each round draws r in [0, total) and walks the live candidates subtracting
    their weights; the first one that takes r to <= 0 is picked. Picked
    candidates are swapped past the live boundary instead of being removed.

    Args:
        candidates: Questions with their weights (weights >= 0)
        count: Number of questions wanted
        rng: Random source

    Returns:
        Distinct questions, at most min(count, len(candidates)) of them
    """
    rng = rng or random.Random()
    pool = list(candidates)
    live = len(pool)
    selected: List[Question] = []

    while len(selected) < count and live > 0:
        total_weight = sum(c.weight for c in pool[:live])

        if total_weight <= 0:
            # Degenerate: nothing carries weight, pick uniformly
            logger.debug(f"All {live} remaining candidates have zero weight; uniform pick")
            idx = rng.randrange(live)
        else:
            r = rng.random() * total_weight
            idx = None
            last_positive = None
            for i in range(live):
                w = pool[i].weight
                if w <= 0:
                    continue
                last_positive = i
                r -= w
                if r <= 0:
                    idx = i
                    break
            if idx is None:
                # Float rounding can leave r a hair above zero after the last item
                idx = last_positive

        selected.append(pool[idx].question)
        live -= 1
        pool[idx], pool[live] = pool[live], pool[idx]

    return selected
