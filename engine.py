"""Pure exam constants: timing, count bounds, forgetting-curve weights. No UI."""
# Weight by days since last correct answer: <10 -> 0.0, <30 -> 0.3, <90 -> 0.6, else 1.0
# Unanswered or last answered wrong -> 1.0

TIME_LIMIT_SECONDS = 1800
MIN_QUESTION_COUNT = 1
MAX_QUESTION_COUNT = 50
DEFAULT_QUESTION_COUNT = 10

WEIGHT_BRACKETS = ((10, 0.0), (30, 0.3), (90, 0.6))
STALE_WEIGHT = 1.0
MASTERY_WINDOW_DAYS = 10

SECONDS_PER_DAY = 86400
OPTION_LABELS = "ABCDEFGHIJ"
