"""
Data records shared by the selection engine, the history stores and the exam session.

- Question: one multiple-choice item from the pool (immutable once loaded)
- AnswerRecord: latest answer state for one question, keyed by question id
- WeightedCandidate: (question, weight) pair built per selection run
"""
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class Question:
    id: str
    subject: str
    text: str
    options: Tuple[str, ...]
    correct_index: int
    explanation: str = ""

    @staticmethod
    def from_dict(d: Dict) -> "Question":
        return Question(
            id=str(d["id"]),
            subject=d.get("subject", "General"),
            text=d["text"],
            options=tuple(d["options"]),
            correct_index=int(d["correct_index"]),
            explanation=d.get("explanation") or "",
        )

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "subject": self.subject,
            "text": self.text,
            "options": list(self.options),
            "correct_index": self.correct_index,
            "explanation": self.explanation,
        }


_FRACTION = re.compile(r"\.(\d+)(?=[+-]\d\d:\d\d$|$)")


def _parse_ts(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, (int, float)):
        # epoch milliseconds
        ts = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    else:
        text = str(value).replace("Z", "+00:00")
        # fromisoformat on 3.10 only takes 3 or 6 fraction digits
        text = _FRACTION.sub(lambda m: "." + m.group(1).ljust(6, "0")[:6], text)
        ts = datetime.fromisoformat(text)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _format_ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class AnswerRecord:
    """Latest answer state for one question.

    last_correct_at is only ever set by a correct answer and survives later
    wrong answers; answer_count never decreases.
    """
    question_id: str
    is_correct: bool
    last_correct_at: Optional[datetime]
    answer_count: int
    last_attempt_at: Optional[datetime]

    @staticmethod
    def from_dict(d: Dict) -> "AnswerRecord":
        return AnswerRecord(
            question_id=str(d["question_id"]),
            is_correct=bool(d.get("is_correct")),
            last_correct_at=_parse_ts(d.get("last_correct_at")),
            answer_count=int(d.get("answer_count") or 0),
            last_attempt_at=_parse_ts(d.get("last_attempt_at")),
        )

    def to_dict(self) -> Dict:
        return {
            "question_id": self.question_id,
            "is_correct": self.is_correct,
            "last_correct_at": _format_ts(self.last_correct_at),
            "answer_count": self.answer_count,
            "last_attempt_at": _format_ts(self.last_attempt_at),
        }


@dataclass
class WeightedCandidate:
    question: Question
    weight: float = 1.0
