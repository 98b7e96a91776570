"""
Supabase-backed storage for the quiz.
Answer history lives in `answer_history` (one row per namespace + question_id);
the question pool can be served from `questions`.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from supabase import Client

from quizcore.errors import LoadError, StorageError
from quizcore.history import DEFAULT_NAMESPACE, merge_answer
from quizcore.models import AnswerRecord, Question
from quizcore.question_bank import validate_question

logger = logging.getLogger(__name__)

HISTORY_TABLE = "answer_history"
QUESTIONS_TABLE = "questions"
PAGE_SIZE = 1000


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def fetch_all(query_factory: Callable, page_size: int = PAGE_SIZE) -> List[Dict]:
    """Page through a Supabase select (default server limit is often 1000 rows)."""
    all_rows = []
    offset = 0
    while True:
        r = query_factory().range(offset, offset + page_size - 1).execute()
        data = r.data or []
        if not data:
            break
        all_rows.extend(data)
        if len(data) < page_size:
            break
        offset += page_size
    return all_rows


class SupabaseHistoryStore:
    """HistoryStore over the Supabase `answer_history` table."""

    def __init__(
        self,
        client: Client,
        namespace: str = DEFAULT_NAMESPACE,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.client = client
        self.namespace = namespace
        self.clock = clock

    def read(self) -> Dict[str, AnswerRecord]:
        try:
            rows = fetch_all(
                lambda: self.client.table(HISTORY_TABLE)
                .select("*")
                .eq("namespace", self.namespace)
                .order("question_id")
            )
            return {str(row["question_id"]): AnswerRecord.from_dict(row) for row in rows}
        except Exception as e:
            logger.error(f"Error fetching answer history: {e}")
            raise StorageError("Could not read answer history from Supabase") from e

    def write(self, question_id: str, is_correct: bool) -> AnswerRecord:
        """
        Merge one answer into the stored record and upsert it immediately.

        Read-modify-write on a single row; one browser/Streamlit session per
        namespace is assumed, so no row locking is attempted.
        """
        try:
            existing = (
                self.client.table(HISTORY_TABLE)
                .select("*")
                .match({"namespace": self.namespace, "question_id": question_id})
                .execute()
            )
            current = AnswerRecord.from_dict(existing.data[0]) if existing.data else None
            record = merge_answer(current, question_id, is_correct, self.clock())
            row = {"namespace": self.namespace, **record.to_dict()}
            self.client.table(HISTORY_TABLE).upsert(row, on_conflict="namespace,question_id").execute()
        except Exception as e:
            logger.error(f"Error updating answer history for {question_id}: {e}")
            raise StorageError(f"Could not write answer history for {question_id}") from e
        logger.debug(f"History updated: Q={question_id}, Correct={is_correct}, Count={record.answer_count}")
        return record

    def clear(self) -> None:
        try:
            self.client.table(HISTORY_TABLE).delete().eq("namespace", self.namespace).execute()
        except Exception as e:
            logger.error(f"Error clearing answer history: {e}")
            raise StorageError("Could not clear answer history") from e
        logger.info(f"Cleared answer history '{self.namespace}'")


class SupabaseQuestionSource:
    """Question pool supplier reading the `questions` table."""

    def __init__(self, client: Client, subject: Optional[str] = None):
        self.client = client
        self.subject = subject

    def _query(self):
        q = self.client.table(QUESTIONS_TABLE).select("*")
        if self.subject:
            q = q.eq("subject", self.subject)
        return q.order("id")

    def load(self) -> List[Question]:
        try:
            rows = fetch_all(self._query)
        except Exception as e:
            logger.error(f"Error fetching questions: {e}")
            raise LoadError("Could not load questions from Supabase") from e
        try:
            questions = [validate_question(Question.from_dict(row)) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise LoadError(f"Malformed question row: {e}") from e
        if not questions:
            raise LoadError("No questions found in Supabase")
        logger.info(f"Loaded {len(questions)} questions from Supabase")
        return questions
