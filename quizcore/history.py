"""
Answer history storage.

A HistoryStore maps question id -> AnswerRecord under one fixed namespace key.
Stores are read fresh on every call; writes merge one record and persist
immediately (read full snapshot, update one entry, write back).
"""
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol

from quizcore.errors import StorageError
from quizcore.models import AnswerRecord

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "quiz_exam_history"


class HistoryStore(Protocol):
    def read(self) -> Dict[str, AnswerRecord]: ...

    def write(self, question_id: str, is_correct: bool) -> AnswerRecord: ...

    def clear(self) -> None: ...


def merge_answer(
    existing: Optional[AnswerRecord],
    question_id: str,
    is_correct: bool,
    now: datetime,
) -> AnswerRecord:
    """Fold one answer into the existing record (or start a new one)."""
    last_correct_at = now if is_correct else (existing.last_correct_at if existing else None)
    return AnswerRecord(
        question_id=question_id,
        is_correct=is_correct,
        last_correct_at=last_correct_at,
        answer_count=(existing.answer_count if existing else 0) + 1,
        last_attempt_at=now,
    )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JsonFileHistoryStore:
    """History kept in a JSON file: {namespace: {question_id: record_dict}}."""

    def __init__(
        self,
        path: Path,
        namespace: str = DEFAULT_NAMESPACE,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.path = Path(path)
        self.namespace = namespace
        self.clock = clock

    def _load_file(self) -> Dict:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading history file {self.path}: {e}")
            raise StorageError(f"Could not read history from {self.path}") from e
        if not isinstance(raw, dict):
            raise StorageError(f"History file {self.path} is not a JSON object")
        return raw

    def _save_file(self, raw: Dict) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".history-", suffix=".json")
        except OSError as e:
            logger.error(f"Error writing history file {self.path}: {e}")
            raise StorageError(f"Could not write history to {self.path}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(raw, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as e:
            os.unlink(tmp)
            logger.error(f"Error writing history file {self.path}: {e}")
            raise StorageError(f"Could not write history to {self.path}") from e

    def read(self) -> Dict[str, AnswerRecord]:
        entries = self._load_file().get(self.namespace) or {}
        try:
            return {qid: AnswerRecord.from_dict({**rec, "question_id": qid}) for qid, rec in entries.items()}
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Malformed history record in {self.path}") from e

    def write(self, question_id: str, is_correct: bool) -> AnswerRecord:
        raw = self._load_file()
        entries = raw.get(self.namespace) or {}
        existing = None
        if question_id in entries:
            try:
                existing = AnswerRecord.from_dict({**entries[question_id], "question_id": question_id})
            except (KeyError, TypeError, ValueError) as e:
                raise StorageError(f"Malformed history record for {question_id}") from e
        record = merge_answer(existing, question_id, is_correct, self.clock())
        entries[question_id] = record.to_dict()
        raw[self.namespace] = entries
        self._save_file(raw)
        logger.debug(f"History updated: Q={question_id}, Correct={is_correct}, Count={record.answer_count}")
        return record

    def clear(self) -> None:
        raw = self._load_file()
        if self.namespace in raw:
            del raw[self.namespace]
            self._save_file(raw)
        logger.info(f"Cleared answer history '{self.namespace}'")


class MemoryHistoryStore:
    """In-process history; nothing survives a restart."""

    def __init__(self, records: Optional[Dict[str, AnswerRecord]] = None, clock: Callable[[], datetime] = _utc_now):
        self.records: Dict[str, AnswerRecord] = dict(records or {})
        self.clock = clock

    def read(self) -> Dict[str, AnswerRecord]:
        return dict(self.records)

    def write(self, question_id: str, is_correct: bool) -> AnswerRecord:
        record = merge_answer(self.records.get(question_id), question_id, is_correct, self.clock())
        self.records[question_id] = record
        return record

    def clear(self) -> None:
        self.records.clear()
