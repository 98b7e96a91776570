"""Shared fixtures: a 12-question/2-subject pool, a controllable clock, and a fake Supabase client."""
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from quizcore.history import JsonFileHistoryStore, MemoryHistoryStore
from quizcore.models import AnswerRecord, Question

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_question(qid: str, subject: str = "Math", correct_index: int = 0) -> Question:
    """Helper to create test questions."""
    return Question(
        id=qid,
        subject=subject,
        text=f"Question {qid}?",
        options=("opt A", "opt B", "opt C", "opt D"),
        correct_index=correct_index,
        explanation=f"Because {qid}.",
    )


def correct_record(qid: str, days_ago: float, now: datetime = NOW, count: int = 1) -> AnswerRecord:
    ts = now - timedelta(days=days_ago)
    return AnswerRecord(question_id=qid, is_correct=True, last_correct_at=ts, answer_count=count, last_attempt_at=ts)


def write_subject_file(directory: Path, index: int, subject: str, questions: list) -> Path:
    path = directory / f"{index:04d}.json"
    path.write_text(json.dumps({"subjectName": subject, "questions": questions}, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def pool() -> list[Question]:
    """12 questions, 6 Math then 6 History."""
    return [
        make_question(f"{1 if i < 6 else 2}-{i % 6}", "Math" if i < 6 else "History", correct_index=i % 4)
        for i in range(12)
    ]


@pytest.fixture
def memory_store(clock) -> MemoryHistoryStore:
    return MemoryHistoryStore(clock=clock)


@pytest.fixture
def file_store(tmp_path: Path, clock) -> JsonFileHistoryStore:
    return JsonFileHistoryStore(tmp_path / "history.json", clock=clock)


# --- Fake Supabase client (table().select().eq().range().execute() chains) ---

class FakeQuery:
    def __init__(self, client: "FakeSupabase", name: str):
        self.client = client
        self.name = name
        self.action = "select"
        self.filters = {}
        self.bounds = None
        self.order_col = None
        self.payload = None
        self.on_conflict = None

    def select(self, *columns, **kwargs):
        self.action = "select"
        return self

    def eq(self, column, value):
        self.filters[column] = value
        return self

    def match(self, filters: dict):
        self.filters.update(filters)
        return self

    def order(self, column, desc=False):
        self.order_col = column
        return self

    def range(self, start, end):
        self.bounds = (start, end)
        return self

    def upsert(self, payload, on_conflict=None):
        self.action = "upsert"
        self.payload = payload if isinstance(payload, list) else [payload]
        self.on_conflict = on_conflict
        return self

    def delete(self):
        self.action = "delete"
        return self

    def _matches(self, row):
        return all(row.get(k) == v for k, v in self.filters.items())

    def execute(self):
        self.client.calls.append((self.name, self.action, dict(self.filters), self.bounds))
        if self.client.fail:
            raise RuntimeError("connection refused")
        rows = self.client.tables.setdefault(self.name, [])
        if self.action == "select":
            found = [dict(r) for r in rows if self._matches(r)]
            if self.order_col:
                found.sort(key=lambda r: r.get(self.order_col))
            if self.bounds:
                found = found[self.bounds[0]:self.bounds[1] + 1]
            return SimpleNamespace(data=found, count=len(found))
        if self.action == "upsert":
            keys = (self.on_conflict or "id").split(",")
            for new in self.payload:
                for i, old in enumerate(rows):
                    if all(old.get(k) == new.get(k) for k in keys):
                        rows[i] = dict(new)
                        break
                else:
                    rows.append(dict(new))
            return SimpleNamespace(data=list(self.payload), count=len(self.payload))
        if self.action == "delete":
            kept = [r for r in rows if not self._matches(r)]
            removed = len(rows) - len(kept)
            rows[:] = kept
            return SimpleNamespace(data=[], count=removed)
        raise AssertionError(f"unexpected action {self.action}")


class FakeSupabase:
    def __init__(self, tables: dict | None = None):
        self.tables = tables or {}
        self.calls = []
        self.fail = False

    def table(self, name):
        return FakeQuery(self, name)


@pytest.fixture
def supabase_client() -> FakeSupabase:
    return FakeSupabase()
