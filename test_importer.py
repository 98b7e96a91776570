"""Importer CLI (dry run and Supabase upsert) and the .env-driven backend factories in db."""
import pytest

import db
import importer
from conftest import FakeSupabase, write_subject_file
from quizcore.database import QUESTIONS_TABLE, SupabaseHistoryStore, SupabaseQuestionSource
from quizcore.errors import LoadError
from quizcore.history import JsonFileHistoryStore
from quizcore.question_bank import SubjectFileSource


def make_bank(tmp_path):
    q = {"question": "2 + 2 = ?", "options": ["3", "4", "5", "6"], "correctAnswer": 1, "explanation": "4"}
    write_subject_file(tmp_path, 1, "Math", [q, dict(q, question="3 + 3 = ?", correctAnswer=3)])
    write_subject_file(tmp_path, 2, "History", [dict(q, question="Year?", correctAnswer=0)])
    return tmp_path


def test_dry_run_does_not_touch_supabase(tmp_path, monkeypatch, capsys):
    def fail():
        raise AssertionError("dry run must not connect")

    monkeypatch.setattr(importer, "get_supabase_uncached", fail)
    rows = importer.run_import(make_bank(tmp_path), dry_run=True)
    assert [r["id"] for r in rows] == ["1-0", "1-1", "2-0"]
    assert set(rows[0]) == {"id", "subject", "text", "options", "correct_index", "explanation"}
    assert "would upsert 3 questions" in capsys.readouterr().out


def test_import_upserts_and_replaces(tmp_path, monkeypatch):
    client = FakeSupabase({QUESTIONS_TABLE: [{"id": "old", "subject": "Math"}, {"id": "keep", "subject": "Art"}]})
    monkeypatch.setattr(importer, "get_supabase_uncached", lambda: client)

    importer.run_import(make_bank(tmp_path), chunk_size=2, replace=True)
    ids = sorted(r["id"] for r in client.tables[QUESTIONS_TABLE])
    assert ids == ["1-0", "1-1", "2-0", "keep"]
    upserts = [c for c in client.calls if c[1] == "upsert"]
    assert len(upserts) == 2

    importer.run_import(make_bank(tmp_path))
    assert len(client.tables[QUESTIONS_TABLE]) == 4


def test_import_bad_bank(tmp_path):
    with pytest.raises(LoadError):
        importer.run_import(tmp_path, dry_run=True)


def test_upsert_dedupes_by_id():
    client = FakeSupabase()
    db.upsert_questions_bulk(client, [{"id": "a", "v": 1}, {"id": "a", "v": 2}, {"id": "b", "v": 3}])
    assert sorted((r["id"], r["v"]) for r in client.tables[QUESTIONS_TABLE]) == [("a", 2), ("b", 3)]


def test_env_client_requires_credentials(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_KEY", raising=False)
    with pytest.raises(ValueError):
        db.get_supabase_uncached()


def test_history_store_factory(tmp_path, monkeypatch):
    monkeypatch.delenv("QUIZ_HISTORY_BACKEND", raising=False)
    monkeypatch.setenv("QUIZ_HISTORY_PATH", str(tmp_path / "h.json"))
    monkeypatch.setenv("QUIZ_HISTORY_KEY", "my_history")
    store = db.get_history_store()
    assert isinstance(store, JsonFileHistoryStore)
    assert store.path == tmp_path / "h.json"
    assert store.namespace == "my_history"

    monkeypatch.setenv("QUIZ_HISTORY_BACKEND", "supabase")
    store = db.get_history_store(FakeSupabase())
    assert isinstance(store, SupabaseHistoryStore)
    assert store.namespace == "my_history"

    monkeypatch.setenv("QUIZ_HISTORY_BACKEND", "redis")
    with pytest.raises(ValueError):
        db.get_history_store()


def test_question_source_factory(tmp_path, monkeypatch):
    monkeypatch.delenv("QUIZ_QUESTION_SOURCE", raising=False)
    monkeypatch.setenv("QUIZ_SUBJECTS_DIR", str(tmp_path))
    source = db.get_question_source()
    assert isinstance(source, SubjectFileSource)
    assert source.directory == tmp_path

    monkeypatch.setenv("QUIZ_QUESTION_SOURCE", "supabase")
    assert isinstance(db.get_question_source(FakeSupabase()), SupabaseQuestionSource)

    monkeypatch.setenv("QUIZ_SUBJECT", "History")
    assert db.get_question_source(FakeSupabase()).subject == "History"
    monkeypatch.delenv("QUIZ_SUBJECT")
    assert db.get_question_source(FakeSupabase()).subject is None
