"""Supabase client, bulk question upsert, and history/question backends chosen from .env. Client is cached via Streamlit."""
import logging
import os
from pathlib import Path

import streamlit as st
from dotenv import load_dotenv
from supabase import create_client, Client

from quizcore.database import SupabaseHistoryStore, SupabaseQuestionSource
from quizcore.history import DEFAULT_NAMESPACE, JsonFileHistoryStore
from quizcore.question_bank import SubjectFileSource

load_dotenv()

DEFAULT_HISTORY_PATH = "data/exam_history.json"
DEFAULT_SUBJECTS_DIR = "subjects"


def _env_client() -> Client:
    url = os.environ.get("SUPABASE_URL")
    key = os.environ.get("SUPABASE_KEY")
    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")
    return create_client(url, key)


@st.cache_resource
def get_supabase() -> Client:
    return _env_client()


def get_supabase_uncached() -> Client:
    """For CLI/scripts (no Streamlit context)."""
    return _env_client()


def upsert_questions_bulk(client: Client, rows: list[dict], chunk_size: int = 200):
    """Bulk upsert into questions. Dedupes by id so no chunk has duplicates (avoids Postgres ON CONFLICT error)."""
    n_before = len(rows)
    by_id = {r["id"]: r for r in rows}
    rows = list(by_id.values())
    log = logging.getLogger(__name__)
    if len(rows) < n_before:
        log.info("Deduped questions by id: %d -> %d", n_before, len(rows))
    n_chunks = (len(rows) + chunk_size - 1) // chunk_size
    for i in range(0, len(rows), chunk_size):
        chunk = rows[i : i + chunk_size]
        chunk_num = i // chunk_size + 1
        log.info("Upserting chunk %d/%d (%d rows)", chunk_num, n_chunks, len(chunk))
        client.table("questions").upsert(chunk, on_conflict="id").execute()


def delete_questions_by_subject(client: Client, subject: str):
    """Delete all questions with the given subject name."""
    client.table("questions").delete().eq("subject", subject).execute()


# --- Backends ---

def history_namespace() -> str:
    return os.environ.get("QUIZ_HISTORY_KEY") or DEFAULT_NAMESPACE


def get_history_store(client: Client | None = None):
    """History store selected by QUIZ_HISTORY_BACKEND (file | supabase)."""
    backend = (os.environ.get("QUIZ_HISTORY_BACKEND") or "file").lower()
    if backend == "supabase":
        return SupabaseHistoryStore(client or get_supabase_uncached(), namespace=history_namespace())
    if backend != "file":
        raise ValueError(f"Unknown QUIZ_HISTORY_BACKEND: {backend}")
    path = Path(os.environ.get("QUIZ_HISTORY_PATH") or DEFAULT_HISTORY_PATH)
    return JsonFileHistoryStore(path, namespace=history_namespace())


def get_question_source(client: Client | None = None):
    """Question pool supplier selected by QUIZ_QUESTION_SOURCE (files | supabase); QUIZ_SUBJECT narrows the supabase pool."""
    source = (os.environ.get("QUIZ_QUESTION_SOURCE") or "files").lower()
    if source == "supabase":
        return SupabaseQuestionSource(client or get_supabase_uncached(), subject=os.environ.get("QUIZ_SUBJECT") or None)
    if source != "files":
        raise ValueError(f"Unknown QUIZ_QUESTION_SOURCE: {source}")
    return SubjectFileSource(Path(os.environ.get("QUIZ_SUBJECTS_DIR") or DEFAULT_SUBJECTS_DIR))
