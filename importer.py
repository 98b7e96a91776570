"""Ingest subject files (0001.json, 0002.json, ...) and bulk UPSERT them into the Supabase questions table."""
import argparse
import logging
from collections import Counter
from pathlib import Path

from db import DEFAULT_SUBJECTS_DIR, get_supabase_uncached, upsert_questions_bulk, delete_questions_by_subject
from quizcore.errors import LoadError
from quizcore.question_bank import SubjectFileSource

logger = logging.getLogger(__name__)


def load_rows(directory: Path) -> list[dict]:
    """Load the subject files and map each Question to a questions-table row."""
    questions = SubjectFileSource(directory).load()
    return [q.to_dict() for q in questions]


def run_import(directory: Path | None = None, chunk_size: int = 200, dry_run: bool = False, replace: bool = False):
    path = Path(directory or DEFAULT_SUBJECTS_DIR)
    rows = load_rows(path)
    by_subject = Counter(r["subject"] for r in rows)
    if dry_run:
        print(f"Dry run: would upsert {len(rows)} questions from {path}")
        for subject, count in by_subject.items():
            print(f"  {subject}: {count}")
        if rows:
            print("Sample row:", rows[0])
        return rows
    client = get_supabase_uncached()
    if replace:
        for subject in by_subject:
            delete_questions_by_subject(client, subject)
        print(f"Deleted existing questions for {len(by_subject)} subjects")
    upsert_questions_bulk(client, rows, chunk_size=chunk_size)
    print(f"Upserted {len(rows)} questions from {path}")
    return rows


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    parser = argparse.ArgumentParser(description="Import subject-file question banks into Supabase questions.")
    parser.add_argument(
        "directory",
        nargs="?",
        default=None,
        help=f"Directory holding 0001.json, 0002.json, ... (default: {DEFAULT_SUBJECTS_DIR})",
    )
    parser.add_argument("--chunk-size", type=int, default=200, help="Upsert chunk size (default 200)")
    parser.add_argument("--dry-run", action="store_true", help="Parse only, do not upsert")
    parser.add_argument("--replace", action="store_true", help="Delete existing questions of the imported subjects, then upsert")
    args = parser.parse_args()
    try:
        run_import(directory=args.directory, chunk_size=args.chunk_size, dry_run=args.dry_run, replace=args.replace)
    except LoadError as e:
        logger.error(str(e))
        raise SystemExit(1)
