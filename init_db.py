"""Print the Supabase schema for the quiz tables (run it in the Supabase SQL Editor)."""
import logging

from quizcore.database import HISTORY_TABLE, QUESTIONS_TABLE

SCHEMA_SQL = f"""
-- Question Bank
CREATE TABLE IF NOT EXISTS {QUESTIONS_TABLE} (
    id TEXT PRIMARY KEY,
    subject VARCHAR(100) NOT NULL,
    text TEXT NOT NULL,
    options JSONB NOT NULL,
    correct_index INT NOT NULL CHECK (correct_index >= 0),
    explanation TEXT,
    created_at TIMESTAMPTZ DEFAULT NOW()
);

-- Answer History (one row per namespace + question)
CREATE TABLE IF NOT EXISTS {HISTORY_TABLE} (
    namespace VARCHAR(100) NOT NULL,
    question_id TEXT NOT NULL,
    is_correct BOOLEAN NOT NULL,
    last_correct_at TIMESTAMPTZ,
    answer_count INT NOT NULL DEFAULT 0 CHECK (answer_count >= 0),
    last_attempt_at TIMESTAMPTZ,
    PRIMARY KEY (namespace, question_id)
);

CREATE INDEX IF NOT EXISTS idx_questions_subject ON {QUESTIONS_TABLE}(subject);
CREATE INDEX IF NOT EXISTS idx_answer_history_namespace ON {HISTORY_TABLE}(namespace);
"""


def schema_statements() -> list[str]:
    """Split SCHEMA_SQL into individual statements (comments stripped)."""
    statements = []
    for chunk in SCHEMA_SQL.split(";"):
        lines = [ln for ln in chunk.strip().splitlines() if not ln.strip().startswith("--")]
        stmt = "\n".join(lines).strip()
        if stmt:
            statements.append(stmt)
    return statements


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    statements = schema_statements()
    for i, stmt in enumerate(statements, 1):
        logging.info("Statement %d/%d: %s...", i, len(statements), stmt.splitlines()[0][:60])
    print("\nSupabase client cannot run DDL; paste this into Supabase SQL Editor:")
    print(SCHEMA_SQL)
