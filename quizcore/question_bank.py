"""
Subject-file question bank.

Reads 0001.json, 0002.json, ... from a directory until the first missing
index. Each file: {"subjectName": str, "questions": [{"question", "options",
"correctAnswer", "explanation"}]}. Question ids are "<file index>-<position>"
so they stay stable across sessions as long as files are only appended.
"""
import json
import logging
from pathlib import Path
from typing import Dict, Iterator, List

from quizcore.errors import LoadError
from quizcore.models import Question

logger = logging.getLogger(__name__)

MIN_OPTIONS = 2
MAX_OPTIONS = 10


def subject_filename(index: int) -> str:
    return f"{index:04d}.json"


def validate_question(q: Question) -> Question:
    """Raise LoadError if the question cannot be shown or scored."""
    if not q.text:
        raise LoadError(f"Question {q.id} has no text")
    if not (MIN_OPTIONS <= len(q.options) <= MAX_OPTIONS):
        raise LoadError(f"Question {q.id} has {len(q.options)} options (need {MIN_OPTIONS}-{MAX_OPTIONS})")
    if not 0 <= q.correct_index < len(q.options):
        raise LoadError(f"Question {q.id} correct answer {q.correct_index} out of range")
    return q


def parse_question(raw: Dict, subject: str, question_id: str) -> Question:
    """Map one raw subject-file entry to a Question."""
    if not isinstance(raw, dict):
        raise LoadError(f"Question {question_id} is not an object")
    options = raw.get("options")
    if not isinstance(options, list):
        raise LoadError(f"Question {question_id} has no options list")
    correct = raw.get("correctAnswer")
    if not isinstance(correct, int) or isinstance(correct, bool):
        raise LoadError(f"Question {question_id} has no integer correctAnswer")
    q = Question(
        id=question_id,
        subject=subject,
        text=str(raw.get("question") or "").strip(),
        options=tuple(str(o) for o in options),
        correct_index=correct,
        explanation=str(raw.get("explanation") or ""),
    )
    return validate_question(q)


def parse_subject_file(path: Path, index: int) -> List[Question]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise LoadError(f"Could not read subject file {path}: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("questions"), list):
        raise LoadError(f"Subject file {path} has no 'questions' list")
    subject = str(data.get("subjectName") or f"Subject {index}")
    return [parse_question(raw, subject, f"{index}-{pos}") for pos, raw in enumerate(data["questions"])]


def iter_subject_files(directory: Path) -> Iterator[tuple]:
    """Yield (index, path) for consecutive subject files starting at 0001."""
    index = 1
    while True:
        path = directory / subject_filename(index)
        if not path.exists():
            return
        yield index, path
        index += 1


class SubjectFileSource:
    """Question pool supplier over a directory of numbered subject files."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def load(self) -> List[Question]:
        if not self.directory.is_dir():
            raise LoadError(f"Subject directory not found: {self.directory}")
        questions: List[Question] = []
        files = 0
        for index, path in iter_subject_files(self.directory):
            questions.extend(parse_subject_file(path, index))
            files += 1
        if not questions:
            raise LoadError(f"No questions found in {self.directory} (expected {subject_filename(1)}, ...)")
        logger.info(f"Loaded {len(questions)} questions from {files} subject files")
        return questions


def subjects_of(questions: List[Question]) -> List[str]:
    """Distinct subject names in first-seen order."""
    seen: Dict[str, None] = {}
    for q in questions:
        seen.setdefault(q.subject, None)
    return list(seen)
