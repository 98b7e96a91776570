"""Subject-file question bank loading and validation."""
import pytest

from conftest import write_subject_file
from quizcore.errors import LoadError
from quizcore.question_bank import SubjectFileSource, subjects_of


def raw_question(text="2 + 2 = ?", correct=1, explanation="Basic arithmetic"):
    q = {"question": text, "options": ["3", "4", "5", "6"], "correctAnswer": correct}
    if explanation is not None:
        q["explanation"] = explanation
    return q


def test_loads_consecutive_files_until_gap(tmp_path):
    write_subject_file(tmp_path, 1, "Math", [raw_question(), raw_question("3 + 3 = ?", 3)])
    write_subject_file(tmp_path, 2, "History", [raw_question("Year?", 0, explanation=None)])
    write_subject_file(tmp_path, 4, "Ignored", [raw_question()])

    questions = SubjectFileSource(tmp_path).load()
    assert [q.id for q in questions] == ["1-0", "1-1", "2-0"]
    assert [q.subject for q in questions] == ["Math", "Math", "History"]
    assert questions[0].options == ("3", "4", "5", "6")
    assert questions[1].correct_index == 3
    assert questions[2].explanation == ""
    assert subjects_of(questions) == ["Math", "History"]


def test_missing_directory(tmp_path):
    with pytest.raises(LoadError):
        SubjectFileSource(tmp_path / "nope").load()


def test_no_subject_files(tmp_path):
    with pytest.raises(LoadError):
        SubjectFileSource(tmp_path).load()


def test_subject_file_without_questions_is_empty_pool(tmp_path):
    write_subject_file(tmp_path, 1, "Math", [])
    with pytest.raises(LoadError):
        SubjectFileSource(tmp_path).load()


def test_malformed_json(tmp_path):
    (tmp_path / "0001.json").write_text("{oops", encoding="utf-8")
    with pytest.raises(LoadError):
        SubjectFileSource(tmp_path).load()


@pytest.mark.parametrize(
    "raw",
    [
        {"question": "x", "options": ["a", "b"], "correctAnswer": 2},
        {"question": "x", "options": ["a", "b"], "correctAnswer": True},
        {"question": "x", "options": ["a", "b"]},
        {"question": "x", "options": "a,b", "correctAnswer": 0},
        {"question": "x", "options": ["a"], "correctAnswer": 0},
        {"question": "", "options": ["a", "b"], "correctAnswer": 0},
        "not an object",
    ],
)
def test_malformed_question(tmp_path, raw):
    write_subject_file(tmp_path, 1, "Math", [raw_question(), raw])
    with pytest.raises(LoadError):
        SubjectFileSource(tmp_path).load()
