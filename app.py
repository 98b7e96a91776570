"""Smart Quiz: adaptive timed multiple-choice exam (Streamlit front end)."""
import sys
from pathlib import Path

# Ensure project root is in path
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import streamlit as st

from db import get_history_store, get_question_source
from engine import DEFAULT_QUESTION_COUNT, MAX_QUESTION_COUNT, MIN_QUESTION_COUNT, OPTION_LABELS, TIME_LIMIT_SECONDS
from quizcore.engine import ExamSession, SessionStatus, calculate_learning_stats
from quizcore.errors import LoadError, StorageError
from quizcore.question_bank import subjects_of


@st.cache_resource
def load_pool():
    return get_question_source().load()


st.set_page_config(page_title="Smart Quiz", layout="wide")
st.sidebar.title("Smart Quiz")

try:
    pool = load_pool()
except LoadError as e:
    st.error(f"Could not load the question bank: {e}")
    st.stop()

history = get_history_store()

if "exam" not in st.session_state:
    st.session_state["exam"] = None
if "current_q" not in st.session_state:
    st.session_state["current_q"] = 0
exam: ExamSession | None = st.session_state["exam"]

# ----- Welcome -----
if exam is None:
    st.header("Welcome")
    st.write("**Subjects:** " + ", ".join(subjects_of(pool)))
    try:
        stats = calculate_learning_stats(history.read())
    except StorageError as e:
        st.warning(f"Answer history unavailable: {e}")
        stats = calculate_learning_stats({})
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Questions answered", stats["total_answered"])
    with col2:
        st.metric("Accuracy", f"{stats['accuracy_percent']}%")
    with col3:
        st.metric("Mastered", stats["mastered_count"])

    requested = st.number_input(
        "Number of questions",
        min_value=MIN_QUESTION_COUNT,
        max_value=MAX_QUESTION_COUNT,
        value=min(DEFAULT_QUESTION_COUNT, len(pool)),
        step=1,
    )
    st.caption(f"{len(pool)} questions available · {TIME_LIMIT_SECONDS // 60} minutes")
    if st.button("Start exam", type="primary", use_container_width=True):
        try:
            st.session_state["exam"] = ExamSession(pool, history).start(int(requested))
            st.session_state["save_error"] = None
            st.session_state["current_q"] = 0
            st.rerun()
        except StorageError as e:
            st.error(f"Could not read answer history: {e}")

    if st.button("Reset learning history"):
        try:
            history.clear()
            st.success("Learning history reset.")
            st.rerun()
        except StorageError as e:
            st.error(f"Could not reset history: {e}")
    st.stop()

# Auto-submit when time runs out
if exam.status is SessionStatus.IN_PROGRESS:
    try:
        exam.submit_if_expired()
    except StorageError as e:
        st.session_state["save_error"] = str(e)

# ----- Exam -----
if exam.status is SessionStatus.IN_PROGRESS:
    questions = exam.questions
    n = len(questions)
    idx = st.session_state["current_q"]
    q = questions[idx]

    m, s = divmod(exam.time_remaining(), 60)
    st.sidebar.metric("Time left", f"{m:02d}:{s:02d}")
    st.sidebar.progress((idx + 1) / n)
    st.sidebar.caption(f"{exam.answered_count()}/{n} answered")

    st.subheader(f"Question {idx + 1} of {n}")
    st.caption(q.subject)
    st.write(q.text)

    labels = [f"{OPTION_LABELS[i]}. {opt}" for i, opt in enumerate(q.options)]
    current = exam.answers[idx]
    choice = st.radio("Choose one:", range(len(labels)), format_func=lambda i: labels[i], key=f"q_{idx}", index=current)
    if choice is not None and choice != current:
        exam.record_answer(idx, choice)
    if exam.answers[idx] is not None:
        st.info(q.explanation or "No explanation provided for this question.")

    col1, col2, col3 = st.columns([1, 1, 2])
    with col1:
        if st.button("Previous", disabled=idx == 0):
            st.session_state["current_q"] = idx - 1
            st.rerun()
    with col2:
        if st.button("Next", disabled=idx >= n - 1 or exam.answers[idx] is None):
            st.session_state["current_q"] = idx + 1
            st.rerun()
    with col3:
        if st.button("Submit exam", type="primary"):
            try:
                exam.submit()
            except StorageError as e:
                st.session_state["save_error"] = str(e)
            st.rerun()
    st.stop()

# ----- Results -----
result = exam.result
st.header("Results")
if result.timed_out:
    st.warning("Time is up: the exam was submitted automatically.")
if st.session_state.get("save_error"):
    st.warning(f"Results scored, but history could not be saved: {st.session_state['save_error']}")
col1, col2, col3, col4 = st.columns(4)
with col1:
    st.metric("Correct", result.correct_count)
with col2:
    st.metric("Wrong", result.wrong_count)
with col3:
    st.metric("Total", result.total)
with col4:
    st.metric("Score", f"{result.percentage}%")

for i, item in enumerate(result.items, start=1):
    chosen = OPTION_LABELS[item.chosen_index] if item.answered else "Not answered"
    header = f"{'✓' if item.is_correct else '✗'} Question {i} ({item.question.subject})"
    with st.expander(header, expanded=not item.is_correct):
        st.write(item.question.text)
        st.write(f"Your answer: **{chosen}** · Correct answer: **{OPTION_LABELS[item.correct_index]}**")
        st.caption(item.explanation or "No explanation provided for this question.")

if st.button("Start a new exam"):
    st.session_state["exam"] = None
    st.session_state["current_q"] = 0
    st.rerun()
