import logging
import os
import sqlite3
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import settings
from .models import AnswerRecord, QuestionItem

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
    level TEXT,
    message TEXT
);
CREATE TABLE IF NOT EXISTS game_answers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    level TEXT NOT NULL,
    word_id TEXT NOT NULL,
    headword TEXT NOT NULL,
    chosen TEXT NOT NULL,
    correct TEXT NOT NULL,
    is_correct INTEGER NOT NULL,
    answered_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS game_runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    played_at TEXT NOT NULL,
    level TEXT NOT NULL,
    total INTEGER NOT NULL,
    correct INTEGER NOT NULL,
    wrong INTEGER NOT NULL,
    time_seconds REAL NOT NULL
);
CREATE TABLE IF NOT EXISTS daily_challenge_runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    player_name TEXT NOT NULL,
    challenge_date TEXT NOT NULL,
    played_at TEXT NOT NULL,
    score INTEGER NOT NULL,
    correct INTEGER NOT NULL,
    wrong INTEGER NOT NULL,
    total INTEGER NOT NULL,
    time_seconds REAL NOT NULL,
    UNIQUE (user_id, challenge_date)
);
CREATE TABLE IF NOT EXISTS daily_challenge_answers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    run_id INTEGER NOT NULL REFERENCES daily_challenge_runs (id),
    question_index INTEGER NOT NULL,
    word_id TEXT NOT NULL,
    headword TEXT NOT NULL,
    chosen TEXT NOT NULL,
    correct TEXT NOT NULL,
    is_correct INTEGER NOT NULL,
    response_ms INTEGER NOT NULL,
    points INTEGER NOT NULL
);
"""


def get_db_connection():
    """Establishes a connection to the SQLite database."""
    db_path = os.path.join(settings.DB_DIR, settings.DB_FILE)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db():
    """Initializes the database and creates the necessary tables."""
    if not os.path.exists(settings.DB_DIR):
        os.makedirs(settings.DB_DIR, exist_ok=True)
    conn = get_db_connection()
    with conn:
        conn.executescript(SCHEMA)
    conn.close()


def _fetch_all(query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
    conn = get_db_connection()
    try:
        return [dict(row) for row in conn.execute(query, params).fetchall()]
    finally:
        conn.close()


def insert_game_answer(
    user_id: str, level: str, question: QuestionItem, answer: str, is_correct: bool
) -> None:
    conn = get_db_connection()
    with conn:
        conn.execute(
            """
            INSERT INTO game_answers
                (user_id, level, word_id, headword, chosen, correct, is_correct)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                level,
                question.source_word.id,
                question.source_word.headword,
                answer,
                question.correct_answer,
                int(is_correct),
            ),
        )
    conn.close()


def fetch_answers_by_user(user_id: str) -> List[Dict[str, Any]]:
    return _fetch_all(
        "SELECT word_id, headword, level, is_correct FROM game_answers WHERE user_id = ?",
        (user_id,),
    )


def insert_game_run(
    user_id: str,
    level: str,
    total: int,
    correct: int,
    wrong: int,
    time_seconds: float,
) -> None:
    conn = get_db_connection()
    with conn:
        conn.execute(
            """
            INSERT INTO game_runs
                (user_id, played_at, level, total, correct, wrong, time_seconds)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                datetime.now().isoformat(),
                level,
                total,
                correct,
                wrong,
                time_seconds,
            ),
        )
    conn.close()


def fetch_history_by_user(user_id: str) -> List[Dict[str, Any]]:
    return _fetch_all(
        """
        SELECT id, played_at, level, total, correct, wrong, time_seconds
        FROM game_runs WHERE user_id = ? ORDER BY played_at DESC, id DESC
        """,
        (user_id,),
    )


def has_played_daily_challenge(user_id: str, challenge_date: date) -> bool:
    rows = _fetch_all(
        "SELECT id FROM daily_challenge_runs WHERE user_id = ? AND challenge_date = ? LIMIT 1",
        (user_id, challenge_date.isoformat()),
    )
    return len(rows) > 0


def save_daily_challenge_run(
    user_id: str,
    player_name: str,
    challenge_date: date,
    score: int,
    correct: int,
    total: int,
    time_seconds: float,
    answers: Sequence[AnswerRecord],
) -> Optional[str]:
    """Stores a finished daily run and its answers.

    Returns ``None`` on success or ``"already_played"`` when the user already
    has a run for ``challenge_date``.
    """
    conn = get_db_connection()
    try:
        with conn:
            cursor = conn.execute(
                """
                INSERT INTO daily_challenge_runs
                    (user_id, player_name, challenge_date, played_at,
                     score, correct, wrong, total, time_seconds)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    player_name,
                    challenge_date.isoformat(),
                    datetime.now().isoformat(),
                    score,
                    correct,
                    total - correct,
                    total,
                    time_seconds,
                ),
            )
            run_id = cursor.lastrowid
            conn.executemany(
                """
                INSERT INTO daily_challenge_answers
                    (run_id, question_index, word_id, headword, chosen,
                     correct, is_correct, response_ms, points)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        run_id,
                        a.question_index,
                        a.word_id,
                        a.word,
                        a.user_answer,
                        a.correct_answer,
                        int(a.is_correct),
                        a.response_ms,
                        a.points,
                    )
                    for a in answers
                ],
            )
    except sqlite3.IntegrityError:
        logger.warning(f"Daily challenge already saved: {user_id} {challenge_date}")
        return "already_played"
    finally:
        conn.close()
    return None


DAILY_RUN_COLUMNS = """
    id, user_id, player_name, challenge_date, played_at,
    score, correct, wrong, total, time_seconds
"""


def with_rank(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [{**row, "rank": index} for index, row in enumerate(rows, start=1)]


def fetch_daily_leaderboard(challenge_date: date) -> List[Dict[str, Any]]:
    """Runs of one day, best score first and faster time breaking ties."""
    rows = _fetch_all(
        f"""
        SELECT {DAILY_RUN_COLUMNS}
        FROM daily_challenge_runs
        WHERE challenge_date = ?
        ORDER BY score DESC, time_seconds ASC
        """,
        (challenge_date.isoformat(),),
    )
    return with_rank(rows)


def current_week_range(today: date) -> Tuple[date, date]:
    """Monday of ``today``'s week and the Monday after it."""
    start = today - timedelta(days=today.weekday())
    return start, start + timedelta(days=7)


def current_month_range(today: date) -> Tuple[date, date]:
    start = today.replace(day=1)
    if start.month == 12:
        return start, start.replace(year=start.year + 1, month=1)
    return start, start.replace(month=start.month + 1)


def fetch_period_leaderboard(start: date, end: date) -> List[Dict[str, Any]]:
    """Daily runs in ``[start, end)`` summed per user and ranked."""
    rows = _fetch_all(
        """
        SELECT user_id,
               MAX(player_name) AS player_name,
               COUNT(*) AS games_played,
               SUM(score) AS total_score,
               SUM(correct) AS total_correct,
               SUM(total) AS total_questions,
               SUM(time_seconds) AS total_time_seconds
        FROM daily_challenge_runs
        WHERE challenge_date >= ? AND challenge_date < ?
        GROUP BY user_id
        ORDER BY total_score DESC, total_time_seconds ASC
        """,
        (start.isoformat(), end.isoformat()),
    )
    return with_rank(rows)


def fetch_daily_runs_with_answers(challenge_date: date) -> List[Dict[str, Any]]:
    """Ranked runs of one day, each with its answers in question order."""
    runs = fetch_daily_leaderboard(challenge_date)
    if not runs:
        return []
    run_ids = [run["id"] for run in runs]
    placeholders = ", ".join("?" for _ in run_ids)
    answers = _fetch_all(
        f"""
        SELECT run_id, question_index, word_id, headword, chosen, correct,
               is_correct, response_ms, points
        FROM daily_challenge_answers
        WHERE run_id IN ({placeholders})
        ORDER BY question_index ASC, id ASC
        """,
        run_ids,
    )
    by_run: Dict[int, List[Dict[str, Any]]] = {}
    for answer in answers:
        answer["is_correct"] = bool(answer["is_correct"])
        by_run.setdefault(answer["run_id"], []).append(answer)
    return [{**run, "answers": by_run.get(run["id"], [])} for run in runs]
