"""Database initialization and connection management."""
import sqlite3
from pathlib import Path

from loguru import logger

DEFAULT_DB_PATH = str(Path.home() / ".schedule_buddy" / "schedule.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS semesters (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    start_date TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS schedule_settings (
    semester_id INTEGER PRIMARY KEY REFERENCES semesters(id) ON DELETE CASCADE,
    period_count INTEGER NOT NULL DEFAULT 8,
    period_minutes INTEGER NOT NULL DEFAULT 45,
    break_minutes INTEGER NOT NULL DEFAULT 10,
    total_weeks INTEGER NOT NULL DEFAULT 20
);

CREATE TABLE IF NOT EXISTS period_times (
    semester_id INTEGER NOT NULL REFERENCES semesters(id) ON DELETE CASCADE,
    period INTEGER NOT NULL,
    start_time TEXT NOT NULL,
    end_time TEXT NOT NULL,
    PRIMARY KEY (semester_id, period)
);

CREATE TABLE IF NOT EXISTS courses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    semester_id INTEGER NOT NULL REFERENCES semesters(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    teacher TEXT,
    location TEXT,
    course_type TEXT DEFAULT 'major_required',
    day_of_week INTEGER NOT NULL,
    start_period INTEGER NOT NULL,
    end_period INTEGER NOT NULL,
    week_pattern TEXT NOT NULL,  -- comma separated week numbers
    note TEXT,
    color INTEGER
);

CREATE TABLE IF NOT EXISTS course_attachments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    semester_id INTEGER NOT NULL REFERENCES semesters(id) ON DELETE CASCADE,
    course_id INTEGER REFERENCES courses(id) ON DELETE CASCADE,
    kind TEXT NOT NULL DEFAULT 'task',
    title TEXT NOT NULL,
    uri TEXT,
    url TEXT,
    due_at TEXT,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_attachments_semester_course
    ON course_attachments (semester_id, course_id);

CREATE TABLE IF NOT EXISTS knowledge_points (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    course_id INTEGER NOT NULL REFERENCES courses(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    mastery_level INTEGER NOT NULL DEFAULT 0,
    is_key_point INTEGER NOT NULL DEFAULT 0,
    last_reviewed_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_knowledge_course_level
    ON knowledge_points (course_id, mastery_level);

CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
    logger.debug("Initialized schedule database at {}", db_path)
