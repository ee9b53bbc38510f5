"""Semester, course and task attachment storage."""
from dataclasses import replace
from datetime import date, datetime

from loguru import logger

from schedule_buddy.db import get_connection
from schedule_buddy.models import KIND_TASK, Course, Semester, TaskAttachment
from schedule_buddy.settings import get_period_count


def parse_week_pattern(value) -> tuple:
    """Parse '1,2,3' or an iterable of ints into a sorted tuple of distinct weeks.

    Unparseable parts and non-positive weeks are dropped.
    """
    if value is None:
        return ()
    if isinstance(value, int):
        value = [value]
    if isinstance(value, str):
        parts = value.split(",")
    else:
        try:
            parts = list(value)
        except TypeError:
            return ()
    weeks = set()
    for part in parts:
        try:
            week = int(str(part).strip())
        except ValueError:
            continue
        if week > 0:
            weeks.add(week)
    return tuple(sorted(weeks))


def format_week_pattern(weeks) -> str:
    return ",".join(str(w) for w in weeks)


def format_course_period(course: Course) -> str:
    if course.start_period == course.end_period:
        return f"P{course.start_period}"
    return f"P{course.start_period}-{course.end_period}"


def validate_course(course: Course, period_count: int) -> None:
    """Reject malformed courses before they reach storage."""
    if not course.name or not course.name.strip():
        raise ValueError("Course name must not be empty")
    if not 1 <= course.day_of_week <= 7:
        raise ValueError(f"day_of_week must be between 1 and 7, got {course.day_of_week}")
    if course.start_period < 1:
        raise ValueError(f"start_period must be at least 1, got {course.start_period}")
    if course.end_period < course.start_period:
        raise ValueError(
            f"end_period {course.end_period} is before start_period {course.start_period}"
        )
    if course.end_period > period_count:
        raise ValueError(f"end_period {course.end_period} exceeds period count {period_count}")
    if not course.week_pattern:
        raise ValueError("week_pattern must contain at least one week")
    if any(w < 1 for w in course.week_pattern):
        raise ValueError("week numbers must be positive")


# --- Semesters ---


def _row_to_semester(row) -> Semester:
    return Semester(id=row["id"], name=row["name"], start_date=date.fromisoformat(row["start_date"]))


def create_semester(db_path: str, name: str, start_date: date) -> int:
    conn = get_connection(db_path)
    cur = conn.execute(
        "INSERT INTO semesters (name, start_date) VALUES (?, ?)",
        (name, start_date.isoformat()),
    )
    conn.commit()
    semester_id = cur.lastrowid
    conn.close()
    logger.info("Created semester {} ({}) starting {}", semester_id, name, start_date)
    return semester_id


def get_semester(db_path: str, semester_id: int) -> Semester | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM semesters WHERE id = ?", (semester_id,)).fetchone()
    conn.close()
    return _row_to_semester(row) if row else None


def get_semesters(db_path: str) -> list[Semester]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM semesters ORDER BY id").fetchall()
    conn.close()
    return [_row_to_semester(r) for r in rows]


def update_semester_start(db_path: str, semester_id: int, start_date: date) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "UPDATE semesters SET start_date = ? WHERE id = ?",
        (start_date.isoformat(), semester_id),
    )
    conn.commit()
    conn.close()


# --- Courses ---


def _row_to_course(row) -> Course:
    return Course(
        id=row["id"],
        semester_id=row["semester_id"],
        name=row["name"],
        day_of_week=row["day_of_week"],
        start_period=row["start_period"],
        end_period=row["end_period"],
        week_pattern=parse_week_pattern(row["week_pattern"]),
        teacher=row["teacher"],
        location=row["location"],
        course_type=row["course_type"],
        note=row["note"],
        color=row["color"],
    )


def add_course(db_path: str, course: Course) -> int:
    """Validate and insert a course; returns the new course id."""
    weeks = parse_week_pattern(course.week_pattern)
    course = replace(course, week_pattern=weeks)
    validate_course(course, get_period_count(db_path, course.semester_id))
    conn = get_connection(db_path)
    cur = conn.execute(
        """INSERT INTO courses
        (semester_id, name, teacher, location, course_type, day_of_week,
         start_period, end_period, week_pattern, note, color)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (course.semester_id, course.name.strip(), course.teacher, course.location,
         course.course_type, course.day_of_week, course.start_period, course.end_period,
         format_week_pattern(weeks), course.note, course.color),
    )
    conn.commit()
    course_id = cur.lastrowid
    conn.close()
    return course_id


def get_course(db_path: str, course_id: int) -> Course | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM courses WHERE id = ?", (course_id,)).fetchone()
    conn.close()
    return _row_to_course(row) if row else None


def get_courses(db_path: str, semester_id: int) -> list[Course]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM courses WHERE semester_id = ? ORDER BY day_of_week, start_period",
        (semester_id,),
    ).fetchall()
    conn.close()
    return [_row_to_course(r) for r in rows]


def delete_course(db_path: str, course_id: int) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM courses WHERE id = ?", (course_id,))
    conn.commit()
    conn.close()


# --- Attachments ---


def _row_to_attachment(row) -> TaskAttachment:
    return TaskAttachment(
        id=row["id"],
        semester_id=row["semester_id"],
        course_id=row["course_id"],
        kind=row["kind"],
        title=row["title"],
        uri=row["uri"],
        url=row["url"],
        due_at=datetime.fromisoformat(row["due_at"]) if row["due_at"] else None,
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def add_attachment(
    db_path: str,
    semester_id: int,
    title: str,
    course_id: int | None = None,
    kind: str = KIND_TASK,
    due_at: datetime | None = None,
    uri: str | None = None,
    url: str | None = None,
    created_at: datetime | None = None,
) -> int:
    if not title.strip():
        raise ValueError("Attachment title must not be empty")
    created_at = created_at or datetime.now().astimezone()
    conn = get_connection(db_path)
    cur = conn.execute(
        """INSERT INTO course_attachments
        (semester_id, course_id, kind, title, uri, url, due_at, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
        (semester_id, course_id, kind, title.strip(), uri, url,
         due_at.isoformat() if due_at else None, created_at.isoformat()),
    )
    conn.commit()
    attachment_id = cur.lastrowid
    conn.close()
    return attachment_id


def get_task_attachments(db_path: str, semester_id: int, with_due_only: bool = False) -> list[TaskAttachment]:
    """Task attachments of a semester, optionally only those with a due date."""
    query = "SELECT * FROM course_attachments WHERE semester_id = ? AND kind = ?"
    if with_due_only:
        query += " AND due_at IS NOT NULL"
    query += " ORDER BY due_at IS NULL, due_at, id"
    conn = get_connection(db_path)
    rows = conn.execute(query, (semester_id, KIND_TASK)).fetchall()
    conn.close()
    return [_row_to_attachment(r) for r in rows]


def delete_attachment(db_path: str, attachment_id: int) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM course_attachments WHERE id = ?", (attachment_id,))
    conn.commit()
    conn.close()
