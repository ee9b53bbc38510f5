"""First-run defaults: a starter semester and its schedule settings."""
from datetime import date, timedelta

from schedule_buddy.db import get_connection
from schedule_buddy.models import ScheduleSettings
from schedule_buddy.settings import (
    DEFAULT_PERIOD_COUNT, DEFAULT_TOTAL_WEEKS, get_setting, set_current_semester,
    update_schedule_settings,
)
from schedule_buddy.timetable import create_semester

DEFAULT_SEMESTER_NAME = "Default semester"


def is_seeded(db_path: str) -> bool:
    """Check whether at least one semester exists."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM semesters").fetchone()[0]
    conn.close()
    return count > 0


def week_monday(day: date) -> date:
    return day - timedelta(days=day.isoweekday() - 1)


def seed_default_semester(db_path: str, today: date | None = None) -> int:
    """Create a semester starting on the Monday of the current week."""
    start = week_monday(today or date.today())
    semester_id = create_semester(db_path, DEFAULT_SEMESTER_NAME, start)
    update_schedule_settings(db_path, ScheduleSettings(
        semester_id=semester_id,
        period_count=DEFAULT_PERIOD_COUNT,
        total_weeks=DEFAULT_TOTAL_WEEKS,
    ))
    return semester_id


def seed_all(db_path: str, today: date | None = None) -> None:
    """Ensure a semester exists and one is selected."""
    if is_seeded(db_path):
        if get_setting(db_path, "current_semester_id") is None:
            conn = get_connection(db_path)
            first = conn.execute("SELECT id FROM semesters ORDER BY id LIMIT 1").fetchone()["id"]
            conn.close()
            set_current_semester(db_path, first)
        return
    semester_id = seed_default_semester(db_path, today)
    set_current_semester(db_path, semester_id)
