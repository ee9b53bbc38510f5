"""User and per-semester schedule settings."""
from loguru import logger

from schedule_buddy.db import get_connection
from schedule_buddy.models import PeriodTime, ScheduleSettings

DEFAULT_TOTAL_WEEKS = 20
DEFAULT_PERIOD_COUNT = 8


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def get_current_semester_id(db_path: str) -> int:
    """Selected semester id, falling back to the first semester or 0 if none exist."""
    value = get_setting(db_path, "current_semester_id")
    if value and int(value) > 0:
        return int(value)
    conn = get_connection(db_path)
    row = conn.execute("SELECT id FROM semesters ORDER BY id LIMIT 1").fetchone()
    conn.close()
    return row["id"] if row else 0


def set_current_semester(db_path: str, semester_id: int) -> None:
    set_setting(db_path, "current_semester_id", str(semester_id))


def get_schedule_settings(db_path: str, semester_id: int) -> ScheduleSettings:
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT * FROM schedule_settings WHERE semester_id = ?", (semester_id,)
    ).fetchone()
    conn.close()
    if not row:
        return ScheduleSettings(
            semester_id=semester_id,
            period_count=DEFAULT_PERIOD_COUNT,
            total_weeks=DEFAULT_TOTAL_WEEKS,
        )
    return ScheduleSettings(
        semester_id=row["semester_id"],
        period_count=row["period_count"],
        period_minutes=row["period_minutes"],
        break_minutes=row["break_minutes"],
        total_weeks=row["total_weeks"],
    )


def update_schedule_settings(db_path: str, settings: ScheduleSettings) -> None:
    for field in ("period_count", "period_minutes", "total_weeks"):
        if getattr(settings, field) <= 0:
            raise ValueError(f"{field} must be positive, got {getattr(settings, field)}")
    if settings.break_minutes < 0:
        raise ValueError(f"break_minutes must not be negative, got {settings.break_minutes}")
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO schedule_settings
        (semester_id, period_count, period_minutes, break_minutes, total_weeks)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(semester_id) DO UPDATE SET
            period_count=excluded.period_count,
            period_minutes=excluded.period_minutes,
            break_minutes=excluded.break_minutes,
            total_weeks=excluded.total_weeks""",
        (settings.semester_id, settings.period_count, settings.period_minutes,
         settings.break_minutes, settings.total_weeks),
    )
    conn.commit()
    conn.close()


def get_period_times(db_path: str, semester_id: int) -> list[PeriodTime]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM period_times WHERE semester_id = ? ORDER BY period", (semester_id,)
    ).fetchall()
    conn.close()
    return [
        PeriodTime(r["semester_id"], r["period"], r["start_time"], r["end_time"])
        for r in rows
    ]


def set_period_times(db_path: str, semester_id: int, times: list[PeriodTime]) -> None:
    """Replace the semester's period time table."""
    conn = get_connection(db_path)
    conn.execute("DELETE FROM period_times WHERE semester_id = ?", (semester_id,))
    conn.executemany(
        "INSERT INTO period_times (semester_id, period, start_time, end_time) VALUES (?, ?, ?, ?)",
        [(semester_id, t.period, t.start_time, t.end_time) for t in times],
    )
    conn.commit()
    conn.close()
    logger.info("Stored {} period times for semester {}", len(times), semester_id)


def get_period_count(db_path: str, semester_id: int) -> int:
    """Number of periods per day: the period table wins over the settings row."""
    times = get_period_times(db_path, semester_id)
    if times:
        return max(max(t.period for t in times), 1)
    return get_schedule_settings(db_path, semester_id).period_count
