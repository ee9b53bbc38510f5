"""Progress beacon: today's load, trend and nearest task summary."""
from datetime import date, datetime, tzinfo

from schedule_buddy.models import TaskAttachment
from schedule_buddy.settings import get_current_semester_id, get_period_count, get_schedule_settings
from schedule_buddy.timetable import get_courses, get_semester, get_task_attachments
from schedule_buddy.workload import calculate_current_week, calculate_trend, calculate_weekly_workload

NO_TASKS_TEXT = "No tasks"
NO_LOAD_TEXT = "Today's load: --"


def _aware(moment: datetime, zone: tzinfo | None) -> datetime:
    if moment.tzinfo is not None:
        return moment
    return moment.replace(tzinfo=zone) if zone else moment.astimezone()


def build_task_summary(tasks: list[TaskAttachment], now: datetime, zone: tzinfo | None = None) -> str:
    if not tasks:
        return NO_TASKS_TEXT
    now = _aware(now, zone)
    upcoming = [t for t in tasks if t.due_at is not None and _aware(t.due_at, zone) >= now]
    if not upcoming:
        return f"Pending tasks: {len(tasks)}"
    nearest = min(upcoming, key=lambda t: _aware(t.due_at, zone))
    due_date = _aware(nearest.due_at, zone).astimezone(zone).date()
    days_left = (due_date - now.astimezone(zone).date()).days
    if days_left == 0:
        suffix = "due today"
    else:
        suffix = f"due in {days_left} day" + ("s" if days_left != 1 else "")
    return f"Nearest task: {suffix}"


def build_load_text(today_load: int, trend: str) -> str:
    return f"Today's load: {today_load} · Trend: {trend}"


def get_beacon(db_path: str, today: date | None = None, now: datetime | None = None,
               zone: tzinfo | None = None) -> dict:
    """Collect everything the beacon panel shows for the current semester."""
    now = now or (datetime.now(zone) if zone else datetime.now().astimezone())
    today = today or now.date()
    semester_id = get_current_semester_id(db_path)
    semester = get_semester(db_path, semester_id) if semester_id > 0 else None
    if semester is None:
        return {
            "week_index": None,
            "today_load": None,
            "trend": None,
            "load_text": NO_LOAD_TEXT,
            "task_text": NO_TASKS_TEXT,
        }

    settings = get_schedule_settings(db_path, semester_id)
    week_index = calculate_current_week(semester.start_date, today, settings.total_weeks)
    week = calculate_weekly_workload(
        courses=get_courses(db_path, semester_id),
        tasks=get_task_attachments(db_path, semester_id, with_due_only=True),
        semester_start_date=semester.start_date,
        week_index=week_index,
        total_weeks=settings.total_weeks,
        period_count=get_period_count(db_path, semester_id),
        zone=zone,
    )
    today_entry = next((d for d in week if d.date == today), None)
    if today_entry is None:
        # Outside the semester: nothing scheduled today, no week to compare against.
        today_load = 0
        trend = calculate_trend(today_load, [])
    else:
        today_load = today_entry.index
        trend = calculate_trend(today_load, [d.index for d in week])
    return {
        "week_index": week_index,
        "today_load": today_load,
        "trend": trend,
        "load_text": build_load_text(today_load, trend),
        "task_text": build_task_summary(get_task_attachments(db_path, semester_id), now, zone),
    }
