"""Weekly workload index and trend calculation."""
from collections import Counter
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Optional

from schedule_buddy.models import KIND_TASK, Course, TaskAttachment, WorkloadDay

COURSE_WEIGHT = 8
TASK_WEIGHT = 20

TREND_HIGH = "HIGH"
TREND_LOW = "LOW"
TREND_STEADY = "STEADY"


def course_span(course: Course) -> int:
    return course.end_period - course.start_period + 1


def _clamped_span(course: Course, period_count: int) -> int:
    start = max(course.start_period, 1)
    end = min(course.end_period, period_count)
    if start > end:
        return 0
    return end - start + 1


def _local_date(moment: datetime, zone: Optional[tzinfo]) -> date:
    if moment.tzinfo is None:
        # Naive timestamps are already wall-clock time in the target zone.
        return moment.date()
    return moment.astimezone(zone).date()


def calc_load_index(course_periods: int, task_count: int) -> int:
    return course_periods * COURSE_WEIGHT + task_count * TASK_WEIGHT


def calculate_weekly_workload(
    courses: Iterable[Course],
    tasks: Iterable[TaskAttachment],
    semester_start_date: date,
    week_index: int,
    total_weeks: int,
    period_count: int,
    zone: Optional[tzinfo] = None,
) -> list[WorkloadDay]:
    """Build the Monday-to-Sunday workload records for one semester week.

    Args:
        courses: Courses of the semester.
        tasks: Attachments of the semester; only tasks with a due date count.
        semester_start_date: Monday of week 1.
        week_index: 1-based week to compute. Not clamped against total_weeks.
        total_weeks: Semester length, informational only.
        period_count: Upper bound used to clamp course period spans.
        zone: Time zone used to turn due timestamps into calendar dates.
            None means the system local zone.

    Returns:
        Exactly seven WorkloadDay records, ordered Monday to Sunday.
    """
    courses = list(courses)
    week_start = semester_start_date + timedelta(days=(week_index - 1) * 7)
    due_dates = Counter(
        _local_date(task.due_at, zone)
        for task in tasks
        if task.due_at is not None and task.kind == KIND_TASK
    )

    results = []
    for offset in range(7):
        day = week_start + timedelta(days=offset)
        day_of_week = offset + 1
        course_periods = sum(
            _clamped_span(c, period_count)
            for c in courses
            if c.day_of_week == day_of_week and week_index in c.week_pattern
        )
        task_count = due_dates.get(day, 0)
        results.append(WorkloadDay(
            date=day,
            week_index=week_index,
            day_of_week=day_of_week,
            course_periods=course_periods,
            task_count=task_count,
            index=calc_load_index(course_periods, task_count),
        ))
    return results


def calculate_trend(today_index: int, week_indices: list[int]) -> str:
    """Compare today's load index against the week's average."""
    if not week_indices:
        return TREND_STEADY
    average = sum(week_indices) / len(week_indices)
    if average == 0:
        return TREND_STEADY
    if today_index >= average * 1.2:
        return TREND_HIGH
    elif today_index <= average * 0.8:
        return TREND_LOW
    return TREND_STEADY


def calculate_current_week(semester_start_date: date, today: date, total_weeks: int) -> int:
    days_diff = (today - semester_start_date).days
    week = days_diff // 7 + 1
    return max(1, min(week, total_weeks))
