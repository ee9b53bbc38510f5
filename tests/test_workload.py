# tests/test_workload.py
from datetime import date, datetime, timedelta, timezone

import pytest

from schedule_buddy.models import Course, TaskAttachment
from schedule_buddy.workload import (
    TREND_HIGH, TREND_LOW, TREND_STEADY, calc_load_index, calculate_current_week,
    calculate_trend, calculate_weekly_workload, course_span,
)

SEMESTER_START = date(2026, 1, 5)  # Monday
UTC = timezone.utc


def make_course(course_id, day, start, end, weeks=(1,)):
    return Course(id=course_id, semester_id=1, name=f"Course {course_id}", day_of_week=day,
                  start_period=start, end_period=end, week_pattern=tuple(weeks))


def make_task(task_id, due_at, kind="task"):
    return TaskAttachment(id=task_id, semester_id=1, title=f"Task {task_id}",
                          created_at=datetime(2026, 1, 1, tzinfo=UTC), kind=kind, due_at=due_at)


def at_midnight(day):
    return datetime(day.year, day.month, day.day, tzinfo=UTC)


def workload(courses=(), tasks=(), week_index=1, period_count=8, zone=UTC):
    return calculate_weekly_workload(
        courses=list(courses), tasks=list(tasks), semester_start_date=SEMESTER_START,
        week_index=week_index, total_weeks=20, period_count=period_count, zone=zone,
    )


def test_course_and_task_weighting():
    courses = [make_course(1, 1, 1, 2), make_course(2, 3, 1, 4)]
    monday = at_midnight(SEMESTER_START)
    wednesday = at_midnight(SEMESTER_START + timedelta(days=2))
    tasks = [make_task(1, monday), make_task(2, wednesday), make_task(3, wednesday)]
    results = workload(courses, tasks)
    assert len(results) == 7
    assert results[0].course_periods == 2
    assert results[0].task_count == 1
    assert results[2].course_periods == 4
    assert results[2].task_count == 2
    assert results[2].index > results[0].index


def test_always_seven_days_monday_to_sunday():
    for week in (1, 2, 7):
        results = workload(week_index=week)
        assert len(results) == 7
        for i, day in enumerate(results):
            assert day.date == SEMESTER_START + timedelta(days=(week - 1) * 7 + i)
            assert day.day_of_week == i + 1
            assert day.week_index == week
        assert results[0].date.isoweekday() == 1


def test_out_of_range_week_does_not_raise():
    results = workload([make_course(1, 1, 1, 2, weeks=(1,))], week_index=0)
    assert len(results) == 7
    assert results[0].date == SEMESTER_START - timedelta(days=7)
    assert all(d.course_periods == 0 for d in results)
    assert len(workload(week_index=99)) == 7


def test_empty_inputs_give_zero_load():
    results = workload()
    assert all(d.index == 0 and d.course_periods == 0 and d.task_count == 0 for d in results)


def test_week_pattern_excludes_other_weeks():
    course = make_course(1, 2, 1, 3, weeks=(2, 4))
    assert workload([course], week_index=1)[1].course_periods == 0
    assert workload([course], week_index=2)[1].course_periods == 3


def test_overlapping_courses_are_additive():
    courses = [make_course(1, 5, 1, 2), make_course(2, 5, 2, 3)]
    assert workload(courses)[4].course_periods == 4


def test_spans_are_clamped_to_period_count():
    courses = [make_course(1, 1, 7, 10), make_course(2, 2, 9, 10)]
    results = workload(courses, period_count=8)
    assert results[0].course_periods == 2
    assert results[1].course_periods == 0


def test_tasks_without_due_date_are_ignored():
    results = workload(tasks=[make_task(1, None)])
    assert sum(d.task_count for d in results) == 0


def test_non_task_attachments_are_ignored():
    monday = at_midnight(SEMESTER_START)
    results = workload(tasks=[make_task(1, monday, kind="pdf"), make_task(2, monday, kind="link")])
    assert results[0].task_count == 0


def test_due_date_uses_given_time_zone():
    late_monday_utc = datetime(2026, 1, 5, 23, 30, tzinfo=UTC)
    plus_eight = timezone(timedelta(hours=8))
    assert workload(tasks=[make_task(1, late_monday_utc)], zone=UTC)[0].task_count == 1
    shifted = workload(tasks=[make_task(1, late_monday_utc)], zone=plus_eight)
    assert shifted[0].task_count == 0
    assert shifted[1].task_count == 1


def test_naive_due_dates_are_wall_clock_in_zone():
    results = workload(tasks=[make_task(1, datetime(2026, 1, 7, 9, 0))])
    assert results[2].task_count == 1


def test_tasks_outside_week_are_ignored():
    next_week = at_midnight(SEMESTER_START + timedelta(days=7))
    assert sum(d.task_count for d in workload(tasks=[make_task(1, next_week)])) == 0


def test_load_index_zero_iff_both_zero():
    assert calc_load_index(0, 0) == 0
    assert calc_load_index(1, 0) > 0
    assert calc_load_index(0, 1) > 0


def test_load_index_monotonic():
    for periods in range(0, 13):
        for tasks in range(0, 6):
            base = calc_load_index(periods, tasks)
            assert calc_load_index(periods + 1, tasks) >= base
            assert calc_load_index(periods, tasks + 1) > base


def test_task_weighs_more_than_period():
    assert calc_load_index(0, 1) > calc_load_index(1, 0)


def test_course_span():
    assert course_span(make_course(1, 1, 3, 5)) == 3


@pytest.mark.parametrize("today,week,expected", [
    (50, [50, 10, 10, 10, 10, 10, 10], TREND_HIGH),
    (0, [50, 50, 50, 50, 50, 50, 0], TREND_LOW),
    (20, [20, 20, 20, 20, 20, 20, 20], TREND_STEADY),
    (0, [0, 0, 0, 0, 0, 0, 0], TREND_STEADY),
    (10, [], TREND_STEADY),
])
def test_calculate_trend(today, week, expected):
    assert calculate_trend(today, week) == expected


def test_trend_is_stable_across_calls():
    week = [36, 0, 72, 0, 0, 0, 0]
    assert {calculate_trend(36, week) for _ in range(5)} == {calculate_trend(36, week)}


def test_calculate_current_week():
    assert calculate_current_week(SEMESTER_START, SEMESTER_START, 20) == 1
    assert calculate_current_week(SEMESTER_START, date(2026, 1, 11), 20) == 1
    assert calculate_current_week(SEMESTER_START, date(2026, 1, 12), 20) == 2
    assert calculate_current_week(SEMESTER_START, date(2025, 12, 1), 20) == 1
    assert calculate_current_week(SEMESTER_START, date(2027, 1, 1), 20) == 20
