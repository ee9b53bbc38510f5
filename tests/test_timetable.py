# tests/test_timetable.py
from datetime import date, datetime, timezone

import pytest

from schedule_buddy.db import init_db
from schedule_buddy.models import Course
from schedule_buddy.timetable import (
    add_attachment, add_course, create_semester, delete_attachment, delete_course,
    format_course_period, format_week_pattern, get_course, get_courses, get_semester,
    get_semesters, get_task_attachments, parse_week_pattern, update_semester_start,
    validate_course,
)


def setup_semester(tmp_db):
    init_db(tmp_db)
    return create_semester(tmp_db, "Spring 2026", date(2026, 1, 5))


def make_course(semester_id, **overrides):
    fields = dict(id=0, semester_id=semester_id, name="Linear Algebra", day_of_week=1,
                  start_period=1, end_period=2, week_pattern=(1, 2, 3))
    fields.update(overrides)
    return Course(**fields)


def test_parse_week_pattern():
    assert parse_week_pattern("3, 1,2,2") == (1, 2, 3)
    assert parse_week_pattern([5, 0, -1, 4]) == (4, 5)
    assert parse_week_pattern("1,x,,3") == (1, 3)
    assert parse_week_pattern("") == ()
    assert parse_week_pattern(None) == ()
    assert parse_week_pattern(7) == (7,)


def test_format_week_pattern():
    assert format_week_pattern((1, 2, 5)) == "1,2,5"


def test_format_course_period():
    assert format_course_period(make_course(1, start_period=3, end_period=3)) == "P3"
    assert format_course_period(make_course(1, start_period=3, end_period=4)) == "P3-4"


@pytest.mark.parametrize("overrides,message", [
    ({"name": "  "}, "name"),
    ({"day_of_week": 0}, "day_of_week"),
    ({"day_of_week": 8}, "day_of_week"),
    ({"start_period": 0}, "start_period"),
    ({"start_period": 4, "end_period": 2}, "before"),
    ({"end_period": 9}, "exceeds"),
    ({"week_pattern": ()}, "week_pattern"),
    ({"week_pattern": (0, 1)}, "positive"),
])
def test_validate_course_rejects(overrides, message):
    with pytest.raises(ValueError, match=message):
        validate_course(make_course(1, **overrides), period_count=8)


def test_validate_course_accepts_valid():
    validate_course(make_course(1, start_period=8, end_period=8), period_count=8)


def test_semester_crud(tmp_db):
    semester_id = setup_semester(tmp_db)
    semester = get_semester(tmp_db, semester_id)
    assert semester.name == "Spring 2026"
    assert semester.start_date == date(2026, 1, 5)
    update_semester_start(tmp_db, semester_id, date(2026, 1, 12))
    assert get_semester(tmp_db, semester_id).start_date == date(2026, 1, 12)
    assert [s.id for s in get_semesters(tmp_db)] == [semester_id]
    assert get_semester(tmp_db, 999) is None


def test_add_and_get_course(tmp_db):
    semester_id = setup_semester(tmp_db)
    course_id = add_course(tmp_db, make_course(semester_id, week_pattern="3,1,2", location="A101"))
    course = get_course(tmp_db, course_id)
    assert course.name == "Linear Algebra"
    assert course.week_pattern == (1, 2, 3)
    assert course.location == "A101"


def test_add_course_does_not_mutate_input(tmp_db):
    semester_id = setup_semester(tmp_db)
    course = make_course(semester_id, week_pattern="2,1")
    add_course(tmp_db, course)
    assert course.week_pattern == "2,1"


def test_add_course_validates_against_period_count(tmp_db):
    semester_id = setup_semester(tmp_db)
    with pytest.raises(ValueError):
        add_course(tmp_db, make_course(semester_id, start_period=5, end_period=9))
    assert get_courses(tmp_db, semester_id) == []


def test_get_courses_ordered_by_day(tmp_db):
    semester_id = setup_semester(tmp_db)
    add_course(tmp_db, make_course(semester_id, name="Fri", day_of_week=5))
    add_course(tmp_db, make_course(semester_id, name="Mon", day_of_week=1))
    assert [c.name for c in get_courses(tmp_db, semester_id)] == ["Mon", "Fri"]


def test_delete_course(tmp_db):
    semester_id = setup_semester(tmp_db)
    course_id = add_course(tmp_db, make_course(semester_id))
    delete_course(tmp_db, course_id)
    assert get_course(tmp_db, course_id) is None


def test_task_attachments(tmp_db):
    semester_id = setup_semester(tmp_db)
    course_id = add_course(tmp_db, make_course(semester_id))
    due = datetime(2026, 1, 7, 23, 59, tzinfo=timezone.utc)
    add_attachment(tmp_db, semester_id, "Homework 1", course_id=course_id, due_at=due)
    add_attachment(tmp_db, semester_id, "Reading", course_id=course_id)
    add_attachment(tmp_db, semester_id, "Slides", course_id=course_id, kind="pdf", due_at=due)

    all_tasks = get_task_attachments(tmp_db, semester_id)
    assert [t.title for t in all_tasks] == ["Homework 1", "Reading"]
    assert all_tasks[0].due_at == due
    assert all_tasks[1].due_at is None

    with_due = get_task_attachments(tmp_db, semester_id, with_due_only=True)
    assert [t.title for t in with_due] == ["Homework 1"]


def test_add_attachment_rejects_blank_title(tmp_db):
    semester_id = setup_semester(tmp_db)
    with pytest.raises(ValueError):
        add_attachment(tmp_db, semester_id, "   ")


def test_delete_attachment(tmp_db):
    semester_id = setup_semester(tmp_db)
    task_id = add_attachment(tmp_db, semester_id, "Essay")
    delete_attachment(tmp_db, task_id)
    assert get_task_attachments(tmp_db, semester_id) == []
