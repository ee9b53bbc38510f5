"""Timetable import and export (JSON or YAML)."""
import json
from datetime import date
from pathlib import Path

from loguru import logger

from schedule_buddy.models import Course, PeriodTime
from schedule_buddy.settings import (
    get_period_count, get_period_times, set_current_semester, set_period_times,
)
from schedule_buddy.timetable import (
    add_course, create_semester, get_courses, get_semester, parse_week_pattern,
    update_semester_start, validate_course,
)

SCHEMA_VERSION = 1


def _pick(obj: dict, *keys, default=None):
    """First present key, accepting both camelCase and snake_case spellings."""
    for key in keys:
        if obj.get(key) is not None:
            return obj[key]
    return default


def _as_int(value, default: int = -1) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_text(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def read_timetable(file_path: str) -> dict:
    path = Path(file_path)
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        import yaml
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"{path.name}: expected a mapping at the top level")
    return data


def parse_timetable(data: dict, semester_id: int = 0) -> dict:
    """Turn a raw timetable mapping into model objects.

    Rows that are not mappings, and course rows missing a name, with a day
    outside 1-7, non-positive periods or no weeks, are skipped.
    """
    semester = data.get("semester")
    if not isinstance(semester, dict):
        semester = {}
    start = _as_text(_pick(semester, "startDate", "start_date"))
    try:
        start_date = date.fromisoformat(start) if start else None
    except ValueError:
        logger.warning("Ignoring unparseable semester start date {!r}", start)
        start_date = None
    payload = {
        "semester_name": _as_text(semester.get("name")),
        "semester_start_date": start_date,
        "period_times": [],
        "courses": [],
        "skipped": 0,
    }

    for item in data.get("periodTimes") or data.get("period_times") or []:
        if not isinstance(item, dict):
            logger.warning("Skipping period time row {!r}: not a mapping", item)
            continue
        period = _as_int(item.get("period"))
        start_time = _as_text(_pick(item, "startTime", "start_time"))
        end_time = _as_text(_pick(item, "endTime", "end_time"))
        if period > 0 and start_time and end_time:
            payload["period_times"].append(PeriodTime(semester_id, period, start_time, end_time))

    for index, item in enumerate(data.get("courses") or []):
        if not isinstance(item, dict):
            logger.warning("Skipping course row {}: not a mapping", index)
            payload["skipped"] += 1
            continue
        name = _as_text(item.get("name"))
        day_of_week = _as_int(_pick(item, "dayOfWeek", "day_of_week"))
        start_period = _as_int(_pick(item, "startPeriod", "start_period"))
        end_period = _as_int(_pick(item, "endPeriod", "end_period"))
        weeks = parse_week_pattern(_pick(item, "weekPattern", "week_pattern"))
        if not name or not 1 <= day_of_week <= 7 or start_period <= 0 or end_period <= 0 or not weeks:
            logger.warning("Skipping course row {}: incomplete or out of range ({!r})", index, name)
            payload["skipped"] += 1
            continue
        color = item.get("color")
        payload["courses"].append(Course(
            id=0,
            semester_id=semester_id,
            name=name,
            day_of_week=day_of_week,
            start_period=start_period,
            end_period=end_period,
            week_pattern=weeks,
            teacher=_as_text(item.get("teacher")),
            location=_as_text(item.get("location")),
            course_type=_as_text(_pick(item, "type", "course_type")) or "major_required",
            note=_as_text(item.get("note")),
            color=_as_int(color) if color is not None else None,
        ))
    return payload


def import_timetable(db_path: str, file_path: str, semester_id: int | None = None) -> dict:
    """Import a timetable file into a semester.

    Without a semester_id a new semester is created from the file's semester
    block and made current.
    """
    data = read_timetable(file_path)
    payload = parse_timetable(data)
    if semester_id is None:
        name = payload["semester_name"] or Path(file_path).stem
        start = payload["semester_start_date"] or date.today()
        semester_id = create_semester(db_path, name, start)
        set_current_semester(db_path, semester_id)
    elif payload["semester_start_date"]:
        update_semester_start(db_path, semester_id, payload["semester_start_date"])

    if payload["period_times"]:
        set_period_times(db_path, semester_id, payload["period_times"])
    period_count = get_period_count(db_path, semester_id)

    imported = 0
    skipped = payload["skipped"]
    for course in payload["courses"]:
        course.semester_id = semester_id
        try:
            validate_course(course, period_count)
        except ValueError as e:
            logger.warning("Skipping course {!r}: {}", course.name, e)
            skipped += 1
            continue
        add_course(db_path, course)
        imported += 1

    logger.info("Imported {} courses from {} ({} skipped)", imported, file_path, skipped)
    return {
        "filename": Path(file_path).name,
        "semester_id": semester_id,
        "courses": imported,
        "skipped": skipped,
        "period_times": len(payload["period_times"]),
    }


def export_timetable(db_path: str, semester_id: int) -> str:
    semester = get_semester(db_path, semester_id)
    if semester is None:
        raise ValueError(f"Semester {semester_id} not found")
    root = {
        "schemaVersion": SCHEMA_VERSION,
        "semester": {"name": semester.name, "startDate": semester.start_date.isoformat()},
        "periodTimes": [
            {"period": t.period, "startTime": t.start_time, "endTime": t.end_time}
            for t in get_period_times(db_path, semester_id)
        ],
        "courses": [
            {
                "name": c.name,
                "teacher": c.teacher,
                "location": c.location,
                "type": c.course_type,
                "dayOfWeek": c.day_of_week,
                "startPeriod": c.start_period,
                "endPeriod": c.end_period,
                "weekPattern": list(c.week_pattern),
                "note": c.note,
                "color": c.color,
            }
            for c in get_courses(db_path, semester_id)
        ],
    }
    return json.dumps(root, ensure_ascii=False, indent=2)
