"""Data classes for the timetable and knowledge domain model."""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass
class Semester:
    id: int
    name: str
    start_date: date


@dataclass
class ScheduleSettings:
    semester_id: int
    period_count: int = 8
    period_minutes: int = 45
    break_minutes: int = 10
    total_weeks: int = 20


@dataclass
class PeriodTime:
    semester_id: int
    period: int
    start_time: str  # HH:MM
    end_time: str


@dataclass
class Course:
    id: int
    semester_id: int
    name: str
    day_of_week: int  # 1=Monday, 7=Sunday
    start_period: int
    end_period: int
    week_pattern: tuple = ()
    teacher: Optional[str] = None
    location: Optional[str] = None
    course_type: str = "major_required"
    note: Optional[str] = None
    color: Optional[int] = None


@dataclass
class TaskAttachment:
    id: int
    semester_id: int
    title: str
    created_at: datetime
    course_id: Optional[int] = None
    kind: str = "task"
    due_at: Optional[datetime] = None
    uri: Optional[str] = None
    url: Optional[str] = None


KIND_TASK = "task"
KIND_PDF = "pdf"
KIND_LINK = "link"


@dataclass
class KnowledgePoint:
    id: int
    course_id: int
    title: str
    mastery_level: int = 0
    is_key_point: bool = False
    last_reviewed_at: Optional[datetime] = None


@dataclass(frozen=True)
class WorkloadDay:
    date: date
    week_index: int
    day_of_week: int
    course_periods: int
    task_count: int
    index: int


@dataclass(frozen=True)
class KnowledgeProgress:
    total_count: int
    mastered_count: int
    learning_count: int
    not_started_count: int
    stuck_count: int
    percent: int
