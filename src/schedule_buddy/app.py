"""Interactive CLI application."""
import sys
from datetime import date, datetime
from pathlib import Path

from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from schedule_buddy.beacon import get_beacon
from schedule_buddy.db import DEFAULT_DB_PATH, init_db
from schedule_buddy.importer import export_timetable, import_timetable
from schedule_buddy.knowledge import add_point, get_point, get_points, toggle_status
from schedule_buddy.models import Course, ScheduleSettings
from schedule_buddy.progress import KnowledgeFilter, calculate_progress, filter_points
from schedule_buddy.seed import is_seeded, seed_all
from schedule_buddy.settings import (
    get_current_semester_id, get_period_count, get_schedule_settings, update_schedule_settings,
)
from schedule_buddy.status import KnowledgeStatus, get_status_color
from schedule_buddy.timetable import (
    add_attachment, add_course, format_course_period, format_week_pattern, get_course,
    get_courses, get_semester, get_task_attachments, update_semester_start,
)
from schedule_buddy.workload import (
    TREND_HIGH, TREND_LOW, calculate_current_week, calculate_trend, calculate_weekly_workload,
)

console = Console()

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
TREND_COLORS = {TREND_HIGH: "red", TREND_LOW: "green"}


class SessionExitRequested(Exception):
    """Raised when the user types 'q' or 'menu' inside a nested prompt."""


def session_prompt(message: str, **kwargs) -> str:
    answer = Prompt.ask(message, **kwargs)
    if answer is not None and answer.strip().lower() in ("q", "menu"):
        raise SessionExitRequested()
    return answer


def session_int_prompt(message: str, **kwargs) -> int:
    return int(session_prompt(message, **kwargs))


def show_welcome():
    console.print(Panel(
        "[bold]Schedule Buddy[/bold]\n[dim]Timetable workload & knowledge tracker[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("today", "Today's load and nearest task"),
        ("week", "Workload for a semester week"),
        ("courses", "List courses"),
        ("add-course", "Add a course"),
        ("tasks", "List tasks"),
        ("add-task", "Add a task"),
        ("knowledge", "Knowledge points of a course"),
        ("semester", "Semester start and length"),
        ("import", "Import a timetable file"),
        ("export", "Export the timetable as JSON"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def _require_semester(db_path: str):
    semester = get_semester(db_path, get_current_semester_id(db_path))
    if semester is None:
        console.print("[yellow]No semester configured. Use 'import' or 'semester' first.[/yellow]")
    return semester


def _load_bar(index: int, width: int = 20) -> str:
    filled = min(width, index // 5)
    return "█" * filled + "░" * (width - filled)


def cmd_today(db_path: str):
    beacon = get_beacon(db_path)
    color = TREND_COLORS.get(beacon["trend"], "cyan")
    week = f"Week {beacon['week_index']}" if beacon["week_index"] else "No semester"
    console.print(Panel(
        f"[{color}]{beacon['load_text']}[/{color}]\n{beacon['task_text']}",
        title=f"Progress Beacon · {week}", border_style="blue",
    ))


def cmd_week(db_path: str):
    semester = _require_semester(db_path)
    if semester is None:
        return
    settings = get_schedule_settings(db_path, semester.id)
    current = calculate_current_week(semester.start_date, date.today(), settings.total_weeks)
    week_index = IntPrompt.ask(f"Week (1-{settings.total_weeks})", default=current)
    days = calculate_weekly_workload(
        courses=get_courses(db_path, semester.id),
        tasks=get_task_attachments(db_path, semester.id, with_due_only=True),
        semester_start_date=semester.start_date,
        week_index=week_index,
        total_weeks=settings.total_weeks,
        period_count=get_period_count(db_path, semester.id),
    )
    indices = [d.index for d in days]
    table = Table(title=f"Week {week_index} Workload")
    table.add_column("Day")
    table.add_column("Date")
    table.add_column("Periods", justify="right")
    table.add_column("Tasks", justify="right")
    table.add_column("Load", justify="right")
    table.add_column("Trend")
    for day in days:
        trend = calculate_trend(day.index, indices)
        color = TREND_COLORS.get(trend, "cyan")
        marker = " ←" if day.date == date.today() else ""
        table.add_row(
            DAY_NAMES[day.day_of_week - 1] + marker,
            day.date.isoformat(),
            str(day.course_periods),
            str(day.task_count),
            f"{day.index} {_load_bar(day.index)}",
            f"[{color}]{trend}[/{color}]",
        )
    console.print(table)


def cmd_courses(db_path: str):
    semester = _require_semester(db_path)
    if semester is None:
        return
    courses = get_courses(db_path, semester.id)
    if not courses:
        console.print("[yellow]No courses yet. Use 'add-course' or 'import'.[/yellow]")
        return
    table = Table(title=f"Courses · {semester.name}")
    table.add_column("ID", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Day")
    table.add_column("Periods")
    table.add_column("Weeks")
    table.add_column("Location")
    for c in courses:
        table.add_row(
            str(c.id), c.name, DAY_NAMES[c.day_of_week - 1], format_course_period(c),
            format_week_pattern(c.week_pattern), c.location or "",
        )
    console.print(table)


def cmd_add_course(db_path: str):
    semester = _require_semester(db_path)
    if semester is None:
        return
    total_weeks = get_schedule_settings(db_path, semester.id).total_weeks
    name = session_prompt("Course name")
    day = session_int_prompt("Day of week (1=Mon .. 7=Sun)", choices=[str(i) for i in range(1, 8)])
    start = session_int_prompt("Start period")
    end = session_int_prompt("End period", default=str(start))
    weeks = session_prompt("Weeks (comma separated)", default=format_week_pattern(range(1, total_weeks + 1)))
    location = session_prompt("Location", default="")
    course_id = add_course(db_path, Course(
        id=0, semester_id=semester.id, name=name, day_of_week=day,
        start_period=start, end_period=end, week_pattern=weeks, location=location or None,
    ))
    console.print(f"[green]Added course {course_id}: {name}[/green]")


def cmd_tasks(db_path: str):
    semester = _require_semester(db_path)
    if semester is None:
        return
    tasks = get_task_attachments(db_path, semester.id)
    if not tasks:
        console.print("[yellow]No tasks.[/yellow]")
        return
    table = Table(title="Tasks")
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Course")
    table.add_column("Due")
    names = {c.id: c.name for c in get_courses(db_path, semester.id)}
    for t in tasks:
        table.add_row(
            str(t.id), t.title, names.get(t.course_id, ""),
            t.due_at.strftime("%Y-%m-%d %H:%M") if t.due_at else "[dim]no due date[/dim]",
        )
    console.print(table)


def cmd_add_task(db_path: str):
    semester = _require_semester(db_path)
    if semester is None:
        return
    title = session_prompt("Task title")
    course_raw = session_prompt("Course ID (blank for none)", default="")
    due_raw = session_prompt("Due (YYYY-MM-DD or YYYY-MM-DD HH:MM, blank for none)", default="")
    course_id = int(course_raw) if course_raw.strip() else None
    if course_id is not None and get_course(db_path, course_id) is None:
        console.print(f"[red]Course {course_id} not found[/red]")
        return
    due_at = datetime.fromisoformat(due_raw.strip()).astimezone() if due_raw.strip() else None
    task_id = add_attachment(db_path, semester.id, title, course_id=course_id, due_at=due_at)
    console.print(f"[green]Added task {task_id}: {title}[/green]")


def show_knowledge(db_path: str, course: Course, knowledge_filter: KnowledgeFilter, query: str = ""):
    points = get_points(db_path, course.id)
    progress = calculate_progress(points)
    console.print(Panel(
        f"Mastery: [bold]{progress.percent}%[/bold]  |  "
        f"Mastered {progress.mastered_count}  ·  Learning {progress.learning_count}  ·  "
        f"Stuck {progress.stuck_count}  ·  Not started {progress.not_started_count}  "
        f"(of {progress.total_count})",
        title=f"Knowledge · {course.name}", border_style="blue",
    ))
    table = Table(title=f"Filter: {knowledge_filter.value}")
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Key")
    for p in filter_points(points, knowledge_filter, query):
        status = KnowledgeStatus.from_level(p.mastery_level)
        color = get_status_color(status)
        table.add_row(
            str(p.id), p.title, f"[{color}]{status.label}[/{color}]",
            "[yellow]★[/yellow]" if p.is_key_point else "",
        )
    console.print(table)


def cmd_knowledge(db_path: str):
    semester = _require_semester(db_path)
    if semester is None:
        return
    courses = get_courses(db_path, semester.id)
    if not courses:
        console.print("[yellow]No courses yet.[/yellow]")
        return
    for c in courses:
        console.print(f"  [cyan]{c.id}[/cyan]) {c.name}")
    course = get_course(db_path, IntPrompt.ask("Select course", choices=[str(c.id) for c in courses]))
    knowledge_filter = KnowledgeFilter.ALL
    query = ""
    try:
        while True:
            show_knowledge(db_path, course, knowledge_filter, query)
            action = session_prompt(
                "[dim]add / toggle / filter / search / q[/dim]",
                choices=["add", "toggle", "filter", "search", "q", "menu"], default="q",
            )
            if action == "add":
                title = session_prompt("Title")
                key = Confirm.ask("Key point?", default=False)
                add_point(db_path, course.id, title, is_key_point=key)
            elif action == "toggle":
                point_id = session_int_prompt("Point ID")
                point = get_point(db_path, point_id)
                if point is None or point.course_id != course.id:
                    console.print(f"[red]No point {point_id} in {course.name}[/red]")
                    continue
                status = toggle_status(db_path, point_id)
                console.print(f"[{get_status_color(status)}]→ {status.label}[/{get_status_color(status)}]")
            elif action == "filter":
                name = session_prompt("Filter", choices=[f.name.lower() for f in KnowledgeFilter])
                knowledge_filter = KnowledgeFilter[name.upper()]
            elif action == "search":
                query = session_prompt("Search title", default="")
    except SessionExitRequested:
        return


def cmd_semester(db_path: str):
    semester = _require_semester(db_path)
    if semester is None:
        return
    settings = get_schedule_settings(db_path, semester.id)
    start = Prompt.ask("Semester start (Monday, YYYY-MM-DD)", default=semester.start_date.isoformat())
    total_weeks = IntPrompt.ask("Total weeks", default=settings.total_weeks)
    period_count = IntPrompt.ask("Periods per day", default=settings.period_count)
    update_semester_start(db_path, semester.id, date.fromisoformat(start))
    update_schedule_settings(db_path, ScheduleSettings(
        semester_id=semester.id,
        period_count=period_count,
        period_minutes=settings.period_minutes,
        break_minutes=settings.break_minutes,
        total_weeks=total_weeks,
    ))
    console.print("[green]Semester updated.[/green]")


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    into_current = Confirm.ask("Import into the current semester?", default=False)
    semester_id = get_current_semester_id(db_path) if into_current else None
    result = import_timetable(db_path, file_path, semester_id=semester_id)
    console.print(
        f"[green]Imported {result['courses']} courses from {result['filename']}[/green]"
        + (f" [yellow]({result['skipped']} skipped)[/yellow]" if result["skipped"] else "")
    )


def cmd_export(db_path: str):
    semester = _require_semester(db_path)
    if semester is None:
        return
    target = Prompt.ask("Output file", default=f"timetable-{semester.id}.json")
    Path(target).write_text(export_timetable(db_path, semester.id), encoding="utf-8")
    console.print(f"[green]Exported to {target}[/green]")


COMMANDS = {
    "today": cmd_today,
    "week": cmd_week,
    "courses": cmd_courses,
    "add-course": cmd_add_course,
    "tasks": cmd_tasks,
    "add-task": cmd_add_task,
    "knowledge": cmd_knowledge,
    "semester": cmd_semester,
    "import": cmd_import,
    "export": cmd_export,
}


def main():
    logger.remove()
    logger.add(sys.stderr, level="WARNING")

    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    first_run = not is_seeded(db_path)
    if first_run:
        console.print("[dim]Setting up for first use...[/dim]")
    seed_all(db_path)
    if first_run:
        console.print("[green]Ready![/green]\n")

    show_welcome()
    cmd_today(db_path)

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="today").strip().lower()
        try:
            if choice in ("quit", "exit", "q"):
                console.print("[dim]See you next class![/dim]")
                break
            command = COMMANDS.get(choice)
            if command is None:
                console.print("[red]Unknown command. Try again.[/red]")
                continue
            command(db_path)
        except SessionExitRequested:
            console.print("[dim]Back to menu.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.debug("Command {} failed: {}", choice, e)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
