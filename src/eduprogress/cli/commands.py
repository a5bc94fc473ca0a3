"""CLI commands for EduProgress.

Commands:
- init-db: create the schema and seed achievement definitions
- seed-demo: insert a small demo course, exam and enrollment
- log-activity: add activity for a user and evaluate unlocks
- achievements: show a user's achievements with progress
- stats: show a student's dashboard numbers
- serve: run the Web API with uvicorn
"""

from datetime import date
from typing import Optional

import structlog
import typer
from rich.console import Console
from rich.table import Table

from eduprogress.config.achievements import (
    AchievementConfigError,
    load_achievement_definitions,
)
from eduprogress.config.app_config import AppConfig, load_app_config
from eduprogress.config.logging_setup import configure_logging
from eduprogress.core.achievement_engine import AchievementEngine
from eduprogress.core.activity_ledger import ActivityDeltas, ActivityLedger
from eduprogress.core.activity_pipeline import ActivityPipeline
from eduprogress.core.errors import ProgressError
from eduprogress.core.progress_aggregator import ProgressAggregator
from eduprogress.db import (
    AchievementRepository,
    ActivityRepository,
    CatalogRepository,
    Database,
    ExamRepository,
    ProgressRepository,
)
from eduprogress.db.database import MAX_ROW_ID
from eduprogress.utils.dates import parse_date

app = typer.Typer(
    name="eduprogress",
    help="Exam scoring, activity ledger and achievements for an educational platform.",
    no_args_is_help=True,
)

logger = structlog.get_logger(__name__)

console = Console()


def _load_config() -> AppConfig:
    config = load_app_config(force_reload=True)
    configure_logging(config.logging)
    return config


def _open_database(config: AppConfig) -> Database:
    db = Database(config.database.path)
    db.init_schema()
    return db


def _achievement_engine(db: Database) -> AchievementEngine:
    return AchievementEngine(
        achievements=AchievementRepository(db),
        activity=ActivityRepository(db),
        progress=ProgressRepository(db),
        exams=ExamRepository(db),
    )


@app.command(name="init-db")
def init_db() -> None:
    """Create the database schema and seed achievement definitions."""
    config = _load_config()

    try:
        definitions = load_achievement_definitions(config.achievements_file)
    except AchievementConfigError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    db = _open_database(config)
    inserted = AchievementRepository(db).seed_definitions(definitions)

    console.print(f"[green]✓ Database ready:[/green] {db.path}")
    console.print(f"  [dim]achievements:[/dim] {len(definitions)} defined, {inserted} new")


@app.command(name="seed-demo")
def seed_demo() -> None:
    """Create a demo teacher, student, course, exam and assignment."""
    config = _load_config()
    db = _open_database(config)
    catalog = CatalogRepository(db)

    teacher_id = catalog.create_user("Demo Teacher", role="teacher")
    student_id = catalog.create_user("Demo Student", role="student")

    course_id = catalog.create_course(teacher_id, "Python Basics", "Variables, loops and functions")
    for n, title in enumerate(["Variables", "Loops", "Functions", "Modules"], start=1):
        catalog.add_lesson(course_id, title, order_num=n)
    catalog.enroll(student_id, course_id, progress=50)

    exam_id = catalog.create_exam(course_id, "Python Basics Quiz", duration=15, total_points=15)
    catalog.add_question(
        exam_id, "What does len([1, 2, 3]) return?", "3", points=10, options=["2", "3", "4"]
    )
    catalog.add_question(
        exam_id,
        "Lists are immutable.",
        "false",
        points=5,
        type="true_false",
        options=["true", "false"],
    )

    assignment_id = catalog.create_assignment(course_id, "FizzBuzz")
    catalog.submit_assignment(assignment_id, student_id, "for i in range(1, 101): ...")

    logger.info("demo_seeded", course_id=course_id, exam_id=exam_id)
    console.print(f"[green]✓ Demo data created in {db.path}[/green]")
    console.print(f"  [dim]teacher:[/dim] {teacher_id}")
    console.print(f"  [dim]student:[/dim] {student_id}")
    console.print(f"  [dim]course:[/dim]  {course_id}")
    console.print(f"  [dim]exam:[/dim]    {exam_id}")


@app.command(name="log-activity")
def log_activity(
    user_id: int = typer.Argument(..., min=0, max=MAX_ROW_ID, help="User the activity belongs to"),
    hours: float = typer.Option(0.0, "--hours", help="Hours studied"),
    lessons: int = typer.Option(0, "--lessons", help="Lessons completed"),
    assignments: int = typer.Option(0, "--assignments", help="Assignments completed"),
    exams: int = typer.Option(0, "--exams", help="Exams taken"),
    on: Optional[str] = typer.Option(None, "--date", help="Activity date (YYYY-MM-DD), default today"),
) -> None:
    """Add activity for a user and evaluate achievement unlocks."""
    config = _load_config()
    db = _open_database(config)

    try:
        activity_date: date | None = parse_date(on) if on else None
    except ValueError:
        console.print(f"[red]✗ Invalid date: {on}[/red]")
        raise typer.Exit(code=1)

    pipeline = ActivityPipeline(ActivityLedger(ActivityRepository(db)), _achievement_engine(db))
    deltas = ActivityDeltas(
        hours_spent=hours,
        lessons_completed=lessons,
        assignments_completed=assignments,
        exams_taken=exams,
    )

    try:
        result = pipeline.log(user_id, deltas, activity_date)
    except ProgressError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        raise typer.Exit(code=1)

    record = result.record
    console.print(f"[green]✓ Activity logged for {record.activity_date}[/green]")
    console.print(f"  [dim]hours:[/dim]       {record.hours_spent:g}")
    console.print(f"  [dim]lessons:[/dim]     {record.lessons_completed}")
    console.print(f"  [dim]assignments:[/dim] {record.assignments_completed}")
    console.print(f"  [dim]exams:[/dim]       {record.exams_taken}")
    for achievement_type in result.unlocked:
        console.print(f"  [yellow]★ Unlocked: {achievement_type}[/yellow]")


@app.command()
def achievements(
    user_id: int = typer.Argument(..., min=0, max=MAX_ROW_ID, help="User to report on"),
) -> None:
    """Show a user's achievements with progress."""
    config = _load_config()
    db = _open_database(config)

    statuses = _achievement_engine(db).list_achievements(user_id)
    if not statuses:
        console.print("[yellow]No achievements defined. Run 'eduprogress init-db' first.[/yellow]")
        raise typer.Exit(code=1)

    table = Table(title=f"Achievements for user {user_id}")
    table.add_column("Type")
    table.add_column("Title")
    table.add_column("Requirement")
    table.add_column("Progress", justify="right")
    table.add_column("Unlocked", justify="center")

    for s in statuses:
        d = s.definition
        table.add_row(
            d.type,
            d.title,
            f"{d.requirement_type} ≥ {d.requirement_value:g}",
            f"{s.progress}%",
            "[green]✓[/green]" if s.unlocked else "",
        )

    console.print(table)


@app.command()
def stats(
    user_id: int = typer.Argument(..., min=0, max=MAX_ROW_ID, help="Student to report on"),
) -> None:
    """Show a student's dashboard numbers."""
    config = _load_config()
    db = _open_database(config)

    aggregator = ProgressAggregator(ProgressRepository(db), ActivityRepository(db))
    student = aggregator.student_stats(user_id)
    weekly = aggregator.weekly_activity(user_id)

    console.print(f"[bold]Student {user_id}[/bold]")
    console.print(f"  [dim]courses completed:[/dim] {student.courses_completed}")
    console.print(f"  [dim]current courses:[/dim]   {student.current_courses}")
    console.print(f"  [dim]total hours:[/dim]       {student.total_hours:g}")
    console.print(f"  [dim]average progress:[/dim]  {student.average_progress}%")
    console.print(f"  [dim]hours this week:[/dim]   {weekly.total_hours:g}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the Web API with uvicorn."""
    import uvicorn

    console.print(f"[blue]Serving EduProgress API on http://{host}:{port}[/blue]")
    uvicorn.run(
        "eduprogress.web.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )
