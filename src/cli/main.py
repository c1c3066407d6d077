"""
Typer CLI for the learning platform core.

Commands:
    lp db init                     - Create tables from the SQLAlchemy models
    lp pages list LESSON_ID        - List page envelopes of a lesson
    lp pages show PAGE_ID --type T - Show one page with its content
    lp attempts start              - Start a lesson attempt for a learner
    lp attempts show ATTEMPT_ID    - Show a lesson attempt and its chains

Usage:
    lp --help
    lp pages list 3 --limit 20 --offset 20
    lp pages show 42 --type question
    lp attempts start --lesson 3 --plan 2 --channel 1 --user alice
"""

from __future__ import annotations

import sys

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import get_settings
from src.attempts import AttemptEngine, AttemptRepository
from src.core.errors import LearningPlatformError
from src.db.database import get_engine, get_session_factory, init_db
from src.pages.repository import PageRepository
from src.questions.models import QuestionPage

app = typer.Typer(
    help="lp CLI: lesson pages, question authoring and lesson attempts",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """Configure logging before any command runs."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else get_settings().log_level)


def _fail(exc: LearningPlatformError) -> typer.Exit:
    rprint(f"[red]✗[/red] {exc.message} [dim]({exc.code})[/dim]")
    return typer.Exit(code=1)


# ========================================
# Database Commands
# ========================================

db_app = typer.Typer(help="Database management")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """
    Create all tables defined in src/db/models/ if they don't exist.

    Safe to run multiple times.
    """
    init_db(get_engine())
    rprint("[green]✓[/green] Database initialized!")


# ========================================
# Page Commands
# ========================================

pages_app = typer.Typer(help="Inspect lesson pages")
app.add_typer(pages_app, name="pages")


@pages_app.command("list")
def pages_list(
    lesson_id: int = typer.Argument(..., help="Lesson whose pages to list"),
    limit: int = typer.Option(None, "--limit", "-n", help="Page size (default from settings)"),
    offset: int = typer.Option(0, "--offset", help="Rows to skip"),
) -> None:
    """List the page envelopes of a lesson in id order."""
    repo = PageRepository(get_session_factory())
    try:
        envelopes = repo.list_by_lesson(lesson_id, limit=limit, offset=offset)
    except LearningPlatformError as exc:
        raise _fail(exc) from exc

    if not envelopes:
        rprint(f"[yellow]No pages in lesson {lesson_id}[/yellow]")
        return

    table = Table(title=f"Lesson {lesson_id} pages", show_header=True)
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Created by")
    table.add_column("Last modified by")
    table.add_column("Modified", style="dim")

    for envelope in envelopes:
        table.add_row(
            str(envelope.id),
            envelope.content_type.value,
            envelope.created_by,
            envelope.last_modified_by,
            envelope.modified.isoformat(sep=" ", timespec="seconds"),
        )

    console.print(table)


@pages_app.command("show")
def pages_show(
    page_id: int = typer.Argument(..., help="Page to show"),
    content_type: str = typer.Option(
        ..., "--type", "-t", help="Content type: image, video, document or question"
    ),
) -> None:
    """Show one page with its variant content."""
    repo = PageRepository(get_session_factory())
    try:
        page = repo.get_by_id(page_id, content_type)
    except LearningPlatformError as exc:
        raise _fail(exc) from exc

    table = Table(title=f"{page.content_type.value.title()} page {page.id}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    for name, value in page.model_dump(mode="json", exclude={"content_type"}).items():
        if isinstance(page, QuestionPage) and name.startswith("option_") and not value:
            continue
        table.add_row(name, str(value))

    console.print(table)


# ========================================
# Attempt Commands
# ========================================

attempts_app = typer.Typer(help="Lesson attempts")
app.add_typer(attempts_app, name="attempts")


@attempts_app.command("start")
def attempts_start(
    lesson_id: int = typer.Option(..., "--lesson", help="Lesson to attempt"),
    plan_id: int = typer.Option(..., "--plan", help="Plan containing the lesson"),
    channel_id: int = typer.Option(..., "--channel", help="Channel containing the plan"),
    user_id: str = typer.Option(..., "--user", help="Learner starting the attempt"),
) -> None:
    """Start a lesson attempt and create one chain per question page."""
    engine = AttemptEngine(get_session_factory())
    try:
        summary = engine.start_attempt(
            {
                "lesson_id": lesson_id,
                "plan_id": plan_id,
                "channel_id": channel_id,
                "user_id": user_id,
            }
        )
    except LearningPlatformError as exc:
        raise _fail(exc) from exc

    rprint(
        f"[green]✓[/green] Lesson attempt [bold]{summary.lesson_attempt_id}[/bold] "
        f"started with {summary.chain_count} question page(s)"
    )
    if summary.page_ids:
        rprint(f"  Pages: {', '.join(str(page_id) for page_id in summary.page_ids)}")


@attempts_app.command("show")
def attempts_show(
    attempt_id: int = typer.Argument(..., help="Lesson attempt to show"),
) -> None:
    """Show a lesson attempt and its attempt chains."""
    repo = AttemptRepository(get_session_factory())
    try:
        attempt = repo.get_lesson_attempt(attempt_id)
        chains = repo.list_attempt_chains(attempt_id)
    except LearningPlatformError as exc:
        raise _fail(exc) from exc

    rprint(
        f"[bold]Lesson attempt {attempt.id}[/bold]: user {attempt.user_id}, "
        f"lesson {attempt.lesson_id} (plan {attempt.plan_id}, channel {attempt.channel_id})"
    )

    table = Table(title="Attempt chains", show_header=True)
    table.add_column("Page attempt", justify="right", style="cyan")
    table.add_column("Question attempt", justify="right")
    table.add_column("Question page attempt", justify="right")
    table.add_column("Type")
    table.add_column("Question page", justify="right", style="green")

    for chain in chains:
        table.add_row(
            str(chain.page_attempt_id),
            str(chain.question_attempt_id),
            str(chain.question_page_attempt_id),
            f"{chain.content_type.value}/{chain.question_type.value}",
            str(chain.page_id),
        )

    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
