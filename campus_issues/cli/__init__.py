"""
Command Line Interface for Campus Issues.
"""

from typing import Optional

import typer
import uvicorn
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..auth import principal_from_user
from ..config import get_settings
from ..db.base import get_session_local, init_database
from ..enums import Department, Role
from ..errors import CampusIssuesError
from ..issues.services import IssueService
from ..triage import triage as run_triage
from ..users.schemas import UserCreate
from ..users.services import UserService

app = typer.Typer(help="Campus Issues - disruption reporting and triage")
console = Console()


@app.command()
def serve(
    port: Optional[int] = typer.Option(None, help="Port to run the API server on"),
    host: Optional[str] = typer.Option(None, help="Host to bind the server to"),
    dev: bool = typer.Option(False, help="Run in development mode with reload"),
):
    """Start the API server."""
    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    rprint(Panel.fit("Starting Campus Issues API", style="bold blue"))
    console.print(f"Listening on http://{host}:{port}")
    uvicorn.run(
        "campus_issues.main:app",
        host=host,
        port=port,
        reload=dev,
        workers=1 if dev else settings.api_workers,
    )


@app.command("init-db")
def init_db():
    """Create all database tables."""
    init_database()
    console.print("[green]Database initialized[/green]")


@app.command("create-user")
def create_user(
    name: str = typer.Argument(..., help="Display name"),
    email: str = typer.Argument(..., help="Unique email address"),
    role: Role = typer.Option(Role.STUDENT, help="student, staff or admin"),
    department: Optional[Department] = typer.Option(
        None, help="Owning department (required for staff)"
    ),
):
    """Register a user and print the id clients send as their principal."""
    try:
        user_create = UserCreate(name=name, email=email, role=role, department=department)
    except ValueError as e:
        console.print(f"[red]Invalid user:[/red] {e}")
        raise typer.Exit(code=1)

    db = get_session_local()()
    try:
        user = UserService(db).create(user_create)
    except CampusIssuesError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(code=1)
    finally:
        db.close()

    console.print(f"Created {user.role} [bold]{user.name}[/bold]: {user.id}")


@app.command()
def triage(
    title: str = typer.Argument(..., help="Issue title"),
    description: str = typer.Argument("", help="Issue description"),
):
    """Show how a report would be categorized, prioritized and routed."""
    result = run_triage(title, description)

    table = Table(title="Triage", show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Category", result.category.value)
    table.add_row("Priority", result.priority.value)
    table.add_row("Department", result.department.value)
    console.print(table)


@app.command()
def stats(
    user_id: str = typer.Argument(..., help="Show counts as this user would see them"),
):
    """Show dashboard statistics."""
    db = get_session_local()()
    try:
        user = UserService(db).get(user_id)
        if user is None:
            console.print(f"[red]Unknown user:[/red] {user_id}")
            raise typer.Exit(code=1)
        dashboard = IssueService(db).stats(principal_from_user(user))
    finally:
        db.close()

    table = Table(title="Issue Statistics", show_header=True, header_style="bold magenta")
    table.add_column("Scope", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Pending", justify="right")
    table.add_column("In Progress", justify="right")
    table.add_column("Resolved", justify="right")
    table.add_row(
        "All visible",
        str(dashboard.total_issues),
        str(dashboard.pending_issues),
        str(dashboard.in_progress_issues),
        str(dashboard.resolved_issues),
    )
    for row in dashboard.department_stats:
        table.add_row(
            row.department.value if row.department else "unassigned",
            str(row.total),
            str(row.pending),
            str(row.in_progress),
            str(row.resolved),
        )
    console.print(table)


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
