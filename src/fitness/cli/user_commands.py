"""Inspect canonical user records."""

import typer
from rich.table import Table

from .utils import console

users_app = typer.Typer(help="Inspect canonical user records")


@users_app.command("show")
def show_user(
    external_id: str = typer.Argument(..., help="External id asserted by the identity provider"),
) -> None:
    """Show the canonical record bound to an external id."""
    from src.fitness.core.services import DbSessionService
    from src.fitness.entities.core.user import UserRepository

    database = DbSessionService()
    with database.session_scope() as session:
        record = UserRepository(session).find_by_external_id(external_id)

    if record is None:
        console.print(f"[yellow]No record bound to external id '{external_id}'[/yellow]")
        raise typer.Exit(code=1)

    table = Table(title=f"User record for '{external_id}'")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Internal ID", record.id)
    table.add_row("External ID", record.external_id or "")
    table.add_row("Email", record.email or "")
    table.add_row("Given name", record.given_name or "")
    table.add_row("Family name", record.family_name or "")
    table.add_row("Role", str(record.role))
    table.add_row("Local credential", "yes" if record.credential_hash else "no")
    table.add_row("Created", record.created_at.isoformat())
    table.add_row("Modified", record.updated_at.isoformat())

    console.print(table)
