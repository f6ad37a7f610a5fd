"""Commands that run or prepare the services."""

from enum import StrEnum

import typer
from rich.panel import Panel

from .utils import console


class Service(StrEnum):
    users = "users"
    gateway = "gateway"
    activities = "activities"


SERVICE_APPS = {
    Service.users: ("src.fitness.api.http.app:app", 8081),
    Service.gateway: ("src.fitness.api.http.gateway_app:app", 8080),
    Service.activities: ("src.fitness.api.http.activity_app:app", 8082),
}


def serve(
    service: Service = typer.Argument(..., help="Which service to run"),
    host: str = typer.Option("0.0.0.0", help="Host to bind the server to"),
    port: int | None = typer.Option(None, help="Port to bind (defaults per service)"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
    log_level: str = typer.Option(
        "info", help="Log level (debug, info, warning, error, critical)"
    ),
) -> None:
    """
    Start one of the fitness services with uvicorn.

    The gateway listens on 8080, the user-record service on 8081 and the
    activity service on 8082 unless --port is given.
    """
    import uvicorn

    target, default_port = SERVICE_APPS[service]
    bind_port = port or default_port

    console.print(
        Panel.fit(
            f"[bold green]Starting {service.value} service[/bold green]",
            border_style="green",
        )
    )
    console.print(f"[blue]Application:[/blue] {target}")
    console.print(f"[blue]Listening on:[/blue] http://{host}:{bind_port}")
    console.print("[dim]Press Ctrl+C to stop the server[/dim]")

    try:
        uvicorn.run(
            target,
            host=host,
            port=bind_port,
            reload=reload,
            reload_dirs=["src"] if reload else None,
            log_level=log_level,
            access_log=False,
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped by user[/yellow]")


def init_db() -> None:
    """Create the user record and activity tables in the configured database."""
    from src.fitness.core.services import DbSessionService
    from src.fitness.runtime.context import get_config

    config = get_config()
    try:
        DbSessionService().create_all()
    except Exception as e:
        console.print(f"[red]Failed to initialize database: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"[green]Database ready at {config.database.url}[/green]")
