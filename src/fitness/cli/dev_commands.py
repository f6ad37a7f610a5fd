"""Development helpers."""

import typer
from rich.panel import Panel

from .utils import console

dev_app = typer.Typer(help="Development helpers")


@dev_app.command(name="mint-token")
def mint_token(
    subject: str = typer.Option(..., "--sub", "-s", help="External id (sub claim)"),
    email: str | None = typer.Option(None, "--email", "-e", help="email claim"),
    given_name: str | None = typer.Option(None, "--given-name", help="given_name claim"),
    family_name: str | None = typer.Option(None, "--family-name", help="family_name claim"),
    expires_in: int = typer.Option(3600, help="Lifetime in seconds"),
) -> None:
    """
    Sign an HS256 token for the development issuer.

    Only non-production gateways accept these tokens; they are verified with
    the configured shared secret instead of a provider JWKS.
    """
    from src.fitness.core.services import JwtGeneratorService

    claims = {
        "email": email,
        "given_name": given_name,
        "family_name": family_name,
    }
    try:
        token = JwtGeneratorService().generate_jwt(
            subject,
            claims={k: v for k, v in claims.items() if v is not None},
            expires_in_seconds=expires_in,
        )
    except ValueError as e:
        console.print(f"[red]Failed to mint token: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(Panel.fit(f"Bearer token for [bold]{subject}[/bold]", border_style="green"))
    # Plain echo keeps the token on one copyable line
    typer.echo(token)
