import typer
from rich.console import Console
from rich.table import Table

from ..config import (
    AUTH_TYPE_KEY,
    CONFIG_FILE,
    TOKEN_KEY,
    URL_KEY,
    load_settings,
    parse_auth_type,
    set_setting,
)
from ..domain.errors import ConfigError

app = typer.Typer()
console = Console()


def _mask(token: str) -> str:
    if len(token) <= 4:
        return "****"
    return "*" * (len(token) - 4) + token[-4:]


@app.command("show")
def show_config():
    """show the settings that will be used for requests."""
    try:
        settings = load_settings()
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("URL", settings.base_url)
    table.add_row("Token", _mask(settings.token) if settings.token else "[dim](none)[/dim]")
    table.add_row("Auth type", settings.auth_type.value)
    table.add_row("Config file", str(CONFIG_FILE))
    console.print(table)


@app.command("set-url")
def set_url(url: str):
    """set the GitLab api url."""
    try:
        set_setting(URL_KEY, url)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] URL set to [cyan]{url}[/cyan]")


@app.command("set-token")
def set_token(
    token: str,
    auth_type: str = typer.Option("private_token", "--auth-type", help="private_token, job_token or oauth"),
):
    """store an access token."""
    try:
        parsed = parse_auth_type(auth_type)
        set_setting(TOKEN_KEY, token)
        set_setting(AUTH_TYPE_KEY, parsed.value)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Token saved ({parsed.value})")


if __name__ == "__main__":
    app()
