import logging
from pathlib import Path
from typing import Optional, Union

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from ..config import load_settings, Settings
from ..domain.errors import GlpkgError
from ..domain.models import PackageStatus, PublishOptions
from ..registry.client import Client
from ..registry.generic_packages import GenericPackagesService
from ..ui.progress import ProgressManager
from .config_commands import app as config_app

app = typer.Typer()
console = Console()
err_console = Console(stderr=True)

app.add_typer(config_app, name="config", help="Manage connection settings")


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO, ours already cover it
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_packages_service(settings: Settings) -> GenericPackagesService:
    client = Client(
        token=settings.token,
        base_url=settings.base_url,
        auth_type=settings.auth_type,
    )
    return GenericPackagesService(client)


def parse_project_arg(project: str) -> Union[int, str]:
    """numeric arguments are project ids, anything else is a namespaced path."""
    if project.isascii() and project.isdigit():
        return int(project)
    return project


@app.callback()
def main_callback(
    ctx: typer.Context,
    url: Optional[str] = typer.Option(None, "--url", help="GitLab api url, e.g. https://gitlab.example.com/api/v4/"),
    token: Optional[str] = typer.Option(None, "--token", help="Access token"),
    auth_type: Optional[str] = typer.Option(None, "--auth-type", help="private_token, job_token or oauth"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests"),
):
    """download and publish files in the GitLab generic package registry."""
    setup_logging(verbose)
    try:
        ctx.obj = load_settings(url=url, token=token, auth_type=auth_type)
    except GlpkgError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


@app.command()
def download(
    ctx: typer.Context,
    project: str = typer.Argument(..., help="Project id or namespaced path"),
    package_name: str = typer.Argument(...),
    package_version: str = typer.Argument(...),
    file_name: str = typer.Argument(...),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Destination file, '-' for stdout"),
):
    """download a package file."""
    service = get_packages_service(ctx.obj)
    progress = ProgressManager(err_console)

    try:
        with progress.spinner(f"Downloading {package_name}/{package_version}/{file_name}"):
            result = service.download_package_file(
                parse_project_arg(project), package_name, package_version, file_name
            )
    except (GlpkgError, httpx.HTTPError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)
    finally:
        service.client.close()

    if output == "-":
        stdout = typer.get_binary_stream("stdout")
        stdout.write(result.content)
        stdout.flush()
        return

    target = Path(output) if output else Path(file_name)
    target.write_bytes(result.content)
    err_console.print(f"[green]✓[/green] Saved {len(result.content)} bytes to [cyan]{target}[/cyan]")


@app.command()
def publish(
    ctx: typer.Context,
    project: str = typer.Argument(..., help="Project id or namespaced path"),
    package_name: str = typer.Argument(...),
    package_version: str = typer.Argument(...),
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="File to upload"),
    file_name: Optional[str] = typer.Option(None, "--file-name", help="Name to store the file under (defaults to the local name)"),
    status: Optional[PackageStatus] = typer.Option(None, "--status", help="Package visibility"),
):
    """upload a file to a project's package registry."""
    service = get_packages_service(ctx.obj)
    progress = ProgressManager(err_console)
    name = file_name or path.name

    try:
        with progress.spinner(f"Publishing {package_name}/{package_version}/{name}"):
            result = service.publish_package_file(
                parse_project_arg(project),
                package_name,
                package_version,
                name,
                open(path, "rb"),
                PublishOptions(status=status),
            )
    except (GlpkgError, httpx.HTTPError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)
    finally:
        service.client.close()

    err_console.print(Panel.fit(
        f"[bold green]Package File Published[/bold green]\n"
        f"Package: {package_name}@{package_version}\n"
        f"File: {name}",
        border_style="green"
    ))
    # the url goes to stdout so scripts can capture it
    console.print(result.download_url, soft_wrap=True, highlight=False)


if __name__ == "__main__":
    app()
