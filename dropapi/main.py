"""Command-line interface for dropapi."""

from collections.abc import Callable
from pathlib import Path
from typing import NoReturn, TypeVar

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

from dropapi import __version__
from dropapi.config import ClientConfig, Config
from dropapi.droplets import DropletsService
from dropapi.errors import DigitalOceanAPIError
from dropapi.identifiers import DropletCreateImage, DropletCreateSSHKey
from dropapi.log import setup_logging
from dropapi.models import DropletCreateRequest
from dropapi.transport import Client, ListOptions, Response
from dropapi.ui import (
    display_actions,
    display_droplet,
    display_droplets,
    display_images,
    display_kernels,
    display_pagination,
)
from dropapi.userdata import render_user_data, ssh_key_from_file

app = typer.Typer(
    name="dropapi",
    help="Inspect and manage DigitalOcean droplets",
)
console = Console()

T = TypeVar("T")

PAGE_OPTION = typer.Option(None, "--page", "-p", min=1, help="Page number to fetch")
PER_PAGE_OPTION = typer.Option(None, "--per-page", min=1, max=200, help="Items per page")
ALL_OPTION = typer.Option(False, "--all", "-a", help="Follow pagination and fetch every page")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log API requests"),
):
    """Run before any command - configures logging."""
    setup_logging(verbose)


# Helper functions


def load_config_and_service() -> tuple[ClientConfig, DropletsService]:
    """
    Load configuration and create the droplets service.

    Returns:
        Tuple of (client settings, DropletsService instance)

    Raises:
        typer.Exit: If config doesn't exist or fails to load
    """
    config_manager = Config()
    try:
        config_manager.load()
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        console.print(
            "[yellow]Config file may be invalid. Try running[/yellow] "
            "[cyan]dropapi init --force[/cyan]"
        )
        raise typer.Exit(1)

    config = config_manager.config
    client = Client(
        config.digitalocean.token,
        base_url=config.digitalocean.api_base,
        timeout=config.client.timeout,
    )
    return config.client, DropletsService(client)


def fetch_listing(
    fetch: Callable[[ListOptions], tuple[list[T], Response]],
    settings: ClientConfig,
    page: int | None,
    per_page: int | None,
    all_pages: bool,
) -> tuple[list[T], Response | None]:
    """
    Fetch one page of a listing, or every page with ``all_pages``.

    Returns:
        Tuple of (items, response of the single page fetched, or None when
        all pages were followed)
    """
    opt = ListOptions(page=page, per_page=per_page or settings.per_page)
    if all_pages:
        items = list(DropletsService.iter_all(fetch, opt, max_pages=settings.max_pages))
        return items, None
    return fetch(opt)


def handle_api_error(e: DigitalOceanAPIError, droplet_id: int | None = None) -> NoReturn:
    """Print an API error and exit. A 404 on a droplet ID is reported as a missing droplet."""
    if e.status_code == 404 and droplet_id is not None:
        console.print(f"[red]Error: Droplet {droplet_id} not found[/red]")
    else:
        console.print(f"[red]Error: {e}[/red]")
    raise typer.Exit(1)


# Commands


@app.command()
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing configuration"),
) -> None:
    """
    Initialize dropapi configuration.

    Prompts for a DigitalOcean API token and stores it in
    ~/.config/dropapi/config.yaml (mode 0600).
    """
    if Config.exists() and not force:
        console.print(
            f"[yellow]Configuration already exists at[/yellow] [cyan]{Config.CONFIG_FILE}[/cyan]"
        )
        console.print("[yellow]Use[/yellow] [cyan]--force[/cyan] [yellow]to overwrite[/yellow]")
        raise typer.Exit(1)

    console.print(Panel.fit("[bold cyan]dropapi initialization[/bold cyan]", border_style="cyan"))
    console.print("Get your token from: https://cloud.digitalocean.com/account/api/tokens")
    token = Prompt.ask("[cyan]Enter your DO API token[/cyan]", password=True)

    config_manager = Config()
    try:
        config_manager.create_default_config(token=token)
    except ValidationError:
        console.print("[red]Error: API token is required[/red]")
        raise typer.Exit(1)

    config_manager.save()
    console.print(f"[green]✓[/green] Saved configuration to [cyan]{Config.CONFIG_FILE}[/cyan]")


@app.command(name="list")
@app.command(name="ls", hidden=True)
def list_droplets(
    tag: str | None = typer.Option(None, "--tag", "-t", help="Only droplets with this tag"),
    page: int | None = PAGE_OPTION,
    per_page: int | None = PER_PAGE_OPTION,
    all_pages: bool = ALL_OPTION,
):
    """List droplets."""
    settings, service = load_config_and_service()

    def fetch(opt: ListOptions):
        if tag:
            opt = opt.model_copy(update={"extra": {**opt.extra, "tag_name": tag}})
        return service.list(opt)

    try:
        droplets, resp = fetch_listing(fetch, settings, page, per_page, all_pages)
    except DigitalOceanAPIError as e:
        handle_api_error(e)

    if not droplets:
        console.print("[yellow]No droplets found[/yellow]")
        return

    display_droplets(droplets)
    if resp is not None:
        display_pagination(resp)


@app.command()
def get(droplet_id: int = typer.Argument(..., help="Droplet ID")):
    """Show a droplet."""
    _, service = load_config_and_service()
    try:
        droplet, _ = service.get(droplet_id)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except DigitalOceanAPIError as e:
        handle_api_error(e, droplet_id)

    display_droplet(droplet)


@app.command()
def create(
    name: str = typer.Argument(..., help="Droplet name"),
    region: str = typer.Option(..., "--region", "-r", help="Region slug"),
    size: str = typer.Option(..., "--size", "-s", help="Droplet size slug"),
    image: str = typer.Option(..., "--image", "-i", help="Image slug or ID"),
    ssh_keys: list[str] | None = typer.Option(
        None, "--ssh-key", "-k", help="SSH key fingerprint or ID (repeatable)"
    ),
    ssh_key_files: list[Path] | None = typer.Option(
        None, "--ssh-key-file", help="Local public key registered with DigitalOcean (repeatable)"
    ),
    backups: bool = typer.Option(False, "--backups", help="Enable automated backups"),
    ipv6: bool = typer.Option(False, "--ipv6", help="Enable IPv6"),
    private_networking: bool = typer.Option(
        False, "--private-networking", help="Enable private networking"
    ),
    user_data: Path | None = typer.Option(
        None, "--user-data", help="User data template (Jinja2; gets name, region, size)"
    ),
):
    """Create a droplet."""
    _, service = load_config_and_service()

    try:
        keys = [DropletCreateSSHKey.parse(k) for k in ssh_keys or []]
        keys.extend(ssh_key_from_file(str(path)) for path in ssh_key_files or [])
        rendered = ""
        if user_data is not None:
            rendered = render_user_data(str(user_data), name=name, region=region, size=size)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    request = DropletCreateRequest(
        name=name,
        region=region,
        size=size,
        image=DropletCreateImage.parse(image),
        ssh_keys=keys,
        backups=backups,
        ipv6=ipv6,
        private_networking=private_networking,
        user_data=rendered,
    )

    try:
        droplet, _ = service.create(request)
    except DigitalOceanAPIError as e:
        console.print(f"[red]Error creating droplet: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[green]✓[/green] Created droplet [cyan]{droplet.name}[/cyan] (ID: {droplet.id})"
    )
    display_droplet(droplet)


@app.command()
@app.command(name="rm", hidden=True)
def delete(
    droplet_id: int = typer.Argument(..., help="Droplet ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a droplet (DESTRUCTIVE)."""
    _, service = load_config_and_service()

    if not yes:
        confirm = Prompt.ask(
            f"[yellow]Delete droplet {droplet_id}? This cannot be undone[/yellow]",
            choices=["yes", "no"],
            default="no",
        )
        if confirm != "yes":
            console.print("[dim]Cancelled[/dim]")
            raise typer.Exit(0)

    try:
        service.delete(droplet_id)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except DigitalOceanAPIError as e:
        handle_api_error(e, droplet_id)

    console.print(f"[green]✓[/green] Deleted droplet {droplet_id}")


def _sub_resource_listing(operation: str, droplet_id, page, per_page, all_pages):
    settings, service = load_config_and_service()
    fetch_page = getattr(service, operation)
    try:
        return fetch_listing(
            lambda opt: fetch_page(droplet_id, opt), settings, page, per_page, all_pages
        )
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except DigitalOceanAPIError as e:
        handle_api_error(e, droplet_id)


@app.command()
def kernels(
    droplet_id: int = typer.Argument(..., help="Droplet ID"),
    page: int | None = PAGE_OPTION,
    per_page: int | None = PER_PAGE_OPTION,
    all_pages: bool = ALL_OPTION,
):
    """List kernels available to a droplet."""
    items, resp = _sub_resource_listing("kernels", droplet_id, page, per_page, all_pages)
    display_kernels(items)
    if resp is not None:
        display_pagination(resp)


@app.command()
def snapshots(
    droplet_id: int = typer.Argument(..., help="Droplet ID"),
    page: int | None = PAGE_OPTION,
    per_page: int | None = PER_PAGE_OPTION,
    all_pages: bool = ALL_OPTION,
):
    """List snapshots of a droplet."""
    items, resp = _sub_resource_listing("snapshots", droplet_id, page, per_page, all_pages)
    display_images(items, title="Snapshots")
    if resp is not None:
        display_pagination(resp)


@app.command()
def backups(
    droplet_id: int = typer.Argument(..., help="Droplet ID"),
    page: int | None = PAGE_OPTION,
    per_page: int | None = PER_PAGE_OPTION,
    all_pages: bool = ALL_OPTION,
):
    """List backups of a droplet."""
    items, resp = _sub_resource_listing("backups", droplet_id, page, per_page, all_pages)
    display_images(items, title="Backups")
    if resp is not None:
        display_pagination(resp)


@app.command()
def actions(
    droplet_id: int = typer.Argument(..., help="Droplet ID"),
    page: int | None = PAGE_OPTION,
    per_page: int | None = PER_PAGE_OPTION,
    all_pages: bool = ALL_OPTION,
):
    """List actions performed on a droplet."""
    items, resp = _sub_resource_listing("actions", droplet_id, page, per_page, all_pages)
    display_actions(items)
    if resp is not None:
        display_pagination(resp)


@app.command()
def neighbors(droplet_id: int = typer.Argument(..., help="Droplet ID")):
    """List droplets sharing a physical host with a droplet."""
    _, service = load_config_and_service()
    try:
        droplets, _ = service.neighbors(droplet_id)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except DigitalOceanAPIError as e:
        handle_api_error(e, droplet_id)

    if not droplets:
        console.print("[dim]No neighbors[/dim]")
        return
    display_droplets(droplets, title="Neighbors")


@app.command()
def version():
    """Show the dropapi version."""
    console.print(f"dropapi {__version__}")


def main():
    app()


if __name__ == "__main__":
    main()
