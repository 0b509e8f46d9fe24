"""UI utilities for dropapi - rich tables for API objects."""

from rich.console import Console
from rich.table import Table

from dropapi.models import Action, Droplet, Image, Kernel
from dropapi.transport import Response

console = Console()


def _status_colored(status: str) -> str:
    if status in ("active", "completed", "available"):
        return f"[green]{status}[/green]"
    if status in ("new", "in-progress"):
        return f"[yellow]{status}[/yellow]"
    return f"[red]{status}[/red]"


def display_droplets(droplets: list[Droplet], title: str = "Droplets") -> None:
    """Display droplets in a table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Name", style="white", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("IP Address", style="cyan", no_wrap=True)
    table.add_column("Region", style="white")
    table.add_column("Size", style="white")

    for droplet in droplets:
        region = droplet.region.slug if droplet.region else "N/A"
        table.add_row(
            str(droplet.id),
            droplet.name,
            _status_colored(droplet.status),
            droplet.public_ipv4() or "N/A",
            region,
            droplet.size_slug or "N/A",
        )

    console.print(table)


def display_droplet(droplet: Droplet) -> None:
    """Display a single droplet as a key/value table."""
    info_table = Table(show_header=False, box=None, padding=(0, 2))
    info_table.add_column(style="dim")
    info_table.add_column(style="white")

    info_table.add_row("Name:", droplet.name)
    info_table.add_row("ID:", str(droplet.id))
    info_table.add_row("Status:", _status_colored(droplet.status))
    info_table.add_row("Memory:", f"{droplet.memory} MB")
    info_table.add_row("vCPUs:", str(droplet.vcpus))
    info_table.add_row("Disk:", f"{droplet.disk} GB")
    info_table.add_row("Region:", droplet.region.slug if droplet.region else "N/A")
    info_table.add_row("Image:", droplet.image.name if droplet.image else "N/A")
    info_table.add_row("Size:", droplet.size_slug or "N/A")
    info_table.add_row("IPv4:", droplet.public_ipv4() or "N/A")
    if droplet.public_ipv6():
        info_table.add_row("IPv6:", droplet.public_ipv6())
    info_table.add_row("Locked:", "yes" if droplet.locked else "no")
    info_table.add_row("Created:", droplet.created_at or "N/A")

    console.print(info_table)


def display_kernels(kernels: list[Kernel]) -> None:
    """Display kernels in a table."""
    table = Table(title="Kernels", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Name", style="white")
    table.add_column("Version", style="cyan")

    for kernel in kernels:
        table.add_row(str(kernel.id), kernel.name, kernel.version)

    console.print(table)


def display_images(images: list[Image], title: str) -> None:
    """Display snapshots or backups in a table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Name", style="white")
    table.add_column("Size", style="white", justify="right")
    table.add_column("Regions", style="dim")
    table.add_column("Created", style="dim")

    for image in images:
        table.add_row(
            str(image.id),
            image.name,
            f"{image.size_gigabytes:g} GB",
            ", ".join(image.regions),
            image.created_at,
        )

    console.print(table)


def display_actions(actions: list[Action]) -> None:
    """Display droplet actions in a table."""
    table = Table(title="Actions", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Type", style="white")
    table.add_column("Status", no_wrap=True)
    table.add_column("Started", style="dim")
    table.add_column("Completed", style="dim")

    for action in actions:
        table.add_row(
            str(action.id),
            action.type,
            _status_colored(action.status),
            action.started_at or "",
            action.completed_at or "",
        )

    console.print(table)


def display_pagination(resp: Response) -> None:
    """Print where this page sits in the collection, if the API said."""
    links = resp.links
    if links is None or links.pages is None:
        return
    page = links.current_page()
    if links.is_last_page():
        console.print(f"[dim]Page {page} (last)[/dim]")
    else:
        console.print(f"[dim]Page {page}, next: --page {links.next_page() or page + 1}[/dim]")
