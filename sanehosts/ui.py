"""Rich display components for the CLI: tables, panels and import progress."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

if TYPE_CHECKING:
    from sanehosts.ingest import IngestProgress
    from sanehosts.models import HostComment, HostEntry, Profile
    from sanehosts.presets import Preset, Template

console = Console()
error_console = Console(stderr=True)

ENTRY_PREVIEW_LIMIT = 50


# ---------------------------------------------------------------------------
# Status messages
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    console.print(f"[bold green]✓[/bold green] {message}")


def print_error(message: str) -> None:
    error_console.print(f"[bold red]✗[/bold red] {message}")


def print_warning(message: str) -> None:
    console.print(f"[bold yellow]![/bold yellow] {message}")


def print_info(message: str) -> None:
    console.print(f"[bold blue]i[/bold blue] {message}")


# ---------------------------------------------------------------------------
# Profiles and entries
# ---------------------------------------------------------------------------


def show_profiles(profiles: list[Profile]) -> None:
    """Display all profiles."""
    if not profiles:
        console.print("[dim]No profiles yet. Create one with: sanehosts new <name>[/dim]")
        return

    table = Table(title="Profiles", show_lines=True)
    table.add_column("Name", style="bold cyan", min_width=12)
    table.add_column("Source", style="green")
    table.add_column("Entries", style="white", justify="right")
    table.add_column("Disabled", style="yellow", justify="right")
    table.add_column("Active", style="bold")

    for profile in profiles:
        table.add_row(
            escape(profile.name),
            profile.source.display_name,
            str(len(profile.entries)),
            str(profile.disabled_count),
            "[green]●[/green]" if profile.is_active else "",
        )

    console.print(table)


def show_entries(entries: list[HostEntry], limit: int = ENTRY_PREVIEW_LIMIT) -> None:
    table = Table(show_lines=False)
    table.add_column("#", style="dim", width=6)
    table.add_column("IP", style="cyan")
    table.add_column("Hostnames", style="white")
    table.add_column("Comment", style="dim")

    for i, entry in enumerate(entries[:limit], 1):
        ip = entry.ip_address if entry.is_enabled else f"[dim strike]{entry.ip_address}[/dim strike]"
        table.add_row(str(i), ip, escape(" ".join(entry.hostnames)), escape(entry.comment or ""))

    console.print(table)
    if len(entries) > limit:
        console.print(f"[dim]… and {len(entries) - limit} more[/dim]")


def show_profile_detail(profile: Profile) -> None:
    """Display a single profile in detail."""
    source = profile.source.display_name
    if profile.source.url:
        source += f" ({escape(profile.source.url)})"

    content = (
        f"  Source:   [green]{source}[/green]\n"
        f"  Entries:  [cyan]{len(profile.entries)}[/cyan] "
        f"([green]{profile.enabled_count}[/green] enabled, [yellow]{profile.disabled_count}[/yellow] disabled)\n"
        f"  Modified: [dim]{profile.modified_at:%Y-%m-%d %H:%M}[/dim]"
    )

    panel = Panel(content, title=f"[bold]Profile: {escape(profile.name)}[/bold]", border_style="cyan")
    console.print(panel)
    if profile.entries:
        show_entries(list(profile.entries))


def show_invalid_lines(lines: list[HostComment]) -> None:
    if not lines:
        print_success("No invalid lines.")
        return
    table = Table(title=f"Invalid lines ({len(lines)})")
    table.add_column("Line", style="dim", justify="right")
    table.add_column("Content", style="red")
    for line in lines:
        table.add_row(str(line.line_number or ""), escape(line.text))
    console.print(table)


# ---------------------------------------------------------------------------
# Catalogues
# ---------------------------------------------------------------------------


def show_templates(templates: dict[str, Template]) -> None:
    table = Table(title="Templates", show_lines=True)
    table.add_column("Key", style="bold cyan", min_width=12)
    table.add_column("Name", style="white")
    table.add_column("Description", style="dim")
    table.add_column("Entries", style="yellow", justify="right")
    for key, template in templates.items():
        table.add_row(key, template.name, template.description, str(len(template.mappings)))
    console.print(table)


def show_presets(presets: dict[str, Preset]) -> None:
    """Display built-in blocklist presets."""
    table = Table(title="Blocklist Presets", show_lines=True)
    table.add_column("Key", style="bold cyan", min_width=12)
    table.add_column("Description", style="dim")
    table.add_column("Blocklists", style="white")

    for key, preset in presets.items():
        sources = ", ".join(s.name for s in preset.sources())
        table.add_row(key, preset.description, sources)

    console.print(table)


def show_summary_panel(title: str, lines: list[str], border: str = "cyan") -> None:
    """Show a summary panel with the given lines."""
    content = "\n".join(f"  {line}" for line in lines)
    console.print(Panel(content, title=f"[bold]{title}[/bold]", border_style=border))


# ---------------------------------------------------------------------------
# Import progress
# ---------------------------------------------------------------------------


@contextmanager
def import_progress(label: str) -> Iterator[Callable[[IngestProgress], None]]:
    """Spinner with a live entry count; yields the callback to feed it."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}"),
        TextColumn("[cyan]{task.fields[entries]:,}[/cyan] entries"),
        TextColumn("[dim]{task.fields[lines]:,} lines[/dim]"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(escape(label), total=None, entries=0, lines=0)

        def update(snapshot: IngestProgress) -> None:
            progress.update(task, entries=snapshot.entries_accepted, lines=snapshot.lines_processed)

        yield update
