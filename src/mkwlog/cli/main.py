import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..catalog import CIRCUITS, is_known_circuit
from ..config import get_data_dir, set_active_profile_id, set_data_dir
from ..domain.errors import FormatError, MkwlogError
from ..ledger.ranking import medal_for, podium
from ..sync.csv_codec import ImportMode, read_csv_file
from ..utils.dates import format_absolute, format_relative
from ..utils.time_format import format_seconds, parse_mask, to_seconds
from .profile_commands import app as profile_app
from .store import get_record_store

app = typer.Typer()
console = Console()

app.add_typer(profile_app, name="profile", help="Manage character/vehicle profiles")


@app.callback()
def main_callback(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")):
    """log personal-best times per circuit and profile."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@app.command()
def add(time: str, circuit: str,
        profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Profile id, defaults to the active one")):
    """record a time. TIME may be typed as digits, e.g. 132456 for 1:32.456."""
    store = get_record_store()
    if ":" not in time:
        time = parse_mask(time)

    if not is_known_circuit(circuit):
        console.print(f"[yellow]Warning:[/yellow] '{circuit}' is not a known circuit")

    try:
        personal_best = store.add_time(time, circuit, profile)
    except MkwlogError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if personal_best:
        console.print(f"[bold green]🏆 New personal best on {circuit}: {time}[/bold green]")
    else:
        best = store.ledger.personal_best(circuit)
        gap = to_seconds(time) - to_seconds(best.time)
        console.print(f"[green]✓[/green] Recorded {time} on {circuit} "
                      f"[dim](+{format_seconds(gap)} to {best.time})[/dim]")


@app.command("list")
def list_times(circuit: Optional[str] = typer.Option(None, "--circuit", "-c"),
               profile: Optional[str] = typer.Option(None, "--profile", "-p")):
    """list recorded times, newest first."""
    store = get_record_store()
    rows = store.ledger.filter(circuit=circuit, profile_id=profile)

    if not rows:
        console.print("[yellow]No times recorded.[/yellow]")
        return

    table = Table(title="Times")
    table.add_column("#", style="dim", justify="right")
    table.add_column("", justify="center")
    table.add_column("Time", style="bold cyan")
    table.add_column("Circuit", style="white")
    table.add_column("Character", style="white")
    table.add_column("Vehicle", style="white")
    table.add_column("Date", style="dim")

    render_date = format_relative if store.relative_dates else format_absolute
    for index, entry in rows:
        owner = store.profile_for(entry)
        table.add_row(
            str(index),
            medal_for(store.rank_of(entry)) or "",
            entry.time,
            entry.circuit,
            entry.display_character(owner),
            entry.display_vehicle(owner),
            render_date(entry.date),
        )

    console.print(table)


@app.command()
def best(podium_only: bool = typer.Option(False, "--podium", help="Show the top three on every circuit")):
    """show the fastest time on every circuit."""
    store = get_record_store()
    circuits = store.ledger.circuits()

    if not circuits:
        console.print("[yellow]No times recorded.[/yellow]")
        return

    table = Table(title="Podiums" if podium_only else "Personal bests")
    table.add_column("Circuit", style="white")
    table.add_column("", justify="center")
    table.add_column("Time", style="bold cyan")
    table.add_column("Character", style="white")
    table.add_column("Vehicle", style="white")

    entries = store.ledger.entries
    for circuit in circuits:
        placed = podium(entries, circuit)
        if not podium_only:
            placed = placed[:1]
        for rank, entry in enumerate(placed, start=1):
            owner = store.profile_for(entry)
            table.add_row(circuit if rank == 1 else "", medal_for(rank) or "", entry.time,
                          entry.display_character(owner), entry.display_vehicle(owner))

    console.print(table)


@app.command()
def edit(index: int, time: str, circuit: str, character: str, vehicle: str):
    """overwrite the time at INDEX (see 'list'). the date and profile are kept."""
    store = get_record_store()

    try:
        store.ledger.edit(index, time, circuit, character, vehicle)
    except MkwlogError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Updated time #{index}")


@app.command()
def delete(index: int):
    """delete the time at INDEX (see 'list')."""
    store = get_record_store()

    try:
        removed = store.ledger.remove(index)
    except MkwlogError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Deleted {removed.time} on {removed.circuit}")


@app.command()
def export(output: Optional[Path] = typer.Argument(None, help="File to write, prints to stdout if omitted")):
    """export all times as CSV."""
    store = get_record_store()
    text = store.export_csv()

    if output is None:
        typer.echo(text)
        return

    try:
        output.write_text(text, encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error writing {output}:[/red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Exported {len(store.ledger)} times to {output}")


@app.command("import")
def import_csv(path: Path,
               mode: Optional[ImportMode] = typer.Option(None, "--mode", "-m", help="Skip the prompt")):
    """import times from a CSV file after confirming replace or append."""
    store = get_record_store()

    try:
        text = asyncio.run(read_csv_file(path))
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error reading {path}:[/red] {e}")
        raise typer.Exit(1)

    try:
        staged = store.stage_import(text)
    except FormatError as e:
        console.print(f"[red]Invalid CSV:[/red] {e}")
        raise typer.Exit(1)

    summary = (
        f"[bold]Ready to import[/bold]\n"
        f"Valid times: {len(staged.entries)}\n"
        f"Skipped rows: {staged.error_count}\n"
        f"New profiles: {len(staged.new_profiles)}\n"
        f"Current times: {len(store.ledger)}"
    )
    console.print(Panel.fit(summary, border_style="blue"))
    for row_error in staged.row_errors[:10]:
        console.print(f"  [dim]{row_error}[/dim]")

    if mode is None:
        from rich.prompt import Prompt

        choice = Prompt.ask(
            "Replace existing times, append to them, or cancel?",
            choices=[m.value for m in ImportMode],
            default=ImportMode.CANCEL.value,
        )
        mode = ImportMode(choice)

    try:
        written = store.commit_import(staged, mode)
    except MkwlogError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if mode == ImportMode.CANCEL:
        console.print("[dim]Import cancelled, nothing changed.[/dim]")
    else:
        console.print(f"[green]✓[/green] Imported {written} times ({mode.value})")


@app.command()
def reset(yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation")):
    """delete every profile, time and preference."""
    if not yes:
        from rich.prompt import Confirm

        if not Confirm.ask("[yellow]Delete all profiles and times?[/yellow]"):
            console.print("[dim]Reset cancelled.[/dim]")
            return

    store = get_record_store()
    try:
        store.reset()
    except MkwlogError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    set_active_profile_id(None)
    console.print("[green]✓[/green] All data cleared")


@app.command()
def mask(digits: str):
    """preview how typed digits are formatted as a time."""
    typer.echo(parse_mask(digits))


@app.command()
def circuits():
    """list known circuits, recently used first."""
    store = get_record_store()
    recent = store.ledger.recent_circuits

    for name in recent:
        console.print(f"[cyan]{name}[/cyan] [dim](recent)[/dim]")
    for name in CIRCUITS:
        if name not in recent:
            console.print(name)


@app.command()
def dates(style: str = typer.Argument(..., help="'relative' or 'absolute'")):
    """choose how dates are shown in 'list'."""
    if style not in ("relative", "absolute"):
        console.print(f"[red]Invalid style '{style}'. Use 'relative' or 'absolute'.[/red]")
        raise typer.Exit(code=1)

    store = get_record_store()
    try:
        store.set_relative_dates(style == "relative")
    except MkwlogError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Dates shown as {style}")


@app.command()
def config(data_dir: Optional[Path] = typer.Option(None, "--data-dir", help="Move storage to this directory")):
    """show or change where records are stored."""
    if data_dir is not None:
        try:
            set_data_dir(data_dir)
        except RuntimeError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(code=1)
    console.print(f"Data directory: [cyan]{get_data_dir()}[/cyan]")


if __name__ == "__main__":
    app()
