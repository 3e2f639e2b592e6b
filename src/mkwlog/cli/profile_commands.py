import typer
from rich.console import Console
from rich.table import Table

from ..config import get_active_profile_id, set_active_profile_id
from ..domain.errors import MkwlogError
from ..utils.dates import format_absolute
from .store import get_record_store

app = typer.Typer()
console = Console()


@app.command("add")
def add_profile(character: str, skin: str, vehicle: str,
                select: bool = typer.Option(True, "--select/--no-select", help="Make it the active profile")):
    """
    create a profile from a character, outfit and vehicle.

    the new profile becomes the active one unless --no-select is given.
    """
    store = get_record_store()

    try:
        profile = store.profiles.create(character, skin, vehicle)
    except MkwlogError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if select or not get_active_profile_id():
        set_active_profile_id(profile.id)
    console.print(f"[green]✓[/green] Profile '{profile.name}' created ([dim]{profile.id}[/dim])")


@app.command("remove")
def remove_profile(profile_id: str):
    """remove a profile. recorded times are kept."""
    store = get_record_store()

    if store.profiles.find(profile_id) is None:
        console.print(f"[red]Error:[/red] Profile '{profile_id}' not found")
        raise typer.Exit(1)

    try:
        store.profiles.delete(profile_id)
    except MkwlogError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if get_active_profile_id() == profile_id:
        set_active_profile_id(None)
    console.print(f"[green]✓[/green] Profile '{profile_id}' removed")


@app.command("list")
def list_profiles():
    """list all profiles."""
    store = get_record_store()
    profiles = store.profiles.profiles
    active = store.profiles.active_id

    if not profiles:
        console.print("[yellow]No profiles found.[/yellow]")
        console.print("\nCreate one with: [cyan]mkwlog profile add <character> <outfit> <vehicle>[/cyan]")
        return

    table = Table(title="Profiles")
    table.add_column("ID", style="dim")
    table.add_column("Character", style="cyan")
    table.add_column("Outfit", style="white")
    table.add_column("Vehicle", style="white")
    table.add_column("Created", style="dim")
    table.add_column("Status", style="green")

    for profile in profiles:
        status = "active" if profile.id == active else ""
        table.add_row(profile.id, profile.character, profile.character_skin,
                      profile.vehicle, format_absolute(profile.created_at), status)

    console.print(table)


@app.command("select")
def select_profile(profile_id: str):
    """make a profile the active one."""
    store = get_record_store()

    try:
        store.profiles.select(profile_id)
    except MkwlogError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    set_active_profile_id(profile_id)
    console.print(f"[green]✓[/green] Switched to profile '{store.profiles.active.name}'")


@app.command("show")
def show_active():
    """show active profile details."""
    store = get_record_store()
    profile = store.profiles.active

    if profile is None:
        console.print("[yellow]No active profile.[/yellow] Select one with: [cyan]mkwlog profile select <id>[/cyan]")
        raise typer.Exit(1)

    count = len(store.ledger.filter(profile_id=profile.id))
    console.print(f"\n[bold]Active Profile:[/bold] [cyan]{profile.name}[/cyan]")
    console.print(f"  Outfit:     {profile.character_skin}")
    console.print(f"  Created:    {format_absolute(profile.created_at)}")
    console.print(f"  Times:      {count}\n")


if __name__ == "__main__":
    app()
