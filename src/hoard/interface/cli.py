"""
Hoard CLI - Command-line administration of a Hoard database.

Commands:
- hoard info → Show database location and row counts
- hoard namespaces → List namespaces holding keyed data
- hoard identities NAMESPACE → List identities with data in a namespace
- hoard view NAMESPACE IDENTITY → Show every stored value for an identity
- hoard delete NAMESPACE IDENTITY [--key KEY] → Delete stored values
- hoard objects NAMESPACE → List stored objects
- hoard tags NAMESPACE TARGET → Show tags on a target
- hoard find-tag NAMESPACE NAME [VALUE] → Find targets by tag
- hoard backup → Write a timestamped backup
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from hoard import __version__
from hoard.core.config import Settings, setup_logging
from hoard.engine import StorageEngine
from hoard.storage.schema import TABLES

app = typer.Typer(
    name="hoard",
    help="Hoard - typed key/value, object and tag storage",
    no_args_is_help=True,
)
console = Console()

_overrides: dict[str, object] = {}


@app.callback()
def main(
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", help="Directory holding the database"),
    db: Optional[str] = typer.Option(None, "--db", help="Database file name without .db"),
):
    """Hoard database administration."""
    _overrides.clear()
    if data_dir is not None:
        _overrides["data_dir"] = data_dir
    if db is not None:
        _overrides["db_filename"] = db


@contextmanager
def open_engine() -> Generator[StorageEngine, None, None]:
    """Open an engine on the configured database without the shutdown backup."""
    config = Settings(**_overrides)
    setup_logging(config=config)

    engine = StorageEngine(config)
    if not engine.setup():
        console.print(f"[red]Error: could not open database at {config.db_path}[/red]")
        raise typer.Exit(code=1)
    try:
        yield engine
    finally:
        engine.shutdown(backup=False)


@app.command()
def info():
    """Show database location and row counts."""
    with open_engine() as engine:
        table = Table(title="Tables")
        table.add_column("Table", style="cyan")
        table.add_column("Rows", style="green", justify="right")

        for name in TABLES:
            result = engine.raw_query(f"SELECT COUNT(*) AS count FROM {name}")
            count = result.rows[0]["count"] if result and result.rows else "-"
            table.add_row(name, str(count))

        console.print(Panel(
            f"[bold]Version:[/bold] {__version__}\n"
            f"[bold]Database:[/bold] {engine.connections.db_path}\n"
            f"[bold]Engine:[/bold] SQLite",
            title="Hoard",
        ))
        console.print(table)


@app.command()
def namespaces():
    """List namespaces holding keyed data."""
    with open_engine() as engine:
        names = engine.list_namespaces()

    if not names:
        console.print("[dim]No namespaces found[/dim]")
        return

    for name in names:
        console.print(f"  • {name}")


@app.command()
def identities(
    namespace: str = typer.Argument(..., help="Namespace to list"),
):
    """List identities with data in a namespace."""
    with open_engine() as engine:
        ids = engine.list_identities(namespace)

    if not ids:
        console.print(f"[red]No identities found with data in {namespace}[/red]")
        return

    console.print(f"[bold]Identities with data in {namespace}:[/bold]")
    for identity in ids:
        console.print(f"  • {identity}")


@app.command()
def view(
    namespace: str = typer.Argument(..., help="Namespace of the data"),
    identity: str = typer.Argument(..., help="Identity to show"),
):
    """Show every stored value for an identity."""
    with open_engine() as engine:
        records = engine.keyed.get_records(namespace, identity)
        values = engine.get_all(namespace, identity)

    if not records:
        console.print(f"[red]No data found for {identity} in {namespace}[/red]")
        return

    table = Table(title=f"{namespace} / {identity}")
    table.add_column("Key", style="cyan")
    table.add_column("Type", style="dim")
    table.add_column("Value", style="white")
    table.add_column("Updated", style="green")

    for record in records:
        table.add_row(
            record.key,
            record.value_type.value,
            repr(values.get(record.key)),
            record.updated_at.isoformat(sep=" ") if record.updated_at else "-",
        )

    console.print(table)


@app.command()
def delete(
    namespace: str = typer.Argument(..., help="Namespace of the data"),
    identity: str = typer.Argument(..., help="Identity to delete"),
    key: Optional[str] = typer.Option(None, "--key", "-k", help="Delete only this key"),
):
    """Delete an identity's data, or one key of it."""
    with open_engine() as engine:
        if key:
            result = engine.delete_key(namespace, identity, key)
            target = f"{namespace}/{identity}/{key}"
        else:
            result = engine.delete(namespace, identity)
            target = f"{namespace}/{identity}"

    if not result.success:
        console.print(f"[red]Failed to delete {target}: {result.error}[/red]")
        raise typer.Exit(code=1)

    if result.changed:
        console.print(f"[green]✓ Deleted {result.affected} value(s) for {target}[/green]")
    else:
        console.print(f"[dim]Nothing stored for {target}[/dim]")


@app.command()
def objects(
    namespace: str = typer.Argument(..., help="Namespace of the objects"),
):
    """List stored objects in a namespace."""
    with open_engine() as engine:
        records = [
            engine.get_object_record(namespace, object_id)
            for object_id in engine.list_object_ids(namespace)
        ]

    records = [record for record in records if record is not None]
    if not records:
        console.print(f"[dim]No objects in {namespace}[/dim]")
        return

    table = Table(title=f"Objects in {namespace}")
    table.add_column("ID", style="cyan")
    table.add_column("Format", style="dim")
    table.add_column("Version", style="green", justify="right")
    table.add_column("Size", justify="right")

    for record in records:
        table.add_row(
            record.object_id,
            record.format.value,
            str(record.version),
            f"{len(record.payload)} chars",
        )

    console.print(table)


@app.command()
def tags(
    namespace: str = typer.Argument(..., help="Namespace of the target"),
    target_id: str = typer.Argument(..., help="Target to show tags for"),
):
    """Show tags on a target."""
    with open_engine() as engine:
        tag_map = engine.get_tags(namespace, target_id)

    if not tag_map:
        console.print(f"[dim]No tags on {namespace}/{target_id}[/dim]")
        return

    table = Table(title=f"Tags on {namespace}/{target_id}")
    table.add_column("Tag", style="cyan")
    table.add_column("Value", style="white")
    for name, value in tag_map.items():
        table.add_row(name, value if value is not None else "[dim]-[/dim]")

    console.print(table)


@app.command("find-tag")
def find_tag(
    namespace: str = typer.Argument(..., help="Namespace of the targets"),
    name: str = typer.Argument(..., help="Tag name"),
    value: Optional[str] = typer.Argument(None, help="Tag value (omit for presence-only tags)"),
):
    """Find targets carrying a tag."""
    with open_engine() as engine:
        matches = engine.find_by_tag(namespace, name, value)

    if not matches:
        console.print("[dim]No matching targets[/dim]")
        return

    for target_id in matches:
        console.print(f"  • {target_id}")


@app.command()
def backup():
    """Write a timestamped backup of the database."""
    with open_engine() as engine:
        path = engine.backup()

    if path is None:
        console.print("[red]Error: backup failed[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Backup written to {path}[/green]")


if __name__ == "__main__":
    app()
