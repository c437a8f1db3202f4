"""Commands that read and patch a project.ts manifest in place."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from subql_migrate.errors import MigrationError
from subql_migrate.manifest.patterns import DEFAULT_FIELD_PATTERNS
from subql_migrate.manifest.ts_manifest import (
    add_datasource as _add_datasource,
)
from subql_migrate.manifest.ts_manifest import (
    extract_chain_id,
    extract_existing_methods,
    extract_fields,
    render_datasource_ts,
    validate_ethereum_ts_manifest,
)

manifest_app = typer.Typer(help="Read and patch project.ts manifests.")
console = Console()


def _read(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        console.print(f"[red]Manifest not found: {path}[/red]")
        raise typer.Exit(1) from e


@manifest_app.command("extract")
def extract(
    path: Annotated[str, typer.Argument(help="Path to project.ts.")],
    field: Annotated[list[str] | None, typer.Option("--field", "-f", help="Field to extract (repeatable).")] = None,
) -> None:
    """Print fields extracted from a project.ts manifest."""
    content = _read(path)
    names = field or ["endpoint", "chainId"]
    unknown = [n for n in names if n not in DEFAULT_FIELD_PATTERNS]
    if unknown:
        console.print(f"[red]Unknown field(s): {', '.join(unknown)}[/red]")
        raise typer.Exit(1)

    try:
        result = extract_fields(content, {n: DEFAULT_FIELD_PATTERNS[n] for n in names})
    except MigrationError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    # chainId is shown unquoted, and bare numeric ids are accepted too
    if "chainId" in result:
        result["chainId"] = extract_chain_id(content)

    table = Table(show_lines=False)
    table.add_column("field")
    table.add_column("value")
    for name, value in result.items():
        table.add_row(name, "" if value is None else str(value))
    console.print(table)


@manifest_app.command("add-datasource")
def add_datasource(
    path: Annotated[str, typer.Argument(help="Path to project.ts.")],
    abi_name: Annotated[str, typer.Option("--abi-name", help="ABI name used in options and assets.")],
    abi_path: Annotated[str, typer.Option("--abi-path", help="ABI file path relative to the project.")],
    start_block: Annotated[int, typer.Option("--start-block", help="Block to start indexing from.")] = 1,
    address: Annotated[str | None, typer.Option(help="Contract address.")] = None,
    event: Annotated[list[str] | None, typer.Option("--event", help="Event signature (repeatable).")] = None,
    function: Annotated[list[str] | None, typer.Option("--function", help="Function signature (repeatable).")] = None,
) -> None:
    """Prepend a new Ethereum datasource to the manifest's dataSources."""
    content = _read(path)
    if not validate_ethereum_ts_manifest(content):
        console.print(f"[red]Not an Ethereum project manifest: {path}[/red]")
        raise typer.Exit(1)

    try:
        existing = extract_fields(content, {"dataSources": None})["dataSources"]
        existing_events, existing_functions = extract_existing_methods(existing, address)
        events = [e for e in event or [] if e not in existing_events]
        functions = [f for f in function or [] if f not in existing_functions]
        if not events and not functions:
            console.print("[yellow]All requested handlers already exist, nothing to add.[/yellow]")
            return
        literal = render_datasource_ts(abi_name, abi_path, start_block, address, events, functions)
        updated = _add_datasource(content, literal)
    except MigrationError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    Path(path).write_text(updated, encoding="utf-8")
    console.print(f"[green]Added[/green] datasource for {abi_name} to {path}")
