from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from subql_migrate.errors import MigrationError
from subql_migrate.migrate.project import run_migration
from subql_migrate.migrate.schema import migrate_schema

console = Console()


def migrate(
    subgraph_path: Annotated[str, typer.Argument(help="Subgraph project directory or git link.")],
    subql_dir: Annotated[str, typer.Argument(help="Directory to write the SubQuery project to.")],
) -> None:
    """Migrate a subgraph project to a SubQuery project."""
    try:
        chain_info = run_migration(subgraph_path, subql_dir)
    except (MigrationError, FileNotFoundError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    console.print(
        f"[green]Migrated[/green] {subgraph_path} to {subql_dir} "
        f"(network: {chain_info.network_family}, chain id: {chain_info.chain_id})"
    )


def schema(
    input_path: Annotated[str, typer.Argument(help="Subgraph schema.graphql to read.")],
    output_path: Annotated[str, typer.Argument(help="Path to write the SubQuery schema to.")],
) -> None:
    """Migrate a subgraph GraphQL schema only."""
    try:
        migrate_schema(input_path, output_path)
    except (MigrationError, FileNotFoundError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    console.print(f"[green]Migrated[/green] schema to {output_path}")
