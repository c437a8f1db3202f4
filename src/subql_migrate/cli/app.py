import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from subql_migrate.cli.manifest import manifest_app
from subql_migrate.cli.migrate import migrate, schema
from subql_migrate.config import get_log_level

app = typer.Typer(
    name="subql-migrate",
    help="Patch SubQuery project manifests and migrate subgraph projects to SubQuery.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def configure(
    log_level: Annotated[
        str | None, typer.Option(help="Log level, defaults to $SUBQL_MIGRATE_LOG_LEVEL or INFO.")
    ] = None,
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=(log_level or get_log_level()).upper(),
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


app.command("migrate")(migrate)
app.command("schema")(schema)
app.add_typer(manifest_app, name="manifest")


def main() -> None:
    app()
