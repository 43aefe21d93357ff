"""
Localbase - CLI Entry Point.

Usage:
    localbase init                        Create the desktop tables
    localbase query '{"table": ...}'      Run a query payload
    localbase rpc NAME '{"root_id": ...}' Call an RPC function
    localbase tables                      List tables with row counts
    localbase health                      Check configuration
    localbase --help                      Show help
"""

import json
from contextlib import closing
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="localbase",
    help="Localbase - offline SQLite backend for the Supabase query DSL.",
    add_completion=False,
)
console = Console()

DbOption = typer.Option(None, "--db", "-d", help="SQLite file (defaults to LOCALBASE_DB_PATH)")


def _db_path(db: Optional[Path]) -> Path:
    from localbase.config import settings

    return db or settings.localbase_db_path


def _parse_json(text: str, what: str) -> dict:
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        console.print(f"[red]❌ Invalid {what} JSON: {e}[/red]")
        raise typer.Exit(1)
    if not isinstance(value, dict):
        console.print(f"[red]❌ {what} must be a JSON object[/red]")
        raise typer.Exit(1)
    return value


def _print_result(result) -> None:
    # Plain JSON on stdout so the output can be piped
    typer.echo(json.dumps(result.model_dump(), default=str, ensure_ascii=False, indent=2))
    if not result.ok:
        raise typer.Exit(1)


@app.command()
def init(db: Optional[Path] = DbOption) -> None:
    """Create the desktop database tables."""
    from localbase.db import open_connection
    from localbase.schema import create_tables

    path = _db_path(db)
    with closing(open_connection(path)) as connection:
        created = create_tables(connection)

    console.print(f"✅ Initialized {path}")
    for name in created:
        console.print(f"   • {name}")


@app.command()
def query(
    payload: str = typer.Argument(..., help="Query payload as JSON"),
    db: Optional[Path] = DbOption,
) -> None:
    """Run a query payload ({table, method, filters, ...}) and print {data, error}."""
    from localbase.db import open_connection
    from localbase.executor import execute

    request = _parse_json(payload, "payload")
    with closing(open_connection(_db_path(db))) as connection:
        result = execute(connection, request)
    _print_result(result)


@app.command()
def rpc(
    function_name: str = typer.Argument(..., help="RPC function name"),
    params: str = typer.Argument("{}", help="Parameters as JSON"),
    db: Optional[Path] = DbOption,
) -> None:
    """Call an RPC function and print {data, error}."""
    from localbase.db import open_connection
    from localbase.rpc import invoke

    parsed = _parse_json(params, "params")
    with closing(open_connection(_db_path(db))) as connection:
        result = invoke(connection, function_name, parsed)
    _print_result(result)


@app.command()
def tables(db: Optional[Path] = DbOption) -> None:
    """List tables with row counts and their coerced columns."""
    from localbase.db import open_connection
    from localbase.filters import quote_identifier
    from localbase.schema import DEFAULT_SCHEMA

    path = _db_path(db)
    if not Path(path).exists():
        console.print(f"[red]❌ Database not found: {path}[/red]")
        console.print("[dim]Run 'localbase init' first.[/dim]")
        raise typer.Exit(1)

    output = Table(title=str(path))
    output.add_column("Table")
    output.add_column("Rows", justify="right")
    output.add_column("Boolean columns")
    output.add_column("JSON columns")
    output.add_column("updated_at")

    with closing(open_connection(path)) as connection:
        names = [
            row[0]
            for row in connection.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
            )
        ]
        for name in names:
            count = connection.execute(f"SELECT COUNT(*) FROM {quote_identifier(name)}").fetchone()[0]
            meta = DEFAULT_SCHEMA.table(name)
            output.add_row(
                name,
                str(count),
                ", ".join(sorted(meta.boolean_columns)),
                ", ".join(sorted(meta.document_columns)),
                "✓" if meta.tracks_updated_at else "",
            )

    console.print(output)


@app.command()
def health() -> None:
    """Check configuration and database access."""
    from localbase.config import get_settings
    from localbase.db import open_connection

    console.print("\n[bold]Localbase Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("✅ Configuration loaded")
        console.print(f"   Environment: {settings.localbase_env}")
        console.print(f"   Log level: {settings.log_level}")
        console.print(f"   Database: {settings.localbase_db_path}")

        with closing(open_connection(settings.localbase_db_path)) as connection:
            version = connection.execute("SELECT sqlite_version()").fetchone()[0]
        console.print(f"✅ SQLite {version} reachable")

        console.print("\n[green]All checks passed![/green]")

    except Exception as e:
        console.print(f"\n[red]❌ Health check failed: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from localbase import __version__

    console.print(f"Localbase version {__version__}")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
) -> None:
    from localbase.config import configure_logging

    configure_logging(log_level)


if __name__ == "__main__":
    app()
