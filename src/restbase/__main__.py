"""
Command-line interface for restbase.

This module provides the main entry point for the ``restbase`` command.
"""
import json
import sys
from typing import Optional

import typer
import yaml
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from restbase.api.registry import load_registry
from restbase.config import get_config, load_config, save_config
from restbase.server import start_server
from restbase.storage import create_all, get_engine
from restbase.utils.errors import RestBaseError
from restbase.utils.logging import console, logger, print_table
from restbase.version import get_version_info

# Create the Typer app
app = typer.Typer(
    name="restbase",
    help="restbase - RESTful JSON resource APIs over SQLAlchemy models",
    add_completion=False,
)

# Create sub-commands
server_app = typer.Typer(help="Server management commands")
config_app = typer.Typer(help="Configuration management commands")
db_app = typer.Typer(help="Database commands")

app.add_typer(server_app, name="server")
app.add_typer(config_app, name="config")
app.add_typer(db_app, name="db")


@app.callback()
def callback(
    ctx: typer.Context,
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path to configuration file"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output"
    ),
):
    """restbase command-line interface."""
    try:
        config = load_config(config_file)
    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
    except RestBaseError as e:
        print(f"ERROR: Failed to load configuration: {e}", file=sys.stderr)
        sys.exit(1)

    final_log_level = "DEBUG" if verbose else config.server.log_level.upper()
    if verbose:
        logger.set_level("debug")
    ctx.meta["final_log_level"] = final_log_level


@app.command()
def version():
    """Show version information."""
    info = get_version_info()

    title = Text()
    title.append("🚀 ", style="bright_blue")
    title.append("restbase", style="bold bright_blue")

    version_table = Table(box=None, show_header=False, padding=(0, 2))
    version_table.add_column("Key", style="bright_black")
    version_table.add_column("Value", style="bright_blue")

    version_table.add_row("Version", info["package_version"])
    version_table.add_row("API Version", info["api_version"])
    version_table.add_row("Min Python Version", info["minimum_python_version"])

    console.print(Panel(version_table, title=title, border_style="bright_blue", padding=(1, 2)))


@app.command()
def routes(
    target: Optional[str] = typer.Argument(
        None, help="Registry as 'module:attribute' (defaults to api.registry)"
    ),
):
    """List the routes served for each registered resource."""
    target = target or get_config().api.registry
    if not target:
        logger.error("No registry given and api.registry is not configured", component="registry")
        sys.exit(1)

    try:
        registry = load_registry(target)
    except RestBaseError as e:
        logger.error(f"Failed to load registry: {e}", component="registry", exception=e)
        sys.exit(1)

    prefix = get_config().api.prefix
    rows = []
    for summary in registry.describe():
        summary["index"] = f"GET {prefix}/{summary['name']}"
        summary["show"] = f"GET {prefix}/{summary['name']}/{{ids}}"
        rows.append(summary)

    if not rows:
        console.print("[muted]No resources registered[/muted]")
        return

    print_table(
        rows,
        title="Resources",
        columns=["name", "model", "transformer", "index", "show", "search_columns"],
    )


# Server commands

@server_app.command("start")
def server_start(
    ctx: typer.Context,
    registry: Optional[str] = typer.Option(
        None, "--registry", "-r", help="Registry to serve as 'module:attribute'"
    ),
    host: str = typer.Option(
        None, "--host", "-h", help="Host to bind to"
    ),
    port: int = typer.Option(
        None, "--port", "-p", help="Port to bind to"
    ),
    workers: int = typer.Option(
        None, "--workers", "-w", help="Number of worker processes"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Logging level (overrides default/verbose)"
    ),
    reload: bool = typer.Option(
        False, "--reload", help="Enable auto-reload (development)"
    ),
):
    """Start the restbase server."""
    level_from_callback = ctx.meta.get("final_log_level", "INFO")
    effective_log_level = (log_level or level_from_callback).upper()

    try:
        start_server(
            host=host,
            port=port,
            workers=workers,
            log_level=effective_log_level,
            registry=registry,
            reload=reload,
        )
    except Exception as e:
        logger.error(f"Failed to start server: {e}", component="server", exception=e)
        sys.exit(1)


# Configuration commands

@config_app.command("show")
def config_show(
    format: str = typer.Option(
        "table", "--format", "-f", help="Output format (table, json, yaml)"
    ),
):
    """Show the current configuration."""
    config_dict = get_config().model_dump()

    if format.lower() == "json":
        console.print_json(json.dumps(config_dict, indent=2))
        return
    if format.lower() == "yaml":
        console.print(yaml.dump(config_dict, default_flow_style=False))
        return

    def create_section_table(section_name, section_data):
        table = Table(title=f"{section_name.title()} Configuration")
        table.add_column("Setting", style="bright_blue")
        table.add_column("Value", style="")

        for key, value in section_data.items():
            if isinstance(value, dict):
                continue
            table.add_row(key, str(value))

        return table

    for section, data in config_dict.items():
        if isinstance(data, dict) and data:
            console.print(create_section_table(section, data))


@config_app.command("save")
def config_save(
    path: str = typer.Argument(..., help="Path to save configuration to"),
):
    """Save the current configuration to a file."""
    try:
        save_config(path)
    except (OSError, RestBaseError) as e:
        logger.error(f"Failed to save configuration: {e}", component="config", exception=e)
        sys.exit(1)


# Database commands

@db_app.command("init")
def db_init(
    target: Optional[str] = typer.Argument(
        None, help="Registry as 'module:attribute' whose models are created"
    ),
):
    """Create the tables of every model declared on the restbase Base."""
    config = get_config()
    target = target or config.api.registry
    try:
        if target:
            # Importing the registry imports its models
            load_registry(target)
        engine = get_engine(config.database.url, config.database.echo)
        with logger.time_operation("create_all", component="storage", level="info"):
            create_all(engine)
    except RestBaseError as e:
        logger.error(f"Failed to initialize database: {e}", component="storage", exception=e)
        sys.exit(1)

    logger.info(f"Database initialized at {config.database.url}", component="storage")


# Main entry point
def main():
    """Main entry point for the CLI."""
    try:
        app()
    except Exception as e:
        logger.error(f"Unhandled exception: {e}", exception=e)
        sys.exit(1)


if __name__ == "__main__":
    main()
