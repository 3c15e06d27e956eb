"""
Command-line interface for Panelboard.

This module provides the CLI using Typer for starting the Panelboard server
and managing saved layouts.

Usage:
    panelboard serve --port 8050
    panelboard serve --host 0.0.0.0 --port 8080 --debug
    panelboard export layout.json
    panelboard import layout.json
    panelboard seed --template classic
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from panelboard import __version__

app = typer.Typer(
    name="panelboard",
    help="Personal dashboard of panels and widgets on a placement grid.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"Panelboard version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """Panelboard - Personal dashboard server."""
    pass


def _db_option():
    return typer.Option(
        None,
        "--db",
        "-d",
        help="Path to SQLite database (default: ./panelboard.db or PANELBOARD_DB_PATH).",
    )


def _load_config(db_path: Optional[Path], **overrides):
    from panelboard.config import Config
    from panelboard.db.schema import init_database
    from panelboard.logging_config import setup_logging

    config = Config.from_env(db_path=db_path, **overrides)
    setup_logging(config.log_level, config.log_file)
    init_database(config.db_path).close()
    return config


@app.command()
def serve(
    host: Optional[str] = typer.Option(
        None,
        "--host",
        "-h",
        help="Host address to bind the server (default: 127.0.0.1).",
    ),
    port: Optional[int] = typer.Option(
        None,
        "--port",
        "-p",
        min=1024,
        max=65535,
        help="Port number for the server (default: 8050).",
    ),
    db_path: Optional[Path] = _db_option(),
    rows: Optional[int] = typer.Option(
        None,
        "--rows",
        min=2,
        help="Rows of the widget grid (default: 8).",
    ),
    cols: Optional[int] = typer.Option(
        None,
        "--cols",
        min=2,
        help="Columns of the widget grid (default: 6).",
    ),
    theme: Optional[str] = typer.Option(
        None,
        "--theme",
        help="Color scheme: light or dark.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode with hot reloading.",
    ),
    no_browser: bool = typer.Option(
        False,
        "--no-browser",
        help="Don't automatically open browser.",
    ),
):
    """
    Start the Panelboard server with the web UI and the JSON API.

    Examples:
        panelboard serve
        panelboard serve --port 8080
        panelboard serve --host 0.0.0.0 --port 8080 --debug
    """
    import os

    # In debug mode, Flask's reloader spawns a child process.
    # Only show startup messages in the main process (not the reloader).
    is_reloader = os.environ.get("WERKZEUG_RUN_MAIN") == "true"

    if not is_reloader:
        console.print(Panel.fit(
            f"[bold green]Panelboard[/bold green] v{__version__}\n"
            f"Personal dashboard server",
            border_style="green",
        ))

    try:
        if not is_reloader:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                progress.add_task("Initializing database...", total=None)
                config = _load_config(
                    db_path, host=host, port=port, theme=theme, debug=debug or None,
                    grid_rows=rows, grid_cols=cols,
                )
            console.print(f"\n[dim]Database:[/dim] {config.db_path}")
            console.print(f"[dim]Grid:[/dim] {config.grid_cols} x {config.grid_rows}")
            console.print("[green]Database initialized.[/green]")
        else:
            config = _load_config(
                db_path, host=host, port=port, theme=theme, debug=debug or None,
                grid_rows=rows, grid_cols=cols,
            )

        url = (
            f"http://{config.host}:{config.port}"
            if config.host != "0.0.0.0"
            else f"http://127.0.0.1:{config.port}"
        )
        if not is_reloader:
            console.print(f"\n[bold green]Starting server at {url}[/bold green]")
            console.print(f"[dim]API:[/dim] {url}/api/panels")
            console.print("[dim]Press Ctrl+C to stop.[/dim]\n")

        from panelboard.app import create_app
        dash_app = create_app(config)

        # Auto-open browser after short delay (only on first run, not reloader)
        if not no_browser and not is_reloader:
            import threading
            import webbrowser
            threading.Timer(1.5, lambda: webbrowser.open(url)).start()

        dash_app.run(
            host=config.host,
            port=config.port,
            debug=config.debug,
        )

    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped.[/yellow]")
        raise typer.Exit(0)


@app.command()
def info(
    db_path: Optional[Path] = _db_option(),
):
    """
    Show the saved panels and the grid occupancy without starting the server.
    """
    from panelboard.db.repository import PanelRepository
    from panelboard.exceptions import LayoutStoreError
    from panelboard.layouts.grid import GridPlacementEngine

    config = _load_config(db_path)

    try:
        snapshot = PanelRepository(config.db_path).get_all_panels()
    except LayoutStoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not snapshot:
        console.print(f"[yellow]No panels saved in[/yellow] {config.db_path}")
        console.print("[dim]Run 'panelboard seed' to create the starter layout.[/dim]")
        return

    table = Table(title=f"Panels in {config.db_path.name}", border_style="green")
    table.add_column("Key", style="bold")
    table.add_column("Title")
    table.add_column("Widgets", justify="right")
    table.add_column("Widget titles", style="dim")
    for panel_key, panel in snapshot.items():
        table.add_row(
            panel_key,
            panel.title,
            str(len(panel.widgets)),
            ", ".join(w.title for w in panel.widgets),
        )
    console.print(table)

    engine = GridPlacementEngine(config.grid_rows, config.grid_cols, config.min_widget_span)
    engine.load_snapshot(snapshot)
    occupancy = engine.occupancy()
    lines = [
        " ".join("[green]#[/green]" if filled else "[dim].[/dim]" for filled in row)
        for row in occupancy
    ]
    unplaced = sum(1 for _, w in engine.iter_widgets() if w.position is None)
    console.print(Panel.fit(
        "\n".join(lines)
        + f"\n\n[bold]Filled:[/bold] {int(occupancy.sum())}/{occupancy.size} cells"
        + (f"\n[yellow]Unplaced widgets:[/yellow] {unplaced}" if unplaced else ""),
        title="[bold green]Grid occupancy[/bold green]",
        border_style="green",
    ))


@app.command("export")
def export_layout(
    output: Path = typer.Argument(..., help="JSON file to write."),
    db_path: Optional[Path] = _db_option(),
):
    """
    Export the saved layout to a JSON file.
    """
    from panelboard.db.repository import PanelRepository
    from panelboard.exceptions import LayoutStoreError
    from panelboard.layouts.serializer import save_layout_to_file

    config = _load_config(db_path)

    try:
        snapshot = PanelRepository(config.db_path).get_all_panels()
    except LayoutStoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    save_layout_to_file(snapshot, output)
    n_widgets = sum(len(p.widgets) for p in snapshot.values())
    console.print(
        f"[green]Exported[/green] {len(snapshot)} panels, {n_widgets} widgets to {output}"
    )


@app.command("import")
def import_layout(
    source: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        help="JSON layout file to load.",
    ),
    db_path: Optional[Path] = _db_option(),
):
    """
    Replace the saved layout with the contents of a JSON file.
    """
    import json

    from panelboard.db.repository import PanelRepository
    from panelboard.exceptions import LayoutStoreError, LayoutValidationError
    from panelboard.layouts.serializer import load_layout_from_file

    config = _load_config(db_path)

    try:
        snapshot = load_layout_from_file(source)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] {source} is not valid JSON: {e}")
        raise typer.Exit(1)
    except LayoutValidationError as e:
        console.print(f"[red]Invalid layout:[/red] {e}")
        raise typer.Exit(1)

    try:
        PanelRepository(config.db_path).save_panels(snapshot)
    except LayoutStoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Imported[/green] {len(snapshot)} panels from {source.name}")


@app.command()
def seed(
    template: str = typer.Option(
        "classic",
        "--template",
        "-t",
        help="Starter layout to write (classic or empty).",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite panels that are already saved.",
    ),
    db_path: Optional[Path] = _db_option(),
):
    """
    Write a starter layout into an empty database.
    """
    from panelboard.db.repository import PanelRepository
    from panelboard.exceptions import LayoutStoreError
    from panelboard.layouts.templates import generate_layout_from_template, get_template_layouts

    templates = get_template_layouts()
    if template not in templates:
        console.print(
            f"[red]Unknown template:[/red] {template}. "
            f"Choose from: {', '.join(templates)}"
        )
        raise typer.Exit(1)

    config = _load_config(db_path)
    repo = PanelRepository(config.db_path)

    try:
        if repo.get_all_panels() and not force:
            console.print("[yellow]Panels already saved.[/yellow] Use --force to overwrite them.")
            raise typer.Exit(1)
        repo.save_panels(generate_layout_from_template(template))
    except LayoutStoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Seeded[/green] '{templates[template]['name']}' layout into {config.db_path}")


if __name__ == "__main__":
    app()
