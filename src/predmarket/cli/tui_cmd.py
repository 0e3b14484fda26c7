"""TUI dashboard command."""

import typer

from predmarket.errors import PredMarketError
from predmarket.tui.app import run_tui

app = typer.Typer(help="Launch TUI dashboard")


@app.callback(invoke_without_command=True)
def tui(ctx: typer.Context) -> None:
    """Launch the Textual TUI dashboard (markets, countdowns, your stats)."""
    if ctx.invoked_subcommand is not None:
        return
    settings = ctx.obj["settings"]
    try:
        run_tui(settings, viewer=ctx.obj["address"])
    except PredMarketError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
