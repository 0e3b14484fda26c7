"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from predmarket.config import get_settings
from predmarket.config.settings import configure_logging

app = typer.Typer(
    name="predmkt",
    help="PredMarket - browse, bet on, resolve, and claim on-chain prediction markets.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
    address: str | None = typer.Option(
        None, "--address", "-a", help="Viewer address for read-only use (default: signing account)"
    ),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile, "address": address}


# Subcommands registered from other modules
from predmarket.cli import api_cmd, bookmarks, markets, stats, tui_cmd  # noqa: E402

app.add_typer(markets.app, name="markets")
app.add_typer(stats.app, name="stats")
app.add_typer(bookmarks.app, name="bookmarks")
app.add_typer(api_cmd.app, name="api")
app.add_typer(tui_cmd.app, name="tui")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
