"""Stats command: viewer win rate, earnings, markets created and won."""

from __future__ import annotations

import typer

from predmarket.cli.common import run_with_session
from predmarket.session.state import MarketSession

app = typer.Typer(help="Your prediction statistics")


@app.callback(invoke_without_command=True)
def stats(ctx: typer.Context) -> None:
    """Show win rate, estimated earnings, markets created and won."""
    if ctx.invoked_subcommand is not None:
        return

    async def action(session: MarketSession) -> None:
        result = session.stats()
        if result is None:
            typer.echo("Connect a wallet (signing key) or pass --address to view stats.", err=True)
            raise typer.Exit(1)
        plural = "" if result.total_resolved_bets == 1 else "s"
        typer.echo(f"Viewer: {result.viewer}")
        typer.echo(f"Win rate: {result.win_rate}%  ({result.total_resolved_bets} resolved bet{plural})")
        typer.echo(f"Total earnings: {result.total_earnings} ETH")
        typer.echo(f"Markets created: {result.markets_created}")
        typer.echo(f"Markets won: {result.markets_won}  lost: {result.markets_lost}")

    run_with_session(ctx, action)
