"""Shared CLI helpers - session setup, error reporting, transaction output."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

import typer

from predmarket.errors import PredMarketError
from predmarket.models.transaction import TransactionHandle
from predmarket.query.display import explorer_url
from predmarket.session.state import MarketSession, build_session

T = TypeVar("T")


def run_with_session(ctx: typer.Context, action: Callable[[MarketSession], Awaitable[T]]) -> T:
    """Build a session, load a snapshot, run action. PredMarketError -> message + exit 1."""
    settings = ctx.obj["settings"]

    async def _main() -> T:
        session = build_session(settings, viewer=ctx.obj.get("address"))
        await session.refresh()
        return await action(session)

    try:
        return asyncio.run(_main())
    except PredMarketError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def echo_tx(ctx: typer.Context, handle: TransactionHandle, success: str) -> None:
    """Print transaction outcome; exit 1 if it failed."""
    settings: Any = ctx.obj["settings"]
    if handle.tx_hash:
        typer.echo(f"Transaction: {handle.tx_hash}")
        typer.echo(f"  {explorer_url(settings.explorer_tx_url, handle.tx_hash)}")
    if not handle.ok:
        typer.echo(f"Transaction failed: {handle.error}", err=True)
        raise typer.Exit(1)
    typer.echo(success)
