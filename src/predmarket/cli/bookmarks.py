"""Bookmarks subcommand: add, remove, list."""

from __future__ import annotations

import typer

from predmarket.storage.bookmarks import add_bookmark, list_bookmarks, remove_bookmark
from predmarket.storage.db import get_connection, init_schema

app = typer.Typer(help="Local market bookmarks")


@app.command("add")
def add(ctx: typer.Context, market_id: int = typer.Argument(..., help="Market ID")) -> None:
    """Bookmark a market."""
    conn = get_connection(ctx.obj["settings"].db_path)
    init_schema(conn)
    try:
        add_bookmark(conn, market_id)
        typer.echo(f"Bookmarked market #{market_id}")
    finally:
        conn.close()


@app.command("remove")
def remove(ctx: typer.Context, market_id: int = typer.Argument(..., help="Market ID")) -> None:
    """Remove a bookmark."""
    conn = get_connection(ctx.obj["settings"].db_path)
    init_schema(conn)
    try:
        if not remove_bookmark(conn, market_id):
            typer.echo(f"Market #{market_id} is not bookmarked")
            raise typer.Exit(1)
        typer.echo(f"Removed bookmark for market #{market_id}")
    finally:
        conn.close()


@app.command("list")
def list_(ctx: typer.Context) -> None:
    """List bookmarked market IDs."""
    conn = get_connection(ctx.obj["settings"].db_path)
    init_schema(conn)
    try:
        ids = list_bookmarks(conn)
        for market_id in ids:
            typer.echo(f"  #{market_id}")
        typer.echo(f"Total: {len(ids)} bookmarks")
    finally:
        conn.close()
