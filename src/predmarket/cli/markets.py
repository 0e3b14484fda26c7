"""Markets subcommand: list, show, resolvable, create, bet, resolve, claim, claim-all."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation

import typer

from predmarket.cli.common import echo_tx, run_with_session
from predmarket.models.market import Market, ViewerStakes, stake_of
from predmarket.query.display import format_amount, format_percent, format_time_remaining
from predmarket.query.engine import MarketQuery, SortMode, StatusFilter, market_status, outcome_probabilities
from predmarket.session.state import MarketSession
from predmarket.storage.bookmarks import list_bookmarks
from predmarket.storage.db import get_connection, init_schema

app = typer.Typer(help="Browse and trade on markets")


def _echo_market(market: Market, stakes: ViewerStakes, now: int, detail: bool = False) -> None:
    status = market_status(market, now).value
    typer.echo(
        f"  #{market.market_id:<4} [{status:<8}] {format_amount(market.total_staked):>12} ETH  "
        f"{format_time_remaining(market.deadline, now):>8}  {market.question[:60]}"
    )
    if not detail:
        return
    typer.echo(f"         owner: {market.owner}")
    typer.echo(f"         deadline: {datetime.fromtimestamp(market.deadline).isoformat(sep=' ')}")
    probabilities = outcome_probabilities(market)
    for idx, label in enumerate(market.outcomes):
        mark = "*" if market.resolved and idx == market.winning_outcome else " "
        line = (
            f"       {mark}{idx}. {label}  {format_amount(market.outcome_stakes[idx])} ETH "
            f"({format_percent(probabilities[idx])}%)"
        )
        if market.market_id in stakes:
            line += f"  you: {format_amount(stake_of(stakes, market.market_id, idx))}"
        typer.echo(line)


def _parse_amount(amount: str) -> Decimal:
    try:
        return Decimal(amount)
    except InvalidOperation:
        typer.echo(f"Invalid amount: {amount}", err=True)
        raise typer.Exit(1)


@app.command("list")
def list_markets(
    ctx: typer.Context,
    search: str = typer.Option("", "--search", "-s", help="Substring of question or outcome"),
    status: StatusFilter = typer.Option(StatusFilter.ALL, "--status", help="Status filter"),
    sort: SortMode = typer.Option(SortMode.NEWEST, "--sort", help="Sort order"),
    my_bets: bool = typer.Option(False, "--my-bets", help="Only markets you have staked in"),
    bookmarked: bool = typer.Option(False, "--bookmarked", help="Only bookmarked markets"),
) -> None:
    """List markets from a fresh snapshot."""
    bookmarks: list[int] = []
    if bookmarked:
        conn = get_connection(ctx.obj["settings"].db_path)
        init_schema(conn)
        try:
            bookmarks = list_bookmarks(conn)
        finally:
            conn.close()
    query = MarketQuery(search=search, status=status, sort=sort, my_bets=my_bets, bookmarked_only=bookmarked)

    async def action(session: MarketSession) -> None:
        now = session.now()
        markets = session.view(query, bookmarks=bookmarks, now=now)
        for m in markets:
            _echo_market(m, session.snapshot.viewer_stakes, now)
        typer.echo(f"Total: {len(markets)} markets")
        if session.snapshot.skipped:
            typer.echo(f"Unreadable market ids: {session.snapshot.skipped}")

    run_with_session(ctx, action)


@app.command("show")
def show(ctx: typer.Context, market_id: int = typer.Argument(..., help="Market ID")) -> None:
    """Show one market with outcome stakes and probabilities."""

    async def action(session: MarketSession) -> None:
        _echo_market(session.market(market_id), session.snapshot.viewer_stakes, session.now(), detail=True)

    run_with_session(ctx, action)


@app.command("resolvable")
def resolvable(ctx: typer.Context) -> None:
    """List your markets that are past their deadline and awaiting resolution."""

    async def action(session: MarketSession) -> None:
        now = session.now()
        markets = session.resolvable(now)
        if not markets:
            typer.echo("No markets available to resolve. You need to own a market that has passed its deadline.")
            return
        for m in markets:
            _echo_market(m, session.snapshot.viewer_stakes, now, detail=True)

    run_with_session(ctx, action)


@app.command("create")
def create(
    ctx: typer.Context,
    question: str = typer.Option(..., "--question", "-q", help="Market question"),
    outcome: list[str] = typer.Option(..., "--outcome", "-o", help="Outcome label (repeat, at least 2)"),
    deadline: datetime = typer.Option(
        ...,
        "--deadline",
        "-d",
        formats=["%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M"],
        help="End time (local), e.g. 2026-12-31T18:00",
    ),
) -> None:
    """Create a new market."""
    deadline_ts = int(deadline.timestamp())

    async def action(session: MarketSession) -> None:
        handle = await session.create_market(question, outcome, deadline_ts)
        created = f" (market #{handle.created_market_id})" if handle.created_market_id is not None else ""
        echo_tx(ctx, handle, f"Market created successfully!{created}")

    run_with_session(ctx, action)


@app.command("bet")
def bet(
    ctx: typer.Context,
    market_id: int = typer.Argument(..., help="Market ID"),
    outcome: int = typer.Option(..., "--outcome", "-o", help="Outcome index"),
    amount: str = typer.Option(..., "--amount", help="Stake in ETH, e.g. 0.1"),
) -> None:
    """Place a bet on an outcome."""
    value = _parse_amount(amount)

    async def action(session: MarketSession) -> None:
        handle = await session.place_bet(market_id, outcome, value)
        echo_tx(ctx, handle, "Bet placed successfully!")

    run_with_session(ctx, action)


@app.command("resolve")
def resolve(
    ctx: typer.Context,
    market_id: int = typer.Argument(..., help="Market ID"),
    outcome: int = typer.Option(..., "--outcome", "-o", help="Winning outcome index"),
) -> None:
    """Resolve one of your expired markets."""

    async def action(session: MarketSession) -> None:
        handle = await session.resolve_market(market_id, outcome)
        echo_tx(ctx, handle, "Market resolved successfully!")

    run_with_session(ctx, action)


@app.command("claim")
def claim(ctx: typer.Context, market_id: int = typer.Argument(..., help="Market ID")) -> None:
    """Claim winnings from a resolved market."""

    async def action(session: MarketSession) -> None:
        handle = await session.claim(market_id)
        echo_tx(ctx, handle, "Winnings claimed successfully!")

    run_with_session(ctx, action)


@app.command("claim-all")
def claim_all(ctx: typer.Context) -> None:
    """Claim every market where you hold a winning stake."""

    async def action(session: MarketSession) -> None:
        result = await session.claim_all()
        for market_id, error in result.failed.items():
            typer.echo(f"  #{market_id}: {error}", err=True)
        typer.echo(f"Claimed {len(result.succeeded)} of {result.attempted} markets.")

    run_with_session(ctx, action)
