"""Textual TUI dashboard - market table, countdowns, viewer stats."""

from __future__ import annotations

import asyncio
from typing import Any

from textual.app import App, ComposeResult
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Header, Static

from predmarket.query.display import format_amount, format_percent, format_time_remaining
from predmarket.query.engine import market_status, outcome_probabilities
from predmarket.session.state import MarketSession, build_session


class StatsPanel(Static):
    """Viewer stats and snapshot health."""

    status = reactive("Loading...")
    summary = reactive("")

    def render(self) -> str:
        return f"[bold]Status[/] {self.status}  |  {self.summary}"


class MarketTable(DataTable):
    """Markets with status, total stake, leading outcome, and time remaining."""

    def on_mount(self) -> None:
        self._ensure_columns()

    def _ensure_columns(self) -> None:
        if self.columns:
            return
        self.add_column("ID", key="id")
        self.add_column("Status", key="status")
        self.add_column("Staked (ETH)", key="staked")
        self.add_column("Leading", key="leading")
        self.add_column("Ends in", key="remaining")
        self.add_column("Question", key="question")

    def refresh_rows(self, session: MarketSession) -> None:
        self._ensure_columns()
        self.clear()
        now = session.now()
        for m in session.view(now=now):
            probabilities = outcome_probabilities(m)
            lead = max(range(len(m.outcomes)), key=lambda i: probabilities[i])
            self.add_row(
                str(m.market_id),
                market_status(m, now).value,
                format_amount(m.total_staked),
                f"{m.outcomes[lead]} {format_percent(probabilities[lead])}%",
                format_time_remaining(m.deadline, now),
                m.question[:60],
                key=str(m.market_id),
            )

    def tick(self, session: MarketSession) -> None:
        """Update countdown and status cells only. No contract reads."""
        now = session.now()
        for m in session.snapshot.markets:
            key = str(m.market_id)
            if key not in self.rows:
                continue
            self.update_cell(key, "remaining", format_time_remaining(m.deadline, now))
            self.update_cell(key, "status", market_status(m, now).value)


class PredMarketTUI(App[None]):
    """PredMarket TUI - markets and your stats."""

    TITLE = "PredMarket"
    BINDINGS = [("q", "quit", "Quit"), ("r", "refresh", "Refresh")]

    def __init__(self, session: MarketSession, tick_interval_sec: float = 1.0, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._session = session
        self._tick_interval_sec = tick_interval_sec
        self._refresh_task: asyncio.Task[None] | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield StatsPanel(id="stats")
        yield MarketTable(id="markets")
        yield Footer()

    def on_mount(self) -> None:
        self.action_refresh()
        self.set_interval(self._tick_interval_sec, self._tick)

    def action_refresh(self) -> None:
        if self._refresh_task is not None and not self._refresh_task.done():
            return
        self.query_one(StatsPanel).status = "Refreshing..."
        self._refresh_task = asyncio.create_task(self._refresh())

    async def _refresh(self) -> None:
        snapshot = await self._session.refresh()
        panel = self.query_one(StatsPanel)
        panel.status = f"{len(snapshot.markets)}/{snapshot.market_count} markets"
        if snapshot.skipped:
            panel.status += f" ({len(snapshot.skipped)} unreadable)"
        stats = self._session.stats()
        if stats is None:
            panel.summary = "Read-only: no viewer address"
        else:
            panel.summary = (
                f"Win rate {stats.win_rate}%  |  Earnings {stats.total_earnings} ETH  |  "
                f"Created {stats.markets_created}  |  Won {stats.markets_won}"
            )
        self.query_one(MarketTable).refresh_rows(self._session)

    def _tick(self) -> None:
        self.query_one(MarketTable).tick(self._session)

    def on_unmount(self) -> None:
        if self._refresh_task and not self._refresh_task.done():
            self._refresh_task.cancel()


def run_tui(settings: Any, viewer: str | None = None) -> None:
    """Entry point: build session and run TUI."""
    session = build_session(settings, viewer=viewer)
    app = PredMarketTUI(session, tick_interval_sec=settings.tick_interval_sec)
    app.run()
