"""Viewer statistics from a snapshot - created, won, lost, win rate, estimated earnings."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from predmarket.models.market import ZERO, Market, ViewerStakes, stake_of
from predmarket.models.stats import ViewerStats
from predmarket.query.display import format_amount, format_percent


def estimated_payout(market: Market, stake: Decimal) -> Decimal:
    """Pari-mutuel payout for a winning stake: stake plus its share of the losing pool.

    payout = s + (T - W) * s / W, with W the winning-outcome total and T the
    market total. W == 0 cannot happen while s > 0 unless the contract data is
    inconsistent; the stake alone is returned then.
    """
    if stake <= 0:
        return ZERO
    winning_total = market.outcome_stakes[market.winning_outcome]
    if winning_total <= 0:
        return stake
    loser_pool = market.total_staked - winning_total
    return stake + loser_pool * stake / winning_total


def compute_stats(
    markets: Iterable[Market],
    viewer_stakes: ViewerStakes,
    viewer: str | None,
) -> ViewerStats | None:
    """Aggregate stats for viewer; None without a viewer.

    A resolved market counts as won if the viewer staked on the winning outcome,
    and as lost only if the winning stake is zero and some losing stake is
    positive. Markets without any viewer stake count for neither.
    """
    if not viewer:
        return None
    created = won = lost = 0
    earnings = ZERO
    for m in markets:
        if m.is_owned_by(viewer):
            created += 1
        if not m.resolved:
            continue
        winning_stake = stake_of(viewer_stakes, m.market_id, m.winning_outcome)
        if winning_stake > 0:
            won += 1
            earnings += estimated_payout(m, winning_stake)
            continue
        has_losing_stake = any(
            stake_of(viewer_stakes, m.market_id, idx) > 0
            for idx in range(len(m.outcomes))
            if idx != m.winning_outcome
        )
        if has_losing_stake:
            lost += 1

    resolved_bets = won + lost
    win_rate = Decimal(won) / Decimal(resolved_bets) * 100 if resolved_bets else ZERO
    return ViewerStats(
        viewer=viewer,
        markets_created=created,
        markets_won=won,
        markets_lost=lost,
        total_resolved_bets=resolved_bets,
        win_rate=format_percent(win_rate),
        total_earnings=format_amount(earnings),
    )
